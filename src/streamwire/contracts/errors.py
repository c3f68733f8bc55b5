"""Error taxonomy for plan compilation.

Every error here is fatal to the build in progress. Nothing is retried or
downgraded to a warning: a partially wired topology can drop events silently.
"""

from __future__ import annotations


class PlanError(Exception):
    """Base exception for all plan compilation errors."""

    pass


class ConfigurationError(PlanError, ValueError):
    """Raised when a plan or component descriptor is structurally invalid.

    Covers missing attributes, unparsable parallelism values, malformed
    stream definitions and descriptor invariants (duplicate names, streams
    listed twice).
    """

    def __init__(self, message: str, *, component: str | None = None) -> None:
        super().__init__(message)
        self.component = component


class StreamResolutionError(PlanError):
    """Raised when a consumed stream has no eligible producer in the plan."""

    def __init__(self, consumer: str, stream: str, suggestions: list[str] | None = None) -> None:
        self.consumer = consumer
        self.stream = stream
        self.suggestions = suggestions or []
        hint = f" Did you mean: {', '.join(self.suggestions)}?" if self.suggestions else ""
        super().__init__(f"No producer for stream '{stream}' consumed by component '{consumer}'.{hint}")


class PartitionFieldError(PlanError):
    """Raised when a partition field is not an attribute of its stream."""

    def __init__(
        self,
        stream: str,
        field: str,
        attributes: tuple[str, ...],
        *,
        component: str | None = None,
    ) -> None:
        self.stream = stream
        self.field = field
        self.attributes = attributes
        self.component = component
        where = f" (declared by '{component}')" if component else ""
        super().__init__(
            f"Partition field '{field}' is not an attribute of stream '{stream}'{where}. "
            f"Available attributes: {', '.join(attributes) if attributes else '(none)'}"
        )


class TopologyRegistrationError(PlanError):
    """Raised when the runtime receives an invalid registration call.

    Duplicate component names or edges between unknown handles indicate a
    bug in the caller, not a bad plan.
    """

    pass
