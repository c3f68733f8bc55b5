# src/streamwire/contracts/plan.py
"""Plan descriptor model.

A plan is a flat, ordered list of components. Each component names the
streams it reads and writes; edges are not declared anywhere and are derived
later from shared stream names.

ComponentSpec is a tagged union over ComponentKind. Code that has to treat a
kind specially matches on ``spec.kind`` exhaustively rather than testing for
individual kinds.

Descriptors are frozen after construction. Invariant violations raise
ConfigurationError from __post_init__ so malformed descriptors never reach
the topology builder.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import assert_never

from streamwire.contracts.enums import ComponentKind
from streamwire.contracts.errors import ConfigurationError
from streamwire.contracts.types import ComponentName, StreamId


@dataclass(frozen=True, slots=True)
class StreamDefinition:
    """Parsed schema of a stream.

    Attributes:
        stream_id: Stream identifier
        attributes: Attribute names in declaration order
        attribute_types: Attribute types, aligned with attributes
        text: Original definition text
    """

    stream_id: StreamId
    attributes: tuple[str, ...]
    attribute_types: tuple[str, ...]
    text: str

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes


def _duplicates(values: tuple[StreamId, ...]) -> list[str]:
    return sorted(name for name, count in Counter(values).items() if count > 1)


@dataclass(frozen=True, slots=True)
class ComponentSpec:
    """Structured descriptor of one plan component.

    partition_fields and stream_definitions are frozen to MappingProxyType
    in __post_init__; callers may pass plain dicts.
    """

    name: ComponentName
    kind: ComponentKind
    parallelism: int = 1
    enforce_parallelism: bool = False
    input_streams: tuple[StreamId, ...] = ()
    output_streams: tuple[StreamId, ...] = ()
    partition_fields: Mapping[StreamId, str] = field(default_factory=dict)
    stream_definitions: Mapping[StreamId, str] = field(default_factory=dict)
    query: str | None = None
    trigger_definition: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("Component name must be non-empty")
        if self.parallelism < 1:
            raise ConfigurationError(
                f"Component '{self.name}' parallelism must be >= 1, got {self.parallelism}",
                component=self.name,
            )

        for direction, streams in (("input", self.input_streams), ("output", self.output_streams)):
            if any(not stream for stream in streams):
                raise ConfigurationError(f"Component '{self.name}' declares an empty {direction} stream name", component=self.name)
            duplicates = _duplicates(streams)
            if duplicates:
                raise ConfigurationError(
                    f"Component '{self.name}' lists {direction} stream(s) more than once: {duplicates}",
                    component=self.name,
                )

        unknown_partitions = sorted(set(self.partition_fields) - set(self.input_streams))
        if unknown_partitions:
            raise ConfigurationError(
                f"Component '{self.name}' partitions stream(s) it does not consume: {unknown_partitions}",
                component=self.name,
            )
        if any(not field_name for field_name in self.partition_fields.values()):
            raise ConfigurationError(f"Component '{self.name}' declares an empty partition field", component=self.name)

        match self.kind:
            case ComponentKind.SOURCE | ComponentKind.TRIGGER:
                if self.input_streams:
                    raise ConfigurationError(
                        f"{self.kind.capitalize()} '{self.name}' cannot declare input streams",
                        component=self.name,
                    )
            case ComponentKind.PROCESSOR | ComponentKind.SINK:
                pass
            case _:
                assert_never(self.kind)

        # frozen=True blocks attribute assignment; object.__setattr__ is the
        # sanctioned escape hatch during initialisation.
        object.__setattr__(self, "partition_fields", MappingProxyType(dict(self.partition_fields)))
        object.__setattr__(self, "stream_definitions", MappingProxyType(dict(self.stream_definitions)))

    @property
    def has_inputs(self) -> bool:
        """Whether edges must be resolved for this component.

        Sources and triggers generate events and never consume.
        """
        match self.kind:
            case ComponentKind.SOURCE | ComponentKind.TRIGGER:
                return False
            case ComponentKind.PROCESSOR | ComponentKind.SINK:
                return True
            case _:
                assert_never(self.kind)

    @property
    def feeds_internal_streams(self) -> bool:
        """Whether this component's outputs may feed other components.

        A sink's outputs leave the system; they are never routed back in,
        even when another component consumes a stream of the same name.
        """
        match self.kind:
            case ComponentKind.SINK:
                return False
            case ComponentKind.SOURCE | ComponentKind.PROCESSOR | ComponentKind.TRIGGER:
                return True
            case _:
                assert_never(self.kind)

    def partition_field(self, stream: StreamId) -> str | None:
        """Partition field declared for an input stream, if any."""
        return self.partition_fields.get(stream)

    def definition_of(self, stream: StreamId) -> str | None:
        """Definition text for a stream this component reads or writes."""
        return self.stream_definitions.get(stream)


@dataclass(frozen=True, slots=True)
class ExecutionPlan:
    """Ordered collection of component descriptors.

    Component order is declaration order and drives every deterministic
    ordering downstream (node registration, producer index, edges).
    """

    name: str
    components: tuple[ComponentSpec, ...] = ()

    def __post_init__(self) -> None:
        duplicates = sorted(name for name, count in Counter(c.name for c in self.components).items() if count > 1)
        if duplicates:
            raise ConfigurationError(f"Plan '{self.name}' declares duplicate component name(s): {duplicates}")

    def __len__(self) -> int:
        return len(self.components)

    def by_kind(self, kind: ComponentKind) -> tuple[ComponentSpec, ...]:
        return tuple(c for c in self.components if c.kind == kind)

    def get(self, name: str) -> ComponentSpec:
        """Get a component by name.

        Raises:
            KeyError: If no component has that name
        """
        for component in self.components:
            if component.name == name:
                return component
        raise KeyError(f"Component not found: {name}")
