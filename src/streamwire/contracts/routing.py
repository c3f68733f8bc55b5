"""Edge and grouping definitions.

These types answer: "How do events reach the next component?"
"""

from dataclasses import dataclass

from streamwire.contracts.enums import GroupingType
from streamwire.contracts.types import ComponentName, StreamId


@dataclass(frozen=True, slots=True)
class Grouping:
    """Distribution policy for one edge.

    Use the factory methods to create instances.

    Invariants (enforced by __post_init__):
    - FIELDS must name a non-empty field
    - SHUFFLE must not name a field
    """

    type: GroupingType
    field: str | None = None

    def __post_init__(self) -> None:
        if self.type == GroupingType.FIELDS and not self.field:
            raise ValueError("FIELDS grouping requires a field name")
        if self.type == GroupingType.SHUFFLE and self.field is not None:
            raise ValueError("SHUFFLE grouping cannot name a field")

    @classmethod
    def shuffle(cls) -> "Grouping":
        return cls(GroupingType.SHUFFLE)

    @classmethod
    def fields(cls, field: str) -> "Grouping":
        return cls(GroupingType.FIELDS, field)

    def describe(self) -> str:
        """Human-readable form, e.g. ``fields(userId)``."""
        if self.type == GroupingType.FIELDS:
            return f"fields({self.field})"
        return "shuffle"


@dataclass(frozen=True, slots=True)
class EdgeInstruction:
    """A resolved connection waiting to be registered with the runtime."""

    producer: ComponentName
    consumer: ComponentName
    stream: StreamId
    grouping: Grouping

    @property
    def key(self) -> tuple[ComponentName, ComponentName, StreamId]:
        """(producer, consumer, stream) triple; unique within a topology."""
        return (self.producer, self.consumer, self.stream)
