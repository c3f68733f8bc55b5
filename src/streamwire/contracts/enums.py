"""Kinds and modes shared across plan, routing and runtime boundaries."""

from enum import StrEnum


class ComponentKind(StrEnum):
    """Kind of component in an execution plan.

    Values:
        SOURCE: Event receiver. Emits the streams it imports, has no inputs.
        PROCESSOR: Runs a query over its input streams, emits output streams.
        SINK: Event publisher. Consumes streams and forwards them externally.
        TRIGGER: Timer-driven generator with a single output stream.
    """

    SOURCE = "source"
    PROCESSOR = "processor"
    SINK = "sink"
    TRIGGER = "trigger"


class GroupingType(StrEnum):
    """How events on an edge are distributed across consumer instances.

    SHUFFLE: Round-robin across the consumer's parallel instances.
    FIELDS: Events with equal values of one attribute reach the same instance.
    """

    SHUFFLE = "shuffle"
    FIELDS = "fields"
