# src/streamwire/core/topology/resolver.py
"""Edge resolution.

For every input stream of a consumer, find the components producing it and
emit one EdgeInstruction per eligible producer. Two kinds of producer are
never eligible:

- sinks: their outputs are published outside the system
- the consumer itself: no self loops

The grouping is chosen per (consumer, input stream) pair, so every producer
feeding the same input uses the same grouping.

Resolution is pure. It reads the producer index and returns instructions;
registering them with a runtime is the builder's job.
"""

from __future__ import annotations

import difflib

from streamwire.contracts import ComponentSpec, EdgeInstruction, Grouping, StreamId, StreamResolutionError
from streamwire.core.logging import get_logger
from streamwire.core.topology.index import ProducerIndex

logger = get_logger(__name__)


def _suggest_similar(name: str, candidates: list[str]) -> list[str]:
    """Suggest similar stream names for resolution errors."""
    return difflib.get_close_matches(name, candidates, n=3, cutoff=0.6)


def select_grouping(consumer: ComponentSpec, stream: StreamId) -> Grouping:
    """Grouping for every edge feeding ``stream`` into ``consumer``.

    Field grouping when the consumer partitions the stream, shuffle otherwise.
    """
    field = consumer.partition_field(stream)
    if field is None:
        return Grouping.shuffle()
    return Grouping.fields(field)


def resolve_edges(consumer: ComponentSpec, index: ProducerIndex) -> list[EdgeInstruction]:
    """Resolve the incoming edges of one consumer.

    Instructions are ordered by the consumer's input streams, then by
    producer declaration order.

    Args:
        consumer: Component whose inputs are resolved
        index: Producer index over the whole plan

    Returns:
        Edge instructions for this consumer

    Raises:
        StreamResolutionError: If an input stream has no eligible producer
    """
    instructions: list[EdgeInstruction] = []
    seen: set[tuple[str, str, str]] = set()

    for stream in consumer.input_streams:
        if stream not in index:
            raise StreamResolutionError(
                consumer.name,
                stream,
                _suggest_similar(stream, sorted(index.keys())),
            )

        grouping = select_grouping(consumer, stream)
        resolved = False
        for producer in index[stream]:
            if not producer.feeds_internal_streams:
                continue
            if producer.name == consumer.name:
                continue

            instruction = EdgeInstruction(
                producer=producer.name,
                consumer=consumer.name,
                stream=stream,
                grouping=grouping,
            )
            resolved = True
            if instruction.key in seen:
                continue
            seen.add(instruction.key)
            instructions.append(instruction)
            logger.debug(
                "Connecting components",
                consumer=consumer.name,
                stream=stream,
                producer=producer.name,
                grouping=grouping.describe(),
            )

        if not resolved:
            # Only sinks or the consumer itself produce this stream
            raise StreamResolutionError(consumer.name, stream)

    return instructions
