"""Stream producer index.

Maps each stream id to the components that declare it as an output, in
plan declaration order. Built once per compilation, read-only afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TypeAlias

from streamwire.contracts import ComponentSpec, StreamId

ProducerIndex: TypeAlias = Mapping[StreamId, tuple[ComponentSpec, ...]]


def build_producer_index(components: Iterable[ComponentSpec]) -> ProducerIndex:
    """Index components by the streams they produce.

    A stream nobody produces has no key at all; lookups must treat absence
    as "never produced" rather than expecting an empty tuple. Sinks are
    indexed like every other component. Whether their outputs may feed
    anything is decided by the resolver.

    Args:
        components: Components in declaration order

    Returns:
        Read-only mapping of stream id to producing components
    """
    producers: dict[StreamId, list[ComponentSpec]] = {}
    for component in components:
        for stream in component.output_streams:
            producers.setdefault(stream, []).append(component)
    return MappingProxyType({stream: tuple(specs) for stream, specs in producers.items()})
