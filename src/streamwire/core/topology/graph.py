# src/streamwire/core/topology/graph.py
"""TopologyGraph - in-process execution runtime.

Implements the TopologyRuntime registration API over a NetworkX
MultiDiGraph so compiled plans can be inspected, hashed and tested without
a distributed engine. Construction logic lives in builder.py; this module
only records registrations and answers queries about them.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, replace
from typing import Any, cast

import networkx as nx
from networkx import MultiDiGraph

from streamwire.contracts import (
    ComponentKind,
    ComponentName,
    EdgeInstruction,
    Grouping,
    NodeBehavior,
    StreamId,
    TopologyRegistrationError,
)


@dataclass(frozen=True, slots=True)
class NodeInfo:
    """Information about a registered node.

    max_parallelism is None unless the component enforces its parallelism.
    """

    name: ComponentName
    kind: ComponentKind
    parallelism: int
    behavior: NodeBehavior
    generator: bool
    max_parallelism: int | None = None


class TopologyGraph:
    """Wired topology for a compiled plan.

    Wraps NetworkX MultiDiGraph with domain-specific operations. Uses
    MultiDiGraph because one producer may feed the same consumer over
    several streams; edges are keyed by stream id.

    Handles returned by the register methods are component names.
    """

    def __init__(self) -> None:
        self._graph: MultiDiGraph[str] = nx.MultiDiGraph()
        self._edges: list[EdgeInstruction] = []

    @property
    def node_count(self) -> int:
        """Number of nodes in the graph."""
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        """Number of edges in the graph."""
        return self._graph.number_of_edges()

    def has_node(self, name: str) -> bool:
        """Check if node exists."""
        return self._graph.has_node(name)

    def get_nx_graph(self) -> MultiDiGraph[str]:
        """Return a frozen copy of the underlying NetworkX graph.

        Mutation attempts raise nx.NetworkXError.
        """
        return nx.freeze(self._graph.copy())  # type: ignore[no-any-return]

    # === TopologyRuntime ===

    def register_source(self, name: str, behavior: NodeBehavior, parallelism: int) -> Hashable:
        return self._add_node(name, behavior, parallelism, generator=True)

    def register_processing_node(self, name: str, behavior: NodeBehavior, parallelism: int) -> Hashable:
        return self._add_node(name, behavior, parallelism, generator=False)

    def cap_parallelism(self, handle: Hashable, max_tasks: int) -> None:
        info = self.get_node_info(self._require_handle(handle))
        if max_tasks < 1:
            raise TopologyRegistrationError(f"max_tasks for '{info.name}' must be >= 1, got {max_tasks}")
        self._graph.nodes[info.name]["info"] = replace(info, max_parallelism=max_tasks)

    def connect(self, producer: Hashable, consumer: Hashable, stream: StreamId, grouping: Grouping) -> None:
        """Add an edge between nodes.

        Raises:
            TopologyRegistrationError: If either handle is unknown, the consumer
                is a generator, or the edge is already registered
        """
        from_node = self._require_handle(producer)
        to_node = self._require_handle(consumer)
        if self.get_node_info(to_node).generator:
            raise TopologyRegistrationError(f"Cannot connect into generator node '{to_node}'")
        if self._graph.has_edge(from_node, to_node, key=stream):
            raise TopologyRegistrationError(f"Edge '{from_node}' -> '{to_node}' on stream '{stream}' is already registered")

        self._graph.add_edge(from_node, to_node, key=stream, stream=stream, grouping=grouping)
        self._edges.append(
            EdgeInstruction(
                producer=ComponentName(from_node),
                consumer=ComponentName(to_node),
                stream=stream,
                grouping=grouping,
            )
        )

    def build(self) -> TopologyGraph:
        return self

    # === Queries ===

    def get_node_info(self, name: str) -> NodeInfo:
        """Get NodeInfo for a node.

        Raises:
            KeyError: If node doesn't exist
        """
        if not self._graph.has_node(name):
            raise KeyError(f"Node not found: {name}")
        return cast(NodeInfo, self._graph.nodes[name]["info"])

    def nodes(self) -> list[NodeInfo]:
        """Registered nodes in registration order."""
        return [cast(NodeInfo, data["info"]) for _, data in self._graph.nodes(data=True)]

    def edges(self) -> list[EdgeInstruction]:
        """Registered edges in registration order."""
        return list(self._edges)

    def producers_of(self, consumer: str, stream: StreamId) -> list[ComponentName]:
        """Components feeding ``stream`` into ``consumer``."""
        return [edge.producer for edge in self._edges if edge.consumer == consumer and edge.stream == stream]

    def is_acyclic(self) -> bool:
        """Check if the topology has no feedback loops."""
        return nx.is_directed_acyclic_graph(self._graph)

    def to_dict(self) -> dict[str, Any]:
        """Serializable view of the topology, in registration order."""
        return {
            "nodes": [
                {
                    "name": info.name,
                    "kind": str(info.kind),
                    "parallelism": info.parallelism,
                    "max_parallelism": info.max_parallelism,
                    "behavior": info.behavior.to_dict(),
                }
                for info in self.nodes()
            ],
            "edges": [
                {
                    "from": edge.producer,
                    "to": edge.consumer,
                    "stream": edge.stream,
                    "grouping": str(edge.grouping.type),
                    "field": edge.grouping.field,
                }
                for edge in self._edges
            ],
        }

    # === Internals ===

    def _add_node(self, name: str, behavior: NodeBehavior, parallelism: int, *, generator: bool) -> ComponentName:
        if self._graph.has_node(name):
            raise TopologyRegistrationError(f"Component '{name}' is already registered")
        if parallelism < 1:
            raise TopologyRegistrationError(f"Parallelism for '{name}' must be >= 1, got {parallelism}")
        info = NodeInfo(
            name=ComponentName(name),
            kind=behavior.kind,
            parallelism=parallelism,
            behavior=behavior,
            generator=generator,
        )
        self._graph.add_node(name, info=info)
        return info.name

    def _require_handle(self, handle: Hashable) -> str:
        if not isinstance(handle, str) or not self._graph.has_node(handle):
            raise TopologyRegistrationError(f"Unknown node handle: {handle!r}")
        return handle
