# src/streamwire/core/canonical.py
"""
Canonical JSON serialization for deterministic hashing.

Serializes per RFC 8785/JCS (rfc8785 package) so the same topology always
hashes to the same digest, independent of dict ordering or whitespace.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Any

import rfc8785

if TYPE_CHECKING:
    from streamwire.core.topology.graph import TopologyGraph

# Version string reported alongside every topology hash
CANONICAL_VERSION = "sha256-rfc8785-v1"


def canonical_json(obj: Any) -> str:
    """Produce canonical JSON for hashing.

    Args:
        obj: Data structure to serialize

    Returns:
        Canonical JSON string (no whitespace, sorted keys)

    Raises:
        rfc8785.CanonicalizationError: If data contains non-finite floats or
            values that cannot be serialized
    """
    result: bytes = rfc8785.dumps(obj)
    return result.decode("utf-8")


def stable_hash(obj: Any) -> str:
    """Compute stable hash of object.

    The digest scheme is named by CANONICAL_VERSION.

    Args:
        obj: Data structure to hash

    Returns:
        SHA-256 hex digest of canonical JSON
    """
    canonical = canonical_json(obj)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_topology_hash(graph: TopologyGraph) -> str:
    """Compute hash of the complete wired topology.

    Nodes and edges are sorted before hashing, so the digest identifies
    the topology itself rather than the order it was registered in. Any
    change to a node's behavior, parallelism or an edge's grouping changes
    the hash.
    """
    topology_data = {
        "nodes": sorted(
            [
                {
                    "name": info.name,
                    "kind": str(info.kind),
                    "parallelism": info.parallelism,
                    "max_parallelism": info.max_parallelism,
                    "behavior_hash": stable_hash(info.behavior.to_dict()),
                }
                for info in graph.nodes()
            ],
            key=lambda x: x["name"],
        ),
        "edges": sorted(
            [
                {
                    "from": edge.producer,
                    "to": edge.consumer,
                    "stream": edge.stream,
                    "grouping": str(edge.grouping.type),
                    "field": edge.grouping.field,
                }
                for edge in graph.edges()
            ],
            key=lambda x: (x["from"], x["to"], x["stream"]),
        ),
    }
    return stable_hash(topology_data)
