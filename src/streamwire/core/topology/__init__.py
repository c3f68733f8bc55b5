# src/streamwire/core/topology/__init__.py
"""Topology construction: producer index, edge resolution, assembly.

Package re-exports for the public topology API.
"""

from streamwire.core.topology.builder import (
    TopologyPlan,
    build_topology,
    compile_plan,
    plan_topology,
    register_topology,
)
from streamwire.core.topology.graph import NodeInfo, TopologyGraph
from streamwire.core.topology.index import ProducerIndex, build_producer_index
from streamwire.core.topology.partitioning import validate_partition_field, validate_partition_fields
from streamwire.core.topology.resolver import resolve_edges, select_grouping

__all__ = [
    "NodeInfo",
    "ProducerIndex",
    "TopologyGraph",
    "TopologyPlan",
    "build_producer_index",
    "build_topology",
    "compile_plan",
    "plan_topology",
    "register_topology",
    "resolve_edges",
    "select_grouping",
    "validate_partition_field",
    "validate_partition_fields",
]
