"""Core infrastructure: Configuration, Logging, Plan parsing, Topology, Canonical."""

from streamwire.core.canonical import (
    CANONICAL_VERSION,
    canonical_json,
    compute_topology_hash,
    stable_hash,
)
from streamwire.core.config import (
    LoggingSettings,
    RuntimeSettings,
    StreamwireSettings,
    load_settings,
)
from streamwire.core.logging import (
    configure_logging,
    get_logger,
    plan_log_context,
)
from streamwire.core.plan_parser import parse_plan
from streamwire.core.schema import parse_stream_definition
from streamwire.core.topology import (
    TopologyGraph,
    build_topology,
    compile_plan,
    plan_topology,
)

__all__ = [
    "CANONICAL_VERSION",
    "LoggingSettings",
    "RuntimeSettings",
    "StreamwireSettings",
    "TopologyGraph",
    "build_topology",
    "canonical_json",
    "compile_plan",
    "compute_topology_hash",
    "configure_logging",
    "get_logger",
    "load_settings",
    "parse_plan",
    "parse_stream_definition",
    "plan_log_context",
    "plan_topology",
    "stable_hash",
]
