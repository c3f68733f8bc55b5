"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core.
Settings classes are NOT re-exported here - import them from
streamwire.core.config.

Import patterns:
    # Contracts (lightweight, no heavy dependencies)
    from streamwire.contracts import ComponentSpec, Grouping, StreamResolutionError

    # Settings classes (from core, pulls in pydantic/dynaconf)
    from streamwire.core.config import StreamwireSettings
"""

from streamwire.contracts.enums import ComponentKind, GroupingType
from streamwire.contracts.errors import (
    ConfigurationError,
    PartitionFieldError,
    PlanError,
    StreamResolutionError,
    TopologyRegistrationError,
)
from streamwire.contracts.plan import ComponentSpec, ExecutionPlan, StreamDefinition
from streamwire.contracts.routing import EdgeInstruction, Grouping
from streamwire.contracts.runtime import NodeBehavior, PlanContext, TopologyRuntime
from streamwire.contracts.types import ComponentName, StreamId

__all__ = [
    "ComponentKind",
    "ComponentName",
    "ComponentSpec",
    "ConfigurationError",
    "EdgeInstruction",
    "ExecutionPlan",
    "Grouping",
    "GroupingType",
    "NodeBehavior",
    "PartitionFieldError",
    "PlanContext",
    "PlanError",
    "StreamDefinition",
    "StreamId",
    "StreamResolutionError",
    "TopologyRegistrationError",
    "TopologyRuntime",
]
