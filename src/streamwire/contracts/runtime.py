"""Execution runtime contract.

The topology builder never talks to a concrete engine. It issues node and
edge registrations against anything satisfying TopologyRuntime; the
in-process implementation is streamwire.core.topology.TopologyGraph.

Handles returned by registration calls are opaque to the builder. Each
component owns exactly one handle, assigned once.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from streamwire.contracts.enums import ComponentKind
from streamwire.contracts.routing import Grouping
from streamwire.contracts.types import StreamId


@dataclass(frozen=True, slots=True)
class PlanContext:
    """Deployment context passed to every node behavior.

    Attributes:
        plan_name: Execution plan name
        tenant_id: Tenant the plan is deployed for
        heartbeat_interval_ms: Management heartbeat interval for receivers and publishers
    """

    plan_name: str
    tenant_id: int = -1234
    heartbeat_interval_ms: int = 10000


@dataclass(frozen=True, slots=True)
class NodeBehavior:
    """What a registered node does at runtime.

    The builder fills this in from the component descriptor; the runtime
    uses it to instantiate generators and processing nodes.
    """

    kind: ComponentKind
    context: PlanContext
    input_definitions: tuple[str, ...] = ()
    output_definitions: tuple[str, ...] = ()
    output_streams: tuple[StreamId, ...] = ()
    query: str | None = None
    trigger_definition: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": str(self.kind),
            "plan_name": self.context.plan_name,
            "tenant_id": self.context.tenant_id,
            "heartbeat_interval_ms": self.context.heartbeat_interval_ms,
            "input_definitions": list(self.input_definitions),
            "output_definitions": list(self.output_definitions),
            "output_streams": list(self.output_streams),
            "query": self.query,
            "trigger_definition": self.trigger_definition,
        }


@runtime_checkable
class TopologyRuntime(Protocol):
    """Registration API of an execution runtime.

    Lifecycle:
    1. register_source / register_processing_node for every component
    2. cap_parallelism for components that enforce their parallelism
    3. connect for every resolved edge
    4. build() to obtain the finished topology handle
    """

    def register_source(self, name: str, behavior: NodeBehavior, parallelism: int) -> Hashable:
        """Register a generating node with no upstream."""
        ...

    def register_processing_node(self, name: str, behavior: NodeBehavior, parallelism: int) -> Hashable:
        """Register a node that consumes streams."""
        ...

    def connect(self, producer: Hashable, consumer: Hashable, stream: StreamId, grouping: Grouping) -> None:
        """Route a producer's stream into a consumer using the given grouping."""
        ...

    def cap_parallelism(self, handle: Hashable, max_tasks: int) -> None:
        """Limit a node to at most max_tasks parallel tasks."""
        ...

    def build(self) -> Any:
        """Return the assembled topology."""
        ...
