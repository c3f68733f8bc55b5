# src/streamwire/core/topology/builder.py
"""Topology assembly from an execution plan.

Wires a parsed plan into a runtime in two phases:

1. Planning (pure): build the producer index, then for every processor and
   sink validate its partition fields and resolve its incoming edges.
2. Registration: register every component as a node, cap parallelism where
   enforcement is requested, then connect every resolved edge.

All resolution and validation failures surface during planning, before the
runtime sees a single call, so a failed build never leaves a partially
registered topology behind.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, assert_never

from streamwire.contracts import (
    ComponentKind,
    ComponentSpec,
    EdgeInstruction,
    ExecutionPlan,
    NodeBehavior,
    PlanContext,
    TopologyRuntime,
)
from streamwire.core.logging import get_logger, plan_log_context
from streamwire.core.schema import parse_stream_definition
from streamwire.core.topology.index import ProducerIndex, build_producer_index
from streamwire.core.topology.partitioning import SchemaResolver, validate_partition_fields
from streamwire.core.topology.resolver import resolve_edges

if TYPE_CHECKING:
    from streamwire.core.config import StreamwireSettings
    from streamwire.core.topology.graph import TopologyGraph

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TopologyPlan:
    """Result of the planning phase: everything needed to register a topology."""

    plan: ExecutionPlan
    index: ProducerIndex
    instructions: tuple[EdgeInstruction, ...]


def plan_topology(
    plan: ExecutionPlan,
    *,
    resolver: SchemaResolver = parse_stream_definition,
) -> TopologyPlan:
    """Resolve every edge of a plan without touching a runtime.

    Raises:
        PartitionFieldError: If a partition field is missing from its stream
        StreamResolutionError: If a consumed stream has no eligible producer
        ConfigurationError: If a partitioned stream has no usable definition
    """
    index = build_producer_index(plan.components)
    instructions: list[EdgeInstruction] = []
    for component in plan.components:
        if not component.has_inputs:
            continue
        validate_partition_fields(component, resolver=resolver)
        instructions.extend(resolve_edges(component, index))
    return TopologyPlan(plan=plan, index=index, instructions=tuple(instructions))


def behavior_for(component: ComponentSpec, context: PlanContext) -> NodeBehavior:
    """Describe what the runtime should run for a component."""

    def definitions(streams: tuple[str, ...]) -> tuple[str, ...]:
        # Trigger outputs and hand-built descriptors may carry no definition text
        return tuple(text for text in (component.stream_definitions.get(s) for s in streams) if text is not None)

    return NodeBehavior(
        kind=component.kind,
        context=context,
        input_definitions=definitions(component.input_streams),
        output_definitions=definitions(component.output_streams),
        output_streams=component.output_streams,
        query=component.query,
        trigger_definition=component.trigger_definition,
    )


def _register_node(runtime: TopologyRuntime, component: ComponentSpec, context: PlanContext) -> Hashable:
    behavior = behavior_for(component, context)
    match component.kind:
        case ComponentKind.SOURCE | ComponentKind.TRIGGER:
            return runtime.register_source(component.name, behavior, component.parallelism)
        case ComponentKind.PROCESSOR | ComponentKind.SINK:
            handle = runtime.register_processing_node(component.name, behavior, component.parallelism)
            if component.enforce_parallelism:
                runtime.cap_parallelism(handle, component.parallelism)
            return handle
        case _:
            assert_never(component.kind)


def register_topology(topology: TopologyPlan, runtime: TopologyRuntime, *, context: PlanContext) -> Any:
    """Register a planned topology with a runtime and return its build handle."""
    handles: dict[str, Hashable] = {}
    for component in topology.plan.components:
        handles[component.name] = _register_node(runtime, component, context)

    for instruction in topology.instructions:
        runtime.connect(
            handles[instruction.producer],
            handles[instruction.consumer],
            instruction.stream,
            instruction.grouping,
        )

    return runtime.build()


def build_topology(
    plan: ExecutionPlan,
    runtime: TopologyRuntime,
    *,
    context: PlanContext | None = None,
    resolver: SchemaResolver = parse_stream_definition,
) -> Any:
    """Wire a plan into a runtime.

    Args:
        plan: Parsed execution plan
        runtime: Registration API of the target runtime; must be fresh
        context: Deployment context; defaults to the plan's name with default tenant
        resolver: Schema resolver used to validate partition fields

    Returns:
        Whatever runtime.build() returns

    Raises:
        PlanError: On the first resolution or validation failure
    """
    context = context or PlanContext(plan_name=plan.name)
    with plan_log_context(context.plan_name, context.tenant_id):
        logger.info("Planning topology", components=len(plan))

        topology = plan_topology(plan, resolver=resolver)
        handle = register_topology(topology, runtime, context=context)

        logger.info(
            "Topology registered",
            nodes=len(plan),
            edges=len(topology.instructions),
        )
    return handle


def compile_plan(
    plan_xml: str | bytes,
    *,
    settings: StreamwireSettings | None = None,
) -> TopologyGraph:
    """Parse an XML plan and wire it into a fresh TopologyGraph.

    Raises:
        PlanError: If the plan is malformed or cannot be wired
    """
    from streamwire.core.config import StreamwireSettings
    from streamwire.core.plan_parser import parse_plan
    from streamwire.core.topology.graph import TopologyGraph

    settings = settings or StreamwireSettings()
    plan = parse_plan(plan_xml, name=settings.plan_name)
    graph: TopologyGraph = build_topology(plan, TopologyGraph(), context=settings.plan_context(plan.name))
    return graph
