# src/streamwire/core/plan_parser.py
"""Execution plan parsing.

Turns the XML form of a plan into an ExecutionPlan. The document lists
components by section; sections are read in a fixed order (receivers,
processors, publishers, triggers) and components keep their document order
within each section::

    <execution-plan name="StockAnalysis">
      <event-receiver name="StockReceiver" parallel="1">
        <streams>
          <stream>define stream StockStream (symbol string, price float);</stream>
        </streams>
      </event-receiver>
      <event-processor name="Filter" parallel="2" enforce-parallelism="true">
        <input-streams>
          <stream partition="symbol">define stream StockStream (symbol string, price float);</stream>
        </input-streams>
        <queries>from StockStream[price > 100] select * insert into HighPrice;</queries>
        <output-streams>
          <stream>define stream HighPrice (symbol string, price float);</stream>
        </output-streams>
      </event-processor>
      <event-publisher name="Alerts" parallel="1">
        <input-streams>
          <stream>define stream HighPrice (symbol string, price float);</stream>
        </input-streams>
      </event-publisher>
      <trigger name="Tick">
        <trigger-definition>define trigger Tick at every 5 sec;</trigger-definition>
        <output-stream>Tick</output-stream>
      </trigger>
    </execution-plan>

Stream ids come from the definitions themselves, so the same stream may be
spelled with different annotations by different components.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from streamwire.contracts import ComponentKind, ComponentName, ComponentSpec, ConfigurationError, ExecutionPlan, StreamId
from streamwire.core.logging import get_logger
from streamwire.core.schema import parse_stream_definition

logger = get_logger(__name__)

RECEIVER_TAG = "event-receiver"
PROCESSOR_TAG = "event-processor"
PUBLISHER_TAG = "event-publisher"
TRIGGER_TAG = "trigger"

NAME = "name"
PARALLEL = "parallel"
ENFORCE_PARALLELISM = "enforce-parallelism"
PARTITION = "partition"

STREAMS = "streams"
INPUT_STREAMS = "input-streams"
OUTPUT_STREAMS = "output-streams"
STREAM = "stream"
QUERIES = "queries"
TABLE_DEFINITIONS = "table-definitions"
TRIGGER_DEFINITION = "trigger-definition"
OUTPUT_STREAM = "output-stream"

# Triggers run as generator nodes named after the trigger
TRIGGER_SPOUT_PREFIX = "trigger_spout"


@dataclass
class _StreamSection:
    """Streams declared under one <input-streams>/<output-streams>/<streams> element."""

    streams: list[StreamId] = field(default_factory=list)
    definitions: dict[StreamId, str] = field(default_factory=dict)
    partitions: dict[StreamId, str] = field(default_factory=dict)


def _require_attribute(element: ET.Element, attribute: str, component: str | None = None) -> str:
    value = element.get(attribute)
    if value is None or not value.strip():
        where = f"'{component}'" if component else f"<{element.tag}>"
        raise ConfigurationError(f"Missing required attribute '{attribute}' on {where}", component=component)
    return value.strip()


def _parse_parallelism(element: ET.Element, component: str) -> int:
    raw = _require_attribute(element, PARALLEL, component)
    try:
        parallelism = int(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid parallelism '{raw}' for component '{component}': expected a positive integer",
            component=component,
        ) from None
    if parallelism < 1:
        raise ConfigurationError(
            f"Invalid parallelism {parallelism} for component '{component}': expected a positive integer",
            component=component,
        )
    return parallelism


def _parse_flag(element: ET.Element, attribute: str) -> bool:
    return (element.get(attribute) or "").strip().lower() == "true"


def _text(element: ET.Element | None) -> str:
    if element is None:
        return ""
    return "".join(element.itertext()).strip()


def _parse_streams(container: ET.Element | None, component: str, *, section: str, required: bool) -> _StreamSection:
    result = _StreamSection()
    if container is None:
        if required:
            raise ConfigurationError(f"Component '{component}' is missing <{section}>", component=component)
        return result

    for stream_element in container.findall(STREAM):
        text = _text(stream_element)
        if not text:
            raise ConfigurationError(f"Component '{component}' has an empty <{STREAM}> in <{section}>", component=component)
        try:
            stream_id = parse_stream_definition(text).stream_id
        except ConfigurationError as e:
            raise ConfigurationError(f"Component '{component}': {e}", component=component) from e
        if stream_id in result.definitions:
            raise ConfigurationError(
                f"Component '{component}' declares stream '{stream_id}' twice in <{section}>",
                component=component,
            )
        result.streams.append(stream_id)
        result.definitions[stream_id] = text

        partition = stream_element.get(PARTITION)
        if partition is not None:
            if not partition.strip():
                raise ConfigurationError(
                    f"Component '{component}' declares an empty partition field on stream '{stream_id}'",
                    component=component,
                )
            result.partitions[stream_id] = partition.strip()
    return result


def _parse_query(element: ET.Element, component: str, *, required: bool) -> str | None:
    queries = element.find(QUERIES)
    tables = element.find(TABLE_DEFINITIONS)
    if queries is None:
        if required:
            raise ConfigurationError(f"Component '{component}' is missing <{QUERIES}>", component=component)
        if tables is None:
            return None
    # Table definitions must precede the queries that use them
    query = _text(tables) + _text(queries)
    return query or None


def _parse_receiver(element: ET.Element) -> ComponentSpec:
    name = _require_attribute(element, NAME)
    streams = _parse_streams(element.find(STREAMS), name, section=STREAMS, required=True)
    if streams.partitions:
        raise ConfigurationError(f"Receiver '{name}' cannot partition the streams it emits", component=name)
    return ComponentSpec(
        name=ComponentName(name),
        kind=ComponentKind.SOURCE,
        parallelism=_parse_parallelism(element, name),
        output_streams=tuple(streams.streams),
        stream_definitions=streams.definitions,
    )


def _parse_processor(element: ET.Element) -> ComponentSpec:
    name = _require_attribute(element, NAME)
    inputs = _parse_streams(element.find(INPUT_STREAMS), name, section=INPUT_STREAMS, required=True)
    outputs = _parse_streams(element.find(OUTPUT_STREAMS), name, section=OUTPUT_STREAMS, required=False)
    if outputs.partitions:
        raise ConfigurationError(f"Component '{name}' declares partition fields on output streams", component=name)
    return ComponentSpec(
        name=ComponentName(name),
        kind=ComponentKind.PROCESSOR,
        parallelism=_parse_parallelism(element, name),
        enforce_parallelism=_parse_flag(element, ENFORCE_PARALLELISM),
        input_streams=tuple(inputs.streams),
        output_streams=tuple(outputs.streams),
        partition_fields=inputs.partitions,
        stream_definitions={**outputs.definitions, **inputs.definitions},
        query=_parse_query(element, name, required=True),
    )


def _parse_publisher(element: ET.Element) -> ComponentSpec:
    name = _require_attribute(element, NAME)
    inputs = _parse_streams(element.find(INPUT_STREAMS), name, section=INPUT_STREAMS, required=True)
    outputs = _parse_streams(element.find(OUTPUT_STREAMS), name, section=OUTPUT_STREAMS, required=False)
    if outputs.partitions:
        raise ConfigurationError(f"Component '{name}' declares partition fields on output streams", component=name)
    return ComponentSpec(
        name=ComponentName(name),
        kind=ComponentKind.SINK,
        parallelism=_parse_parallelism(element, name),
        input_streams=tuple(inputs.streams),
        output_streams=tuple(outputs.streams),
        partition_fields=inputs.partitions,
        stream_definitions={**outputs.definitions, **inputs.definitions},
        query=_parse_query(element, name, required=False),
    )


def _parse_trigger(element: ET.Element) -> ComponentSpec:
    trigger_name = _require_attribute(element, NAME)
    name = f"{TRIGGER_SPOUT_PREFIX}_{trigger_name}"

    definition = _text(element.find(TRIGGER_DEFINITION))
    if not definition:
        raise ConfigurationError(f"Trigger '{trigger_name}' is missing <{TRIGGER_DEFINITION}>", component=name)
    output_stream = _text(element.find(OUTPUT_STREAM))
    if not output_stream:
        raise ConfigurationError(f"Trigger '{trigger_name}' is missing <{OUTPUT_STREAM}>", component=name)

    return ComponentSpec(
        name=ComponentName(name),
        kind=ComponentKind.TRIGGER,
        parallelism=1,
        output_streams=(StreamId(output_stream),),
        trigger_definition=definition,
    )


_SECTIONS = (
    (RECEIVER_TAG, _parse_receiver),
    (PROCESSOR_TAG, _parse_processor),
    (PUBLISHER_TAG, _parse_publisher),
    (TRIGGER_TAG, _parse_trigger),
)


def parse_plan(plan_xml: str | bytes, *, name: str | None = None) -> ExecutionPlan:
    """Parse an XML execution plan.

    Args:
        plan_xml: Plan document; bytes are decoded per the XML declaration
        name: Plan name; overrides the root element's ``name`` attribute

    Returns:
        ExecutionPlan with components in section order

    Raises:
        ConfigurationError: If the document is malformed or a component is invalid
    """
    try:
        root = ET.fromstring(plan_xml)
    except ET.ParseError as e:
        raise ConfigurationError(f"Malformed plan document: {e}") from e

    plan_name = name or (root.get(NAME) or "").strip()
    if not plan_name:
        raise ConfigurationError("Plan has no name: set the 'name' attribute on the root element")

    components: list[ComponentSpec] = []
    for tag, parse_component in _SECTIONS:
        for element in root.findall(tag):
            components.append(parse_component(element))

    logger.debug("Parsed execution plan", plan=plan_name, components=len(components))
    return ExecutionPlan(name=plan_name, components=tuple(components))
