"""Partition field validation.

A consumer may partition an input stream on one attribute. The attribute
must exist on the stream's schema; a missing attribute fails the build
instead of silently falling back to shuffle grouping.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

from streamwire.contracts import ComponentSpec, ConfigurationError, PartitionFieldError, StreamDefinition
from streamwire.core.schema import parse_stream_definition

SchemaResolver: TypeAlias = Callable[[str], StreamDefinition]


def validate_partition_field(
    stream_definition_text: str,
    field: str,
    *,
    resolver: SchemaResolver = parse_stream_definition,
    component: str | None = None,
) -> StreamDefinition:
    """Check that ``field`` is an attribute of the defined stream.

    Args:
        stream_definition_text: Definition of the partitioned stream
        field: Declared partition field
        resolver: Parses definition text into a StreamDefinition
        component: Declaring component, for error context

    Returns:
        The parsed stream definition

    Raises:
        PartitionFieldError: If the stream has no such attribute
        ConfigurationError: If the definition cannot be parsed
    """
    definition = resolver(stream_definition_text)
    if not definition.has_attribute(field):
        raise PartitionFieldError(definition.stream_id, field, definition.attributes, component=component)
    return definition


def validate_partition_fields(
    component: ComponentSpec,
    *,
    resolver: SchemaResolver = parse_stream_definition,
) -> None:
    """Validate every partition annotation of a component, in input order."""
    for stream in component.input_streams:
        field = component.partition_field(stream)
        if field is None:
            continue
        text = component.definition_of(stream)
        if text is None:
            raise ConfigurationError(
                f"Component '{component.name}' partitions stream '{stream}' on '{field}' "
                "but the plan carries no definition for that stream",
                component=component.name,
            )
        definition = validate_partition_field(text, field, resolver=resolver, component=component.name)
        if definition.stream_id != stream:
            raise ConfigurationError(
                f"Component '{component.name}' maps stream '{stream}' to a definition of '{definition.stream_id}'",
                component=component.name,
            )
