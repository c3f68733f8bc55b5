# tests/conftest.py
"""Shared test fixtures and helpers.

Descriptor factories:
- make_source / make_processor / make_sink / make_trigger build ComponentSpec
  instances directly, bypassing the XML parser. Stream definitions are
  generated from attribute lists so partition validation has a schema to
  check against.

Plan documents:
- plan_xml() renders a small XML plan from keyword arguments, for parser,
  builder and CLI tests that need the full path.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping, Sequence

import pytest
from hypothesis import Phase, Verbosity, settings

from streamwire.contracts import ComponentKind, ComponentName, ComponentSpec, StreamId

DEFAULT_ATTRIBUTES: tuple[str, ...] = ("userId", "amount")


def stream_definition(stream: str, attributes: Sequence[str] = DEFAULT_ATTRIBUTES) -> str:
    """Definition text for a stream whose attributes are all strings."""
    attrs = ", ".join(f"{name} string" for name in attributes)
    return f"define stream {stream} ({attrs});"


def _definitions(
    streams: Sequence[str],
    schemas: Mapping[str, Sequence[str]] | None,
) -> dict[StreamId, str]:
    schemas = schemas or {}
    return {StreamId(s): stream_definition(s, schemas.get(s, DEFAULT_ATTRIBUTES)) for s in streams}


def make_source(name: str, outputs: Sequence[str], *, parallelism: int = 1) -> ComponentSpec:
    return ComponentSpec(
        name=ComponentName(name),
        kind=ComponentKind.SOURCE,
        parallelism=parallelism,
        output_streams=tuple(StreamId(s) for s in outputs),
        stream_definitions=_definitions(outputs, None),
    )


def make_processor(
    name: str,
    inputs: Sequence[str],
    outputs: Sequence[str] = (),
    *,
    parallelism: int = 1,
    enforce_parallelism: bool = False,
    partitions: Mapping[str, str] | None = None,
    schemas: Mapping[str, Sequence[str]] | None = None,
) -> ComponentSpec:
    return ComponentSpec(
        name=ComponentName(name),
        kind=ComponentKind.PROCESSOR,
        parallelism=parallelism,
        enforce_parallelism=enforce_parallelism,
        input_streams=tuple(StreamId(s) for s in inputs),
        output_streams=tuple(StreamId(s) for s in outputs),
        partition_fields={StreamId(s): f for s, f in (partitions or {}).items()},
        stream_definitions=_definitions([*outputs, *inputs], schemas),
        query="from input select * insert into output;",
    )


def make_sink(
    name: str,
    inputs: Sequence[str],
    outputs: Sequence[str] = (),
    *,
    parallelism: int = 1,
    partitions: Mapping[str, str] | None = None,
    schemas: Mapping[str, Sequence[str]] | None = None,
) -> ComponentSpec:
    return ComponentSpec(
        name=ComponentName(name),
        kind=ComponentKind.SINK,
        parallelism=parallelism,
        input_streams=tuple(StreamId(s) for s in inputs),
        output_streams=tuple(StreamId(s) for s in outputs),
        partition_fields={StreamId(s): f for s, f in (partitions or {}).items()},
        stream_definitions=_definitions([*outputs, *inputs], schemas),
    )


def make_trigger(name: str, output: str) -> ComponentSpec:
    return ComponentSpec(
        name=ComponentName(name),
        kind=ComponentKind.TRIGGER,
        output_streams=(StreamId(output),),
        trigger_definition=f"define trigger {output} at every 5 sec;",
    )


def plan_xml(body: str, *, name: str = "TestPlan") -> str:
    """Wrap component elements in a plan document."""
    return f'<execution-plan name="{name}">\n{body}\n</execution-plan>'


PIPELINE_XML = plan_xml(
    """
    <event-receiver name="A" parallel="1">
      <streams>
        <stream>define stream s1 (userId string, amount double);</stream>
      </streams>
    </event-receiver>
    <event-processor name="B" parallel="2">
      <input-streams>
        <stream>define stream s1 (userId string, amount double);</stream>
      </input-streams>
      <queries>from s1[amount > 10] select userId, amount insert into s2;</queries>
      <output-streams>
        <stream>define stream s2 (userId string, amount double);</stream>
      </output-streams>
    </event-processor>
    <event-publisher name="C" parallel="1">
      <input-streams>
        <stream>define stream s2 (userId string, amount double);</stream>
      </input-streams>
    </event-publisher>
    """,
    name="Scenario",
)


@pytest.fixture(autouse=True)
def _reset_root_handlers() -> Iterator[None]:
    """Drop handlers bound to streams captured by a finished test."""
    yield
    logging.getLogger().handlers = []


@pytest.fixture
def pipeline_xml() -> str:
    """Receiver A -> processor B -> publisher C over streams s1 and s2."""
    return PIPELINE_XML


# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
