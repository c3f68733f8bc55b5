"""Tests for the streamwire validate and compile commands."""

import json
from pathlib import Path
from typing import Any

import pytest
import yaml
from typer.testing import CliRunner

from streamwire import __version__
from streamwire.cli import app
from streamwire.core.canonical import CANONICAL_VERSION
from tests.conftest import plan_xml

runner = CliRunner()

MISSING_PRODUCER_XML = plan_xml(
    """
    <event-receiver name="A" parallel="1">
      <streams><stream>define stream s1 (userId string);</stream></streams>
    </event-receiver>
    <event-processor name="D" parallel="1">
      <input-streams><stream>define stream s9 (userId string);</stream></input-streams>
      <queries>from s9 select * insert into s10;</queries>
    </event-processor>
    """
)

BAD_PARTITION_XML = plan_xml(
    """
    <event-receiver name="A" parallel="1">
      <streams><stream>define stream s2 (amount double);</stream></streams>
    </event-receiver>
    <event-publisher name="C" parallel="1">
      <input-streams><stream partition="userId">define stream s2 (amount double);</stream></input-streams>
    </event-publisher>
    """
)


def _json_payload(stdout: str) -> dict[str, Any]:
    data: dict[str, Any] = json.loads(stdout[stdout.index('{\n  "nodes"') :])
    return data


@pytest.fixture
def plan_file(tmp_path: Path, pipeline_xml: str) -> Path:
    path = tmp_path / "plan.xml"
    path.write_text(pipeline_xml)
    return path


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump({"plan_name": "Configured", "runtime": {"tenant_id": 77}}))
    return path


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content)
    return path


class TestGlobalOptions:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_missing_env_file(self, tmp_path: Path, plan_file: Path) -> None:
        result = runner.invoke(app, ["--env-file", str(tmp_path / "absent.env"), "validate", str(plan_file)])

        assert result.exit_code == 1
        assert ".env file not found" in result.output


class TestValidateCommand:
    def test_valid_plan(self, plan_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "validate", str(plan_file)])

        assert result.exit_code == 0
        assert "Execution plan valid" in result.stdout
        assert "Receivers: 1" in result.stdout
        assert "Processors: 1" in result.stdout
        assert "Publishers: 1" in result.stdout
        assert "Triggers: 0" in result.stdout
        assert "Topology: 3 nodes, 2 edges" in result.stdout

    def test_missing_plan_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "validate", str(tmp_path / "nope.xml")])

        assert result.exit_code == 1
        assert "File Not Found" in result.output

    def test_missing_producer(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "plan.xml", MISSING_PRODUCER_XML)

        result = runner.invoke(app, ["--no-dotenv", "validate", str(path)])

        assert result.exit_code == 1
        assert "Stream Resolution Failed" in result.output
        assert "consumer: D" in result.output

    def test_bad_partition(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "plan.xml", BAD_PARTITION_XML)

        result = runner.invoke(app, ["--no-dotenv", "validate", str(path)])

        assert result.exit_code == 1
        assert "Invalid Partition Field" in result.output
        assert "field: userId" in result.output

    def test_malformed_plan(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "plan.xml", "<execution-plan name='p'>")

        result = runner.invoke(app, ["--no-dotenv", "validate", str(path)])

        assert result.exit_code == 1
        assert "Plan Configuration Error" in result.output

    def test_latin1_plan(self, tmp_path: Path, pipeline_xml: str) -> None:
        path = tmp_path / "plan.xml"
        document = '<?xml version="1.0" encoding="ISO-8859-1"?>\n' + pipeline_xml.replace('name="Scenario"', 'name="Café"')
        path.write_bytes(document.encode("latin-1"))

        result = runner.invoke(app, ["--no-dotenv", "validate", str(path)])

        assert result.exit_code == 0
        assert "Execution plan valid" in result.stdout

    def test_plan_bytes_not_in_declared_encoding(self, tmp_path: Path) -> None:
        path = tmp_path / "plan.xml"
        path.write_bytes(plan_xml("", name="Café").encode("latin-1"))

        result = runner.invoke(app, ["--no-dotenv", "validate", str(path)])

        assert result.exit_code == 1
        assert "Plan Configuration Error" in result.output

    def test_missing_settings_file(self, tmp_path: Path, plan_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "validate", str(plan_file), "-s", str(tmp_path / "none.yaml")])

        assert result.exit_code == 1
        assert "File Not Found" in result.output

    def test_invalid_settings(self, tmp_path: Path, plan_file: Path) -> None:
        settings = _write(tmp_path, "settings.yaml", yaml.dump({"runtime": {"heartbeat_interval_ms": 0}}))

        result = runner.invoke(app, ["--no-dotenv", "validate", str(plan_file), "-s", str(settings)])

        assert result.exit_code == 1
        assert "Configuration Validation Failed" in result.output


class TestCompileCommand:
    def test_text_output(self, plan_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "compile", str(plan_file)])

        assert result.exit_code == 0
        assert "A -> B on s1 (shuffle)" in result.stdout
        assert "B -> C on s2 (shuffle)" in result.stdout
        assert "B [processor] x2" in result.stdout
        assert "Topology hash:" in result.stdout

    def test_json_output(self, plan_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "compile", str(plan_file), "--json"])

        assert result.exit_code == 0
        payload = _json_payload(result.stdout)
        assert [node["name"] for node in payload["nodes"]] == ["A", "B", "C"]
        assert payload["edges"] == [
            {"from": "A", "to": "B", "stream": "s1", "grouping": "shuffle", "field": None},
            {"from": "B", "to": "C", "stream": "s2", "grouping": "shuffle", "field": None},
        ]
        assert payload["canonical_version"] == CANONICAL_VERSION
        assert len(payload["topology_hash"]) == 64

    def test_json_hash_is_stable(self, plan_file: Path) -> None:
        first = _json_payload(runner.invoke(app, ["--no-dotenv", "compile", str(plan_file), "--json"]).stdout)
        second = _json_payload(runner.invoke(app, ["--no-dotenv", "compile", str(plan_file), "--json"]).stdout)

        assert first["topology_hash"] == second["topology_hash"]

    def test_settings_flow_into_behavior(self, plan_file: Path, settings_file: Path) -> None:
        result = runner.invoke(app, ["--no-dotenv", "compile", str(plan_file), "--json", "-s", str(settings_file)])

        assert result.exit_code == 0
        behavior = _json_payload(result.stdout)["nodes"][0]["behavior"]
        assert behavior["plan_name"] == "Configured"
        assert behavior["tenant_id"] == 77

    def test_latin1_plan_name_in_behavior(self, tmp_path: Path, pipeline_xml: str) -> None:
        path = tmp_path / "plan.xml"
        document = '<?xml version="1.0" encoding="ISO-8859-1"?>\n' + pipeline_xml.replace('name="Scenario"', 'name="Café"')
        path.write_bytes(document.encode("latin-1"))

        result = runner.invoke(app, ["--no-dotenv", "compile", str(path), "--json"])

        assert result.exit_code == 0
        assert _json_payload(result.stdout)["nodes"][0]["behavior"]["plan_name"] == "Café"

    def test_json_error(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "plan.xml", MISSING_PRODUCER_XML)

        result = runner.invoke(app, ["--no-dotenv", "compile", str(path), "--json"])

        assert result.exit_code == 1
        line = next(line for line in result.stdout.splitlines() if line.startswith('{"error"'))
        error = json.loads(line)
        assert error["type"] == "StreamResolutionError"
        assert "s9" in error["error"]
