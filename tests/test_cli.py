"""Tests for the command-line interface."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from conftest import LOGIN_FEATURE, OUTLINE_FEATURE
from featuretrack.cli import main
from featuretrack.reporting.protocol import parse_message


@pytest.fixture()
def features(tmp_path: Path) -> Path:
    root = tmp_path / "features"
    (root / "io" / "cucumber").mkdir(parents=True)
    (root / "login.feature").write_text(LOGIN_FEATURE, encoding="utf-8")
    (root / "io" / "cucumber" / "outline.feature").write_text(OUTLINE_FEATURE, encoding="utf-8")
    return root


def _write_events(path: Path, records: list[dict]) -> Path:
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n", encoding="utf-8")
    return path


class TestTreeCommand:
    def test_tree_lists_features_and_scenarios(self, features: Path) -> None:
        result = CliRunner().invoke(main, ["tree", str(features)])
        assert result.exit_code == 0, result.output
        assert "Login" in result.output
        assert "Valid login" in result.output
        assert "Example #1" in result.output

    def test_dot_format(self, features: Path) -> None:
        result = CliRunner().invoke(main, ["tree", str(features / "login.feature"), "--format", "dot"])
        assert result.exit_code == 0, result.output
        assert "digraph hierarchy" in result.output
        assert "Valid login" in result.output

    def test_classpath_root(self, features: Path) -> None:
        result = CliRunner().invoke(
            main, ["tree", str(features), "--format", "dot", "--classpath-root", str(features)]
        )
        assert result.exit_code == 0, result.output
        assert "classpath:io/cucumber/outline.feature" in result.output

    def test_parse_failure_exits_nonzero(self, tmp_path: Path) -> None:
        broken = tmp_path / "broken.feature"
        broken.write_text("Feature: A\n  Scenario: s\n    Given x\nFeature: B\n", encoding="utf-8")
        result = CliRunner().invoke(main, ["tree", str(broken)])
        assert result.exit_code == 1
        assert "Failed to load features" in result.output


class TestReportCommand:
    def test_replays_events(self, features: Path, tmp_path: Path) -> None:
        uri = (features / "login.feature").resolve().as_uri()
        case = {"uri": uri, "line": 3, "name": "Valid login"}
        step = {"type": "pickle", "text": "a registered user", "line": 4}
        events = _write_events(
            tmp_path / "events.ndjson",
            [
                {"type": "run_started", "instant": "2024-01-01T12:00:00Z"},
                {"type": "case_started", "instant": "2024-01-01T12:00:01Z", "case": case},
                {"type": "step_started", "instant": "2024-01-01T12:00:02Z", "case": case, "step": step},
                {
                    "type": "step_finished",
                    "instant": "2024-01-01T12:00:03Z",
                    "case": case,
                    "step": step,
                    "result": {"status": "failed", "duration_ms": 12, "error": "boom"},
                },
                {
                    "type": "case_finished",
                    "instant": "2024-01-01T12:00:04Z",
                    "case": case,
                    "result": {"status": "failed"},
                },
                {"type": "run_finished", "instant": "2024-01-01T12:00:05Z"},
            ],
        )
        output = tmp_path / "progress.txt"
        result = CliRunner().invoke(
            main, ["report", str(events), str(features / "login.feature"), "-o", str(output)]
        )
        assert result.exit_code == 0, result.output

        messages = [parse_message(line) for line in output.read_text(encoding="utf-8").splitlines()]
        assert [name for name, _ in messages] == [
            "enteredTheMatrix",
            "testSuiteStarted",
            "testSuiteStarted",
            "testSuiteStarted",
            "testStarted",
            "testFailed",
            "testFinished",
            "testFailed",
            "testSuiteFinished",
            "testSuiteFinished",
            "testSuiteFinished",
        ]
        assert messages[4][1]["locationHint"] == f"{uri}:4"
        assert messages[5][1]["message"] == "boom"
        assert messages[5][1]["duration"] == "12"

    def test_source_read_in_stream(self, tmp_path: Path) -> None:
        case = {"uri": "mem:inline", "line": 2}
        events = _write_events(
            tmp_path / "events.ndjson",
            [
                {"type": "source_read", "uri": "mem:inline", "source": "Feature: Inline\n  Scenario: Only\n"},
                {"type": "run_started"},
                {"type": "case_started", "case": case},
                {"type": "case_finished", "case": case, "result": {"status": "undefined"}},
                {"type": "run_finished"},
            ],
        )
        output = tmp_path / "progress.txt"
        result = CliRunner().invoke(main, ["report", str(events), "--strict", "-o", str(output)])
        assert result.exit_code == 0, result.output

        messages = [parse_message(line) for line in output.read_text(encoding="utf-8").splitlines()]
        names = [attrs.get("name") for _, attrs in messages]
        assert names[1:3] == ["Cucumber", "Inline"]
        assert ("testFailed", "Only") in [(n, a.get("name")) for n, a in messages]

    def test_unknown_document_aborts(self, tmp_path: Path) -> None:
        events = _write_events(
            tmp_path / "events.ndjson",
            [
                {"type": "run_started"},
                {"type": "case_started", "case": {"uri": "mem:missing", "line": 1}},
            ],
        )
        output = tmp_path / "progress.txt"
        result = CliRunner().invoke(main, ["report", str(events), "-o", str(output)])
        assert result.exit_code == 1
        assert "Reporting aborted" in result.output
        assert output.read_text(encoding="utf-8").count("\n") == 2

    def test_bad_event_line(self, tmp_path: Path) -> None:
        events = tmp_path / "events.ndjson"
        events.write_text('{"type": "run_started"}\nnot json\n', encoding="utf-8")
        result = CliRunner().invoke(main, ["report", str(events), "-o", str(tmp_path / "out.txt")])
        assert result.exit_code == 1
        assert "line 2" in result.output
