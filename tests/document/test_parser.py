"""Tests for the feature parser adapter."""

from pathlib import Path

import pytest

from conftest import LOGIN_FEATURE, OUTLINE_FEATURE, OUTLINE_URI
from featuretrack.document.models import NodeKind, Scenario, ScenarioOutline
from featuretrack.document.parser import ParseError, parse_feature_file, parse_feature_string


class TestParseFeatureString:
    def test_feature_name_and_position(self, outline_document) -> None:
        feature = outline_document.feature
        assert feature.name == "A feature with scenario outlines"
        assert feature.position.line == 2
        assert feature.position.column == 1
        assert [t.name for t in feature.tags] == ["@FeatureTag"]

    def test_uri_and_path_kept(self) -> None:
        document = parse_feature_string(LOGIN_FEATURE, uri="classpath:login.feature", path="/tmp/login.feature")
        assert document.uri == "classpath:login.feature"
        assert document.path == Path("/tmp/login.feature")

    def test_path_defaults_to_none(self) -> None:
        document = parse_feature_string(LOGIN_FEATURE, uri="mem:login")
        assert document.path is None

    def test_scenario_and_outline_classification(self, outline_document) -> None:
        scenario, outline = outline_document.feature.children
        assert isinstance(scenario, Scenario)
        assert scenario.kind == NodeKind.SCENARIO
        assert isinstance(outline, ScenarioOutline)
        assert outline.kind == NodeKind.OUTLINE

    def test_scenario_details(self, outline_document) -> None:
        scenario = outline_document.feature.children[0]
        assert scenario.name == "A scenario"
        assert scenario.position.line == 5
        assert scenario.position.column == 3
        assert [t.name for t in scenario.tags] == ["@ScenarioTag"]
        assert [s.text for s in scenario.steps] == [
            "a scenario",
            "it is executed",
            "nothing else happens",
        ]

    def test_outline_examples(self, outline_document) -> None:
        outline = outline_document.feature.children[1]
        assert outline.position.line == 11
        assert [e.position.line for e in outline.examples] == [16, 22]
        assert [e.name for e in outline.examples] == ["", "Second block"]
        assert [t.name for t in outline.examples[0].tags] == ["@Example1Tag"]

    def test_example_rows(self, outline_document) -> None:
        outline = outline_document.feature.children[1]
        rows = [row for examples in outline.examples for row in examples.rows]
        assert [row.position.line for row in rows] == [18, 19, 24, 25]
        assert rows[0].header == ["value"]
        assert rows[0].values() == {"value": "A"}
        assert rows[0].first_cell.position.line == 18

    def test_rules_are_flattened(self) -> None:
        text = """\
Feature: Rules
  Rule: First rule
    Scenario: Inside rule
      Given something
  Scenario: Outside rule
    Given something else
"""
        document = parse_feature_string(text, uri="mem:rules")
        assert [c.name for c in document.feature.children] == [
            "Inside rule",
            "Outside rule",
        ]

    def test_background_is_dropped(self) -> None:
        text = """\
Feature: Background
  Background:
    Given setup
  Scenario: Only scenario
    Given something
"""
        document = parse_feature_string(text, uri="mem:bg")
        assert [c.name for c in document.feature.children] == ["Only scenario"]

    def test_empty_document_raises(self) -> None:
        with pytest.raises(ParseError, match="No feature"):
            parse_feature_string("", uri="mem:empty")

    def test_syntax_error_raises_with_uri(self) -> None:
        text = "Feature: Broken\n  Scenario: s\n    Given x\nFeature: Twice\n"
        with pytest.raises(ParseError) as info:
            parse_feature_string(text, uri="mem:broken")
        assert info.value.uri == "mem:broken"
        assert "mem:broken" in str(info.value)


class TestParseFeatureFile:
    def test_default_uri_is_file_uri(self, tmp_path: Path) -> None:
        path = tmp_path / "outline.feature"
        path.write_text(OUTLINE_FEATURE, encoding="utf-8")
        document = parse_feature_file(path)
        assert document.uri == path.resolve().as_uri()
        assert document.path == path.resolve()

    def test_explicit_uri(self, tmp_path: Path) -> None:
        path = tmp_path / "outline.feature"
        path.write_text(OUTLINE_FEATURE, encoding="utf-8")
        document = parse_feature_file(path, uri=OUTLINE_URI)
        assert document.uri == OUTLINE_URI
        assert document.path == path.resolve()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            parse_feature_file(tmp_path / "missing.feature")
