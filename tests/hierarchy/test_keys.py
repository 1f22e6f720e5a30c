"""Tests for hierarchy keys."""

import pytest

from conftest import OUTLINE_FEATURE, OUTLINE_URI
from featuretrack.document.parser import parse_feature_string
from featuretrack.hierarchy.keys import (
    HierarchyKey,
    Segment,
    SegmentType,
    example_key,
    examples_key,
    feature_key,
    outline_key,
    scenario_key,
)


def _all_keys(document) -> list[HierarchyKey]:
    root = HierarchyKey.root()
    feature = feature_key(root, document)
    keys = [feature]
    scenario, outline = document.feature.children
    keys.append(scenario_key(feature, scenario))
    outline_id = outline_key(feature, outline)
    keys.append(outline_id)
    for examples in outline.examples:
        examples_id = examples_key(outline_id, examples)
        keys.append(examples_id)
        for row in examples.rows:
            keys.append(example_key(examples_id, row.first_cell))
    return keys


class TestHierarchyKey:
    def test_feature_segment_uses_uri(self, outline_document) -> None:
        key = feature_key(HierarchyKey.root(), outline_document)
        assert key.last == Segment("feature", OUTLINE_URI)

    def test_scenario_segment_uses_line(self, outline_document) -> None:
        feature = feature_key(HierarchyKey.root(), outline_document)
        key = scenario_key(feature, outline_document.feature.children[0])
        assert key == feature.append(SegmentType.SCENARIO, "5")

    def test_example_path(self, outline_document) -> None:
        keys = _all_keys(outline_document)
        assert str(keys[4]) == (
            f"[engine:featuretrack]/[feature:{OUTLINE_URI}]"
            "/[outline:11]/[examples:16]/[example:18]"
        )

    def test_examples_segment_uses_block_line(self, outline_document) -> None:
        keys = _all_keys(outline_document)
        examples = [k for k in keys if k.last.type == "examples"]
        assert [k.last.value for k in examples] == ["16", "22"]

    def test_unique_within_document(self, outline_document) -> None:
        keys = _all_keys(outline_document)
        assert len(keys) == len(set(keys))

    def test_deterministic_across_parses(self) -> None:
        first = parse_feature_string(OUTLINE_FEATURE, uri=OUTLINE_URI)
        second = parse_feature_string(OUTLINE_FEATURE, uri=OUTLINE_URI)
        assert _all_keys(first) == _all_keys(second)

    def test_independent_of_names(self) -> None:
        renamed = OUTLINE_FEATURE.replace("A scenario outline with <value>", "Renamed")
        renamed = renamed.replace("Scenario: A scenario", "Scenario:")
        original = parse_feature_string(OUTLINE_FEATURE, uri=OUTLINE_URI)
        changed = parse_feature_string(renamed, uri=OUTLINE_URI)
        assert _all_keys(original) == _all_keys(changed)

    def test_parse_round_trip(self, outline_document) -> None:
        for key in _all_keys(outline_document):
            assert HierarchyKey.parse(str(key)) == key

    def test_parse_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            HierarchyKey.parse("feature:x")

    def test_prefix_and_parent(self, outline_document) -> None:
        keys = _all_keys(outline_document)
        example = keys[4]
        assert example.has_prefix(keys[0])
        assert example.parent == keys[3]
        assert not keys[1].has_prefix(keys[2])
