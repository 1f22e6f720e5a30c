"""Tests for DOT export."""

from conftest import OUTLINE_FEATURE, OUTLINE_URI
from featuretrack.document.parser import parse_feature_string
from featuretrack.hierarchy.graph import to_dot, to_dot_string
from featuretrack.hierarchy.resolver import FeatureResolver


def _descriptors():
    document = parse_feature_string(OUTLINE_FEATURE, uri=OUTLINE_URI)
    return [FeatureResolver().resolve(document)]


class TestToDot:
    def test_one_node_per_descriptor(self) -> None:
        graph = to_dot(_descriptors())
        # feature, scenario, outline, 2 examples blocks, 4 example rows
        assert len(graph.get_nodes()) == 9
        assert len(graph.get_edges()) == 8

    def test_string_contains_keys_and_shapes(self) -> None:
        text = to_dot_string(_descriptors())
        assert "digraph" in text
        assert "[outline:11]/[examples:16]/[example:18]" in text
        assert "folder" in text
        assert "Example #1" in text

    def test_unnamed_nodes_are_labelled_by_segment_type(self) -> None:
        document = parse_feature_string(
            "Feature:\n\n  Scenario:\n    Given a step\n", uri="classpath:x.feature"
        )
        graph = to_dot([FeatureResolver().resolve(document)])
        labels = sorted(node.get_label() for node in graph.get_nodes())
        assert labels == ['"feature"', '"scenario"']
