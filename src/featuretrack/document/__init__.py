"""Feature document model, parser adapter and registry."""

from featuretrack.document.models import (
    ExampleRow,
    Examples,
    Feature,
    FeatureDocument,
    NodeKind,
    Position,
    Scenario,
    ScenarioOutline,
    Step,
    TableCell,
    Tag,
)
from featuretrack.document.parser import ParseError, parse_feature_file, parse_feature_string
from featuretrack.document.registry import DocumentNotFoundError, DocumentRegistry

__all__ = [
    "DocumentNotFoundError",
    "DocumentRegistry",
    "ExampleRow",
    "Examples",
    "Feature",
    "FeatureDocument",
    "NodeKind",
    "ParseError",
    "Position",
    "Scenario",
    "ScenarioOutline",
    "Step",
    "TableCell",
    "Tag",
    "parse_feature_file",
    "parse_feature_string",
]
