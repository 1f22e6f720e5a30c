"""Identity and hierarchy resolution for feature documents.

Assigns every feature, scenario, outline, examples block and example row
a position-derived :class:`HierarchyKey` and a :class:`CompositeOrigin`,
and builds the descriptor tree handed to a host discovery engine.
"""

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
from featuretrack.hierarchy.names import NAMELESS, definition_at, examples_at, name_of
from featuretrack.hierarchy.origin import (
    ClasspathLocation,
    CompositeOrigin,
    FileLocation,
    LocationKind,
    Origin,
    UriLocation,
    classify,
    feature_origin,
    location_hint,
    node_origin,
    package_of,
)
from featuretrack.hierarchy.resolver import (
    Descriptor,
    DescriptorKind,
    FeatureResolver,
    is_valid_tag,
    select_lines,
)

__all__ = [
    "NAMELESS",
    "ClasspathLocation",
    "CompositeOrigin",
    "Descriptor",
    "DescriptorKind",
    "FeatureResolver",
    "FileLocation",
    "HierarchyKey",
    "LocationKind",
    "Origin",
    "Segment",
    "SegmentType",
    "UriLocation",
    "classify",
    "definition_at",
    "example_key",
    "examples_key",
    "examples_at",
    "feature_key",
    "feature_origin",
    "is_valid_tag",
    "location_hint",
    "name_of",
    "node_origin",
    "outline_key",
    "package_of",
    "scenario_key",
    "select_lines",
]
