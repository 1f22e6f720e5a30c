"""Hierarchy keys.

A :class:`HierarchyKey` is the structural path of a node in the execution
hierarchy, e.g.::

    [engine:featuretrack]/[feature:classpath:com/example/login.feature]/[outline:11]/[examples:17]/[example:19]

Segment values come from source positions only.  Names are for display
and may be empty, duplicated or renamed without changing a node's key.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from featuretrack.document.models import (
    Examples,
    FeatureDocument,
    Scenario,
    ScenarioOutline,
    TableCell,
)

ENGINE_SEGMENT_TYPE = "engine"
DEFAULT_ENGINE_ID = "featuretrack"

_SEGMENT_RE = re.compile(r"\[(?P<type>[^:\]]+):(?P<value>.*?)\](?:/|$)")


class SegmentType(str, enum.Enum):
    """Segment types used below the engine root."""

    FEATURE = "feature"
    SCENARIO = "scenario"
    OUTLINE = "outline"
    EXAMPLES = "examples"
    EXAMPLE = "example"


@dataclass(frozen=True)
class Segment:
    type: str
    value: str

    def __str__(self) -> str:
        return f"[{self.type}:{self.value}]"


@dataclass(frozen=True)
class HierarchyKey:
    """Immutable, hashable path of :class:`Segment` entries."""

    segments: tuple[Segment, ...] = ()

    @classmethod
    def root(cls, engine_id: str = DEFAULT_ENGINE_ID) -> HierarchyKey:
        """Return the key of the engine itself."""
        return cls((Segment(ENGINE_SEGMENT_TYPE, engine_id),))

    @classmethod
    def parse(cls, text: str) -> HierarchyKey:
        """Parse the ``[type:value]/[type:value]`` form produced by ``str()``.

        Raises:
            ValueError: If *text* is not a well-formed key.
        """
        segments: list[Segment] = []
        pos = 0
        while pos < len(text):
            match = _SEGMENT_RE.match(text, pos)
            if match is None:
                raise ValueError(f"Malformed hierarchy key: {text!r}")
            segments.append(Segment(match.group("type"), match.group("value")))
            pos = match.end()
        return cls(tuple(segments))

    def append(self, segment_type: SegmentType | str, value: str) -> HierarchyKey:
        kind = segment_type.value if isinstance(segment_type, SegmentType) else segment_type
        return HierarchyKey(self.segments + (Segment(kind, value),))

    @property
    def last(self) -> Segment | None:
        return self.segments[-1] if self.segments else None

    @property
    def parent(self) -> HierarchyKey | None:
        if not self.segments:
            return None
        return HierarchyKey(self.segments[:-1])

    def has_prefix(self, other: HierarchyKey) -> bool:
        """Return True if *other* is this key or one of its ancestors."""
        return self.segments[: len(other.segments)] == other.segments

    def __str__(self) -> str:
        return "/".join(str(segment) for segment in self.segments)


def feature_key(parent: HierarchyKey, document: FeatureDocument) -> HierarchyKey:
    """Append the feature segment, valued by the document's uri."""
    return parent.append(SegmentType.FEATURE, str(document.uri))


def scenario_key(parent: HierarchyKey, scenario: Scenario) -> HierarchyKey:
    return parent.append(SegmentType.SCENARIO, str(scenario.position.line))


def outline_key(parent: HierarchyKey, outline: ScenarioOutline) -> HierarchyKey:
    return parent.append(SegmentType.OUTLINE, str(outline.position.line))


def examples_key(parent: HierarchyKey, examples: Examples) -> HierarchyKey:
    """Append the examples segment, valued by the block's own header line."""
    return parent.append(SegmentType.EXAMPLES, str(examples.position.line))


def example_key(parent: HierarchyKey, first_cell: TableCell) -> HierarchyKey:
    """Append the example segment, valued by the row's first cell line."""
    return parent.append(SegmentType.EXAMPLE, str(first_cell.position.line))
