"""Descriptor tree resolution.

Builds the tree handed to a host test-discovery engine: a container per
feature, a test leaf per scenario, and for every outline a container of
examples containers whose leaves are the individual example rows.  Each
node carries its :class:`HierarchyKey`, :class:`CompositeOrigin`, display
name and tag set.
"""

from __future__ import annotations

import enum
import logging
import unicodedata
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from featuretrack.document.models import (
    Examples,
    FeatureDocument,
    Scenario,
    ScenarioOutline,
    Tag,
)
from featuretrack.document.registry import DocumentRegistry
from featuretrack.hierarchy.keys import (
    DEFAULT_ENGINE_ID,
    HierarchyKey,
    example_key,
    examples_key,
    feature_key,
    outline_key,
    scenario_key,
)
from featuretrack.hierarchy.origin import CompositeOrigin, feature_origin, node_origin

logger = logging.getLogger(__name__)

# Characters that may not appear in a tag name
_RESERVED_TAG_CHARS = frozenset(",()&|!")


class DescriptorKind(str, enum.Enum):
    CONTAINER = "container"
    TEST = "test"


@dataclass
class Descriptor:
    """A node of the resolved execution hierarchy.

    Attributes:
        key: Structural identifier of the node.
        display_name: Name shown to users.
        origin: Where the node is declared.
        kind: Whether the node holds children or is executed.
        tags: Valid tag names that apply to the node.
        children: Child descriptors in document order.
    """

    key: HierarchyKey
    display_name: str
    origin: CompositeOrigin
    kind: DescriptorKind
    tags: frozenset[str] = frozenset()
    children: list[Descriptor] = field(default_factory=list)

    @property
    def is_test(self) -> bool:
        return self.kind == DescriptorKind.TEST

    @property
    def line(self) -> int:
        return self.origin.primary.position.line

    def walk(self) -> Iterator[Descriptor]:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def tests(self) -> list[Descriptor]:
        return [node for node in self.walk() if node.is_test]

    def find(self, key: HierarchyKey) -> Descriptor | None:
        """Return the descendant (or self) with *key*, or ``None``."""
        if self.key == key:
            return self
        if not key.has_prefix(self.key):
            return None
        for child in self.children:
            found = child.find(key)
            if found is not None:
                return found
        return None


def is_valid_tag(name: str) -> bool:
    """Return True if *name* can be used as a tag by the host engine."""
    if not name or name != name.strip():
        return False
    for char in name:
        if char.isspace() or char in _RESERVED_TAG_CHARS:
            return False
        if unicodedata.category(char) == "Cc":
            return False
    return True


def _tag_names(*groups: Iterable[Tag]) -> frozenset[str]:
    names: set[str] = set()
    for group in groups:
        for tag in group:
            if is_valid_tag(tag.name):
                names.add(tag.name)
            else:
                logger.debug("Dropping invalid tag %r", tag.name)
    return frozenset(names)


class FeatureResolver:
    """Resolves feature documents into :class:`Descriptor` trees."""

    def __init__(self, engine_id: str = DEFAULT_ENGINE_ID) -> None:
        self._root = HierarchyKey.root(engine_id)

    @property
    def root_key(self) -> HierarchyKey:
        return self._root

    def resolve_all(self, registry: DocumentRegistry) -> list[Descriptor]:
        """Resolve every registered document, in registration order."""
        return [self.resolve(document) for document in registry.documents()]

    def resolve(self, document: FeatureDocument) -> Descriptor:
        feature = document.feature
        key = feature_key(self._root, document)
        descriptor = Descriptor(
            key=key,
            display_name=feature.name,
            origin=feature_origin(document),
            kind=DescriptorKind.CONTAINER,
        )
        for child in feature.children:
            if isinstance(child, ScenarioOutline):
                descriptor.children.append(self._outline(document, key, child))
            elif isinstance(child, Scenario):
                descriptor.children.append(self._scenario(document, key, child))
            else:
                raise TypeError(f"Unsupported scenario definition: {type(child).__name__}")
        logger.debug(
            "Resolved %s with %d test(s)", document.uri, len(descriptor.tests())
        )
        return descriptor

    def _scenario(
        self, document: FeatureDocument, parent: HierarchyKey, scenario: Scenario
    ) -> Descriptor:
        return Descriptor(
            key=scenario_key(parent, scenario),
            display_name=scenario.name,
            origin=node_origin(document, scenario),
            kind=DescriptorKind.TEST,
            tags=_tag_names(document.feature.tags, scenario.tags),
        )

    def _outline(
        self, document: FeatureDocument, parent: HierarchyKey, outline: ScenarioOutline
    ) -> Descriptor:
        key = outline_key(parent, outline)
        descriptor = Descriptor(
            key=key,
            display_name=outline.name,
            origin=node_origin(document, outline),
            kind=DescriptorKind.CONTAINER,
        )
        for examples in outline.examples:
            descriptor.children.append(self._examples(document, key, outline, examples))
        return descriptor

    def _examples(
        self,
        document: FeatureDocument,
        parent: HierarchyKey,
        outline: ScenarioOutline,
        examples: Examples,
    ) -> Descriptor:
        key = examples_key(parent, examples)
        descriptor = Descriptor(
            key=key,
            display_name=examples.name or examples.keyword,
            origin=node_origin(document, examples),
            kind=DescriptorKind.CONTAINER,
        )
        tags = _tag_names(document.feature.tags, outline.tags, examples.tags)
        for index, row in enumerate(examples.rows, start=1):
            first_cell = row.first_cell
            descriptor.children.append(
                Descriptor(
                    key=example_key(key, first_cell),
                    display_name=f"Example #{index}",
                    origin=node_origin(document, first_cell),
                    kind=DescriptorKind.TEST,
                    tags=tags,
                )
            )
        return descriptor


def select_lines(descriptor: Descriptor, lines: Iterable[int]) -> Descriptor | None:
    """Prune *descriptor* to the nodes declared on one of *lines*.

    A selected container keeps all of its children; an unselected container
    is kept only if one of its descendants is selected.  Returns ``None``
    when nothing is selected.
    """
    wanted = set(lines)
    if descriptor.line in wanted:
        return descriptor
    children = [
        pruned
        for pruned in (select_lines(child, wanted) for child in descriptor.children)
        if pruned is not None
    ]
    if not children:
        return None
    return Descriptor(
        key=descriptor.key,
        display_name=descriptor.display_name,
        origin=descriptor.origin,
        kind=descriptor.kind,
        tags=descriptor.tags,
        children=children,
    )
