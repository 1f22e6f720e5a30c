"""Display-name lookup by source line."""

from __future__ import annotations

from featuretrack.document.models import Examples, ScenarioDefinition, ScenarioOutline
from featuretrack.document.registry import DocumentRegistry

NAMELESS = "Nameless"


def definition_at(
    registry: DocumentRegistry, uri: str, line: int
) -> ScenarioDefinition | None:
    """Return the first top-level scenario definition occupying *line*.

    A plain scenario occupies its own declaration line; an outline occupies
    the lines of its examples rows, since each row is a separate case.

    Raises:
        DocumentNotFoundError: If *uri* is not registered.
    """
    feature = registry.get(uri).feature
    for child in feature.children:
        if child.contains_line(line):
            return child
    return None


def examples_at(registry: DocumentRegistry, uri: str, line: int) -> Examples | None:
    """Return the examples block whose row is on *line*, if *line* is a row."""
    definition = definition_at(registry, uri, line)
    if isinstance(definition, ScenarioOutline):
        return definition.examples_at(line)
    return None


def name_of(registry: DocumentRegistry, uri: str, line: int) -> str:
    """Return the display name of the case declared on *line* of *uri*.

    Outline rows resolve to the outline name with the row's values filled
    into its ``<placeholders>``.  Falls back to :data:`NAMELESS` when no
    definition matches or its name is empty.
    """
    definition = definition_at(registry, uri, line)
    if definition is None:
        return NAMELESS
    if isinstance(definition, ScenarioOutline):
        examples = definition.examples_at(line)
        row = examples.row_at(line) if examples is not None else None
        name = definition.row_name(row) if row is not None else definition.name
    else:
        name = definition.name
    return name.strip() or NAMELESS
