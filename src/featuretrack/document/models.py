"""Gherkin document data models.

Defines the node types a parsed feature file is mapped onto: the feature
itself, plain scenarios, scenario outlines with their examples tables, and
the rows of those tables.  Every node carries the 1-based source
:class:`Position` it was declared at.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class NodeKind(str, enum.Enum):
    """Discriminator for the SpecNode tagged union."""

    FEATURE = "feature"
    SCENARIO = "scenario"
    OUTLINE = "outline"
    EXAMPLES = "examples"
    EXAMPLE = "example"


@dataclass(frozen=True)
class Position:
    """A 1-based ``(line, column)`` source coordinate."""

    line: int
    column: int = 1

    def __post_init__(self) -> None:
        if self.line < 1 or self.column < 1:
            raise ValueError(
                f"Position must be 1-based, got line={self.line} column={self.column}"
            )


@dataclass(frozen=True)
class Tag:
    """A ``@tag`` annotation with its source position."""

    name: str
    position: Position


@dataclass
class Step:
    """A single Given/When/Then step of a scenario."""

    keyword: str
    text: str
    position: Position


@dataclass(frozen=True)
class TableCell:
    """One cell of an examples table row."""

    value: str
    position: Position


@dataclass
class ExampleRow:
    """A data row of an examples table.

    Attributes:
        position: Position of the row itself.
        cells: The row's cells in column order.
        header: Values of the examples table header, used to interpolate
            ``<placeholder>`` names.
    """

    kind: NodeKind = field(default=NodeKind.EXAMPLE, init=False)
    position: Position = field(default_factory=lambda: Position(1))
    cells: list[TableCell] = field(default_factory=list)
    header: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return ""

    @property
    def first_cell(self) -> TableCell:
        """Return the first cell; a row without cells stands in for itself."""
        if self.cells:
            return self.cells[0]
        return TableCell(value="", position=self.position)

    def values(self) -> dict[str, str]:
        """Map header names to this row's cell values."""
        return {
            header: cell.value for header, cell in zip(self.header, self.cells)
        }


@dataclass
class Examples:
    """An ``Examples:`` block attached to a scenario outline."""

    kind: NodeKind = field(default=NodeKind.EXAMPLES, init=False)
    name: str = ""
    keyword: str = "Examples"
    position: Position = field(default_factory=lambda: Position(1))
    tags: list[Tag] = field(default_factory=list)
    rows: list[ExampleRow] = field(default_factory=list)

    def row_at(self, line: int) -> ExampleRow | None:
        """Return the row declared on *line*, or ``None``."""
        for row in self.rows:
            if row.position.line == line:
                return row
        return None


@dataclass
class Scenario:
    """A single concrete scenario declared directly in a feature."""

    kind: NodeKind = field(default=NodeKind.SCENARIO, init=False)
    name: str = ""
    keyword: str = "Scenario"
    position: Position = field(default_factory=lambda: Position(1))
    tags: list[Tag] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)

    def contains_line(self, line: int) -> bool:
        return self.position.line == line


@dataclass
class ScenarioOutline:
    """A templated scenario; each examples row yields one executable case."""

    kind: NodeKind = field(default=NodeKind.OUTLINE, init=False)
    name: str = ""
    keyword: str = "Scenario Outline"
    position: Position = field(default_factory=lambda: Position(1))
    tags: list[Tag] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)
    examples: list[Examples] = field(default_factory=list)

    def contains_line(self, line: int) -> bool:
        """Outlines are matched by their generated rows, not their header."""
        return self.examples_at(line) is not None

    def examples_at(self, line: int) -> Examples | None:
        """Return the examples block owning the row on *line*, or ``None``."""
        for examples in self.examples:
            if examples.row_at(line) is not None:
                return examples
        return None

    def row_name(self, row: ExampleRow) -> str:
        """Return the outline name with ``<placeholders>`` filled from *row*."""
        name = self.name
        for header, value in row.values().items():
            name = name.replace(f"<{header}>", value)
        return name


ScenarioDefinition = Scenario | ScenarioOutline
SpecNode = Scenario | ScenarioOutline | Examples | ExampleRow


@dataclass
class Feature:
    """Top-level unit of a feature file."""

    kind: NodeKind = field(default=NodeKind.FEATURE, init=False)
    name: str = ""
    keyword: str = "Feature"
    position: Position = field(default_factory=lambda: Position(1))
    tags: list[Tag] = field(default_factory=list)
    language: str = "en"
    children: list[ScenarioDefinition] = field(default_factory=list)


@dataclass
class FeatureDocument:
    """A parsed feature together with where it was read from.

    Attributes:
        uri: The identifier the document was read under, e.g.
            ``classpath:com/example/login.feature`` or a ``file:`` URI.
        feature: The parsed feature tree.
        path: Resolved on-disk location, when one exists.
    """

    uri: str
    feature: Feature
    path: Path | None = None
