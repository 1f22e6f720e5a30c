"""Feature file parser adapter.

Uses the ``gherkin-official`` library to parse Gherkin source text into
its dictionary AST, then maps that AST onto the
:mod:`featuretrack.document.models` node types.

A scenario carrying one or more ``Examples:`` blocks is mapped to a
:class:`ScenarioOutline`; every other scenario is a plain
:class:`Scenario`.  ``Rule:`` children are flattened into the feature in
document order and backgrounds are dropped.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from gherkin.errors import CompositeParserException, ParserException
from gherkin.parser import Parser
from gherkin.token_scanner import TokenScanner

from featuretrack.document.models import (
    ExampleRow,
    Examples,
    Feature,
    FeatureDocument,
    Position,
    Scenario,
    ScenarioDefinition,
    ScenarioOutline,
    Step,
    TableCell,
    Tag,
)


class ParseError(Exception):
    """Raised when feature source cannot be parsed into a feature."""

    def __init__(self, message: str, uri: str = "") -> None:
        super().__init__(f"{uri}: {message}" if uri else message)
        self.uri = uri


def parse_feature_file(path: str | Path, uri: str | None = None) -> FeatureDocument:
    """Parse the feature file at *path*.

    Args:
        path: File to read (UTF-8).
        uri: Identifier the document is registered under.  Defaults to the
            file's absolute ``file:`` URI.

    Raises:
        ParseError: If the content is not a valid feature.
        FileNotFoundError: If *path* does not exist.
    """
    path = Path(path).resolve()
    text = path.read_text(encoding="utf-8")
    return parse_feature_string(text, uri=uri or path.as_uri(), path=path)


def parse_feature_string(
    text: str,
    uri: str,
    path: str | Path | None = None,
) -> FeatureDocument:
    """Parse Gherkin *text* read under *uri*.

    Args:
        text: Raw feature source.
        uri: Identifier of the resource the text was read from.
        path: Resolved on-disk location of the resource, if known.

    Raises:
        ParseError: If the text has syntax errors or declares no feature.
    """
    try:
        document = Parser().parse(TokenScanner(text))
    except (CompositeParserException, ParserException) as exc:
        raise ParseError(str(exc), uri=uri) from exc

    raw_feature = document.get("feature")
    if not raw_feature:
        raise ParseError("No feature found in document", uri=uri)

    return FeatureDocument(
        uri=uri,
        feature=_build_feature(raw_feature),
        path=Path(path) if path is not None else None,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _position(node: dict[str, Any]) -> Position:
    location = node.get("location") or {}
    return Position(
        line=int(location.get("line") or 1),
        column=int(location.get("column") or 1),
    )


def _tags(node: dict[str, Any]) -> list[Tag]:
    return [
        Tag(name=raw["name"], position=_position(raw))
        for raw in node.get("tags") or []
    ]


def _build_feature(raw: dict[str, Any]) -> Feature:
    return Feature(
        name=raw.get("name") or "",
        keyword=raw.get("keyword") or "Feature",
        position=_position(raw),
        tags=_tags(raw),
        language=raw.get("language") or "en",
        children=list(_iter_definitions(raw.get("children") or [])),
    )


def _iter_definitions(children: list[dict[str, Any]]):
    for child in children:
        if "scenario" in child:
            yield _build_definition(child["scenario"])
        elif "rule" in child:
            yield from _iter_definitions(child["rule"].get("children") or [])
        # Backgrounds contribute steps to cases, not cases themselves.


def _build_definition(raw: dict[str, Any]) -> ScenarioDefinition:
    steps = [
        Step(
            keyword=step.get("keyword", ""),
            text=step.get("text", ""),
            position=_position(step),
        )
        for step in raw.get("steps") or []
    ]
    raw_examples = raw.get("examples") or []
    if not raw_examples:
        return Scenario(
            name=raw.get("name") or "",
            keyword=raw.get("keyword") or "Scenario",
            position=_position(raw),
            tags=_tags(raw),
            steps=steps,
        )
    return ScenarioOutline(
        name=raw.get("name") or "",
        keyword=raw.get("keyword") or "Scenario Outline",
        position=_position(raw),
        tags=_tags(raw),
        steps=steps,
        examples=[_build_examples(examples) for examples in raw_examples],
    )


def _build_examples(raw: dict[str, Any]) -> Examples:
    header_row = raw.get("tableHeader") or {}
    header = [cell.get("value", "") for cell in header_row.get("cells") or []]
    rows = [
        ExampleRow(
            position=_position(row),
            cells=[
                TableCell(value=cell.get("value", ""), position=_position(cell))
                for cell in row.get("cells") or []
            ],
            header=header,
        )
        for row in raw.get("tableBody") or []
    ]
    return Examples(
        name=raw.get("name") or "",
        keyword=raw.get("keyword") or "Examples",
        position=_position(raw),
        tags=_tags(raw),
        rows=rows,
    )
