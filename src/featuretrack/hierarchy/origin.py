"""Location and origin resolution.

A feature can be addressed in two ways: by the identifier it was read
under (for example a classpath resource name) and by the file it resolves
to on disk.  IDEs and CI tools differ in which of the two they can
navigate to, so both are kept side by side in a :class:`CompositeOrigin`.

Identifier classification is total and ordered:

1. ``classpath:`` identifiers become a :class:`ClasspathLocation` whose
   resource name always starts with ``/``.
2. ``file:`` identifiers and scheme-less paths become a
   :class:`FileLocation`.
3. Anything else is kept verbatim as an opaque :class:`UriLocation`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlsplit
from urllib.request import url2pathname

from featuretrack.document.models import FeatureDocument, Position, SpecNode, TableCell

CLASSPATH_SCHEME = "classpath"
FILE_SCHEME = "file"


class LocationKind(str, enum.Enum):
    """Discriminator for the ResourceLocation tagged union."""

    FILE = "file"
    CLASSPATH = "classpath"
    URI = "uri"


@dataclass(frozen=True)
class FileLocation:
    """A location on the file system."""

    kind: LocationKind = field(default=LocationKind.FILE, init=False)
    path: Path = field(default_factory=Path)


@dataclass(frozen=True)
class ClasspathLocation:
    """A packaged resource, named with a leading ``/``."""

    kind: LocationKind = field(default=LocationKind.CLASSPATH, init=False)
    resource_name: str = "/"

    def __post_init__(self) -> None:
        if not self.resource_name.startswith("/"):
            object.__setattr__(self, "resource_name", "/" + self.resource_name)


@dataclass(frozen=True)
class UriLocation:
    """Any other identifier, kept verbatim."""

    kind: LocationKind = field(default=LocationKind.URI, init=False)
    uri: str = ""


ResourceLocation = FileLocation | ClasspathLocation | UriLocation


@dataclass(frozen=True)
class Origin:
    """One perspective on where a node lives."""

    location: ResourceLocation
    position: Position


class CompositeOrigin:
    """Non-empty, display-ordered list of :class:`Origin` entries.

    Every entry is kept, even when two perspectives classify identically.
    Order only decides display priority; two composites holding the same
    set of origins compare equal.
    """

    def __init__(self, origins: list[Origin] | tuple[Origin, ...]) -> None:
        if not origins:
            raise ValueError("CompositeOrigin requires at least one origin")
        self._origins = tuple(origins)

    @property
    def origins(self) -> tuple[Origin, ...]:
        return self._origins

    @property
    def primary(self) -> Origin:
        """The origin shown first."""
        return self._origins[0]

    def __iter__(self):
        return iter(self._origins)

    def __len__(self) -> int:
        return len(self._origins)

    def __contains__(self, origin: object) -> bool:
        return origin in self._origins

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompositeOrigin):
            return NotImplemented
        return frozenset(self._origins) == frozenset(other._origins)

    def __hash__(self) -> int:
        return hash(frozenset(self._origins))

    def __repr__(self) -> str:
        return f"CompositeOrigin({list(self._origins)!r})"


def classify(identifier: str) -> ResourceLocation:
    """Classify a resource *identifier* into a :data:`ResourceLocation`."""
    parts = urlsplit(identifier)
    scheme = parts.scheme.lower()

    if scheme == CLASSPATH_SCHEME:
        resource = identifier[len(CLASSPATH_SCHEME) + 1 :]
        return ClasspathLocation(resource_name=resource)

    # A single-letter scheme is a Windows drive, not a uri scheme.
    if scheme == "" or len(scheme) == 1:
        return FileLocation(path=Path(identifier))

    if scheme == FILE_SCHEME:
        raw_path = unquote(parts.path)
        if parts.netloc and parts.netloc != "localhost":
            raw_path = f"//{parts.netloc}{raw_path}"
        return FileLocation(path=Path(url2pathname(raw_path)))

    return UriLocation(uri=identifier)


def origin_for(identifier: str, position: Position) -> Origin:
    """Return the :class:`Origin` of *identifier* at *position*."""
    return Origin(location=classify(identifier), position=position)


def _identifiers(document: FeatureDocument) -> list[str]:
    identifiers = [document.uri]
    if document.path is not None:
        path = Path(document.path)
        identifiers.append(path.as_uri() if path.is_absolute() else str(path))
    return identifiers


def feature_origin(document: FeatureDocument) -> CompositeOrigin:
    """Return the declared and resolved origins of the whole feature."""
    position = document.feature.position
    return CompositeOrigin([origin_for(i, position) for i in _identifiers(document)])


def node_origin(
    document: FeatureDocument, node: SpecNode | TableCell
) -> CompositeOrigin:
    """Return :func:`feature_origin` with *node*'s position substituted."""
    position = node.position
    return CompositeOrigin([origin_for(i, position) for i in _identifiers(document)])


def package_of(origin: CompositeOrigin) -> str | None:
    """Return the dotted package of the first classpath entry, if any.

    ``/io/cucumber/login.feature`` lives in package ``io.cucumber``.
    """
    for entry in origin:
        location = entry.location
        if location.kind == LocationKind.CLASSPATH:
            parent = PurePosixPath(location.resource_name).parent
            return ".".join(part for part in parent.parts if part != "/")
    return None


def location_hint(location: ResourceLocation, position: Position | None = None) -> str:
    """Render *location* as a navigable hint, with a line suffix if given.

    Relative file paths are made absolute against the working directory.
    """
    if location.kind == LocationKind.FILE:
        base = location.path.absolute().as_uri()
    elif location.kind == LocationKind.CLASSPATH:
        base = f"{CLASSPATH_SCHEME}:{location.resource_name}"
    elif location.kind == LocationKind.URI:
        base = location.uri
    else:
        raise ValueError(f"Unknown location kind: {location.kind!r}")
    if position is None:
        return base
    return f"{base}:{position.line}"
