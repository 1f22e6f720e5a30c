"""Document registry.

Holds the parsed feature documents of a run keyed by the uri they were
read under.  The registry is populated once per resource before any
hierarchy or reporting queries are made and is read-only afterwards.
"""

from __future__ import annotations

import logging

from featuretrack.document.models import FeatureDocument

logger = logging.getLogger(__name__)


class DocumentNotFoundError(LookupError):
    """Raised when a uri was never registered (read-before-use violated)."""

    def __init__(self, uri: str) -> None:
        super().__init__(f"No feature document registered for '{uri}'")
        self.uri = uri


class DocumentRegistry:
    """Mapping of resource uri -> :class:`FeatureDocument`.

    Call :meth:`freeze` once population is complete to turn later writes
    into errors.
    """

    def __init__(self, documents: list[FeatureDocument] | None = None) -> None:
        self._documents: dict[str, FeatureDocument] = {}
        self._frozen = False
        for document in documents or []:
            self.put(document.uri, document)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def put(self, uri: str, document: FeatureDocument) -> None:
        """Store *document* under *uri*.  Last write wins.

        Raises:
            RuntimeError: If the registry has been frozen.
        """
        if self._frozen:
            raise RuntimeError(f"Registry is frozen; cannot register '{uri}'")
        if uri in self._documents:
            logger.debug("Replacing registered document for %s", uri)
        else:
            logger.debug("Registered document %s", uri)
        self._documents[uri] = document

    def add(self, document: FeatureDocument) -> None:
        """Store *document* under its own uri."""
        self.put(document.uri, document)

    def get(self, uri: str) -> FeatureDocument:
        """Return the document registered under *uri*.

        Raises:
            DocumentNotFoundError: If *uri* was never registered.
        """
        try:
            return self._documents[uri]
        except KeyError:
            raise DocumentNotFoundError(uri) from None

    def freeze(self) -> None:
        """End the population phase."""
        self._frozen = True

    def uris(self) -> list[str]:
        """Return registered uris in registration order."""
        return list(self._documents)

    def documents(self) -> list[FeatureDocument]:
        return list(self._documents.values())

    def __contains__(self, uri: object) -> bool:
        return uri in self._documents

    def __len__(self) -> int:
        return len(self._documents)
