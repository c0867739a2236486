"""Shared types for metadata formats and OAI-PMH responses."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Protocol

from lxml import etree


class MetadataFormat(str, Enum):
    """Metadata prefixes understood by the harvester."""

    MARCXML = "marcxml"
    OAI_DC = "oai_dc"


@dataclass(frozen=True)
class DateRange:
    """Selective-harvesting window, both bounds inclusive.

    Dates are UTC, formatted as ``YYYY-MM-DD`` or ``YYYY-MM-DDThh:mm:ssZ``.
    Either bound may be left empty.
    """

    from_date: str = ""
    until_date: str = ""

    def is_empty(self) -> bool:
        return not self.from_date and not self.until_date


@dataclass(frozen=True)
class OAIError:
    """Error reported by the repository inside an OAI-PMH envelope."""

    code: str
    message: str


class MetadataExtractor(Protocol):
    """Interface that every record payload implements."""

    def extract_metadata(self) -> Any:
        """Project the raw payload into its metadata dataclass."""
        ...

    def get_format(self) -> MetadataFormat:
        ...


class OAIResponse(Protocol):
    """Interface that every parsed OAI-PMH page implements."""

    def get_records(self) -> list[MetadataExtractor]:
        """Record payloads in document order; empty when the page carries an error."""
        ...

    def get_resumption_token(self) -> str:
        """Continuation token, or ``""`` on the final page."""
        ...

    def has_error(self) -> bool:
        ...

    def get_error(self) -> OAIError | None:
        ...


# --- XML helpers ---


def localname(el: Any) -> str:
    """Tag name without its namespace (``""`` for comments and PIs)."""
    if not isinstance(el.tag, str):
        return ""
    return etree.QName(el).localname


def children(el: Any, name: str) -> Iterator[Any]:
    """Direct child elements whose local name is *name*, any namespace."""
    for child in el:
        if localname(child) == name:
            yield child


def first_child(el: Any, name: str) -> Any | None:
    return next(children(el, name), None)


def text_of(el: Any | None) -> str:
    """Direct character data of *el*, verbatim."""
    if el is None:
        return ""
    return el.text or ""
