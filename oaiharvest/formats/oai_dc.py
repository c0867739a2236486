"""Unqualified Dublin Core (``oai_dc``) records.

Every OAI-PMH repository must support this format:
  https://www.openarchives.org/OAI/openarchivesprotocol.html#dublincore

The fifteen elements are all optional and repeatable.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, ClassVar, Iterable

from lxml import etree

from oaiharvest.formats.base import MetadataFormat, text_of

OAI_DC_NS = "http://www.openarchives.org/OAI/2.0/oai_dc/"
DC_NS = "http://purl.org/dc/elements/1.1/"

DC_ELEMENTS = (
    "title",
    "creator",
    "subject",
    "description",
    "publisher",
    "contributor",
    "date",
    "type",
    "format",
    "identifier",
    "source",
    "language",
    "relation",
    "coverage",
    "rights",
)


def deduplicate(items: Iterable[str]) -> list[str]:
    """Drop empty strings and repeats, keeping first-seen order."""
    seen: set[str] = set()
    unique: list[str] = []
    for item in items:
        if not item or item in seen:
            continue
        seen.add(item)
        unique.append(item)
    return unique


@dataclass(frozen=True)
class DCMetadata:
    """Deduplicated Dublin Core elements."""

    format_tag: ClassVar[MetadataFormat] = MetadataFormat.OAI_DC

    title: list[str] = field(default_factory=list)
    creator: list[str] = field(default_factory=list)
    subject: list[str] = field(default_factory=list)
    description: list[str] = field(default_factory=list)
    publisher: list[str] = field(default_factory=list)
    contributor: list[str] = field(default_factory=list)
    date: list[str] = field(default_factory=list)
    type: list[str] = field(default_factory=list)
    format: list[str] = field(default_factory=list)
    identifier: list[str] = field(default_factory=list)
    source: list[str] = field(default_factory=list)
    language: list[str] = field(default_factory=list)
    relation: list[str] = field(default_factory=list)
    coverage: list[str] = field(default_factory=list)
    rights: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DublinCore:
    """Raw ``oai_dc:dc`` payload, values kept in encounter order."""

    title: list[str] = field(default_factory=list)
    creator: list[str] = field(default_factory=list)
    subject: list[str] = field(default_factory=list)
    description: list[str] = field(default_factory=list)
    publisher: list[str] = field(default_factory=list)
    contributor: list[str] = field(default_factory=list)
    date: list[str] = field(default_factory=list)
    type: list[str] = field(default_factory=list)
    format: list[str] = field(default_factory=list)
    identifier: list[str] = field(default_factory=list)
    source: list[str] = field(default_factory=list)
    language: list[str] = field(default_factory=list)
    relation: list[str] = field(default_factory=list)
    coverage: list[str] = field(default_factory=list)
    rights: list[str] = field(default_factory=list)

    def extract_dc_metadata(self) -> DCMetadata:
        return DCMetadata(**{f.name: deduplicate(getattr(self, f.name)) for f in fields(self)})

    def extract_metadata(self) -> DCMetadata:
        return self.extract_dc_metadata()

    def get_format(self) -> MetadataFormat:
        return MetadataFormat.OAI_DC


def parse_dublin_core(el: Any) -> DublinCore:
    """Build a :class:`DublinCore` from an ``oai_dc:dc`` element.

    Only children in the DC elements namespace count; anything else is ignored.
    """
    dc = DublinCore()
    for child in el:
        if not isinstance(child.tag, str):
            continue
        qname = etree.QName(child)
        if qname.namespace == DC_NS and qname.localname in DC_ELEMENTS:
            getattr(dc, qname.localname).append(text_of(child))
    return dc


def parse_payload(metadata_el: Any) -> DublinCore | None:
    """Return the Dublin Core payload inside an OAI ``metadata`` element, if any."""
    dc_el = metadata_el.find(f"{{{OAI_DC_NS}}}dc")
    if dc_el is None:
        return None
    return parse_dublin_core(dc_el)
