"""Metadata format registry.

Each supported ``metadataPrefix`` maps to the parser that turns an OAI
``metadata`` element into a record payload.  The mapping is fixed at import
time; supporting a new format means adding one module and one entry here.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping

from oaiharvest.errors import UnsupportedFormatError
from oaiharvest.formats import marcxml, oai_dc
from oaiharvest.formats.base import MetadataExtractor, MetadataFormat
from oaiharvest.formats.marcxml import BookMetadata
from oaiharvest.formats.oai_dc import DCMetadata

# Closed set of projections; MetadataFormat is the discriminant.
ExtractedMetadata = BookMetadata | DCMetadata


@dataclass(frozen=True)
class FormatHandler:
    """Parser for one metadata format."""

    format: MetadataFormat
    parse_payload: Callable[[Any], MetadataExtractor | None]
    description: str = ""


FORMATS: Mapping[str, FormatHandler] = MappingProxyType({
    MetadataFormat.MARCXML.value: FormatHandler(
        format=MetadataFormat.MARCXML,
        parse_payload=marcxml.parse_payload,
        description="MARC 21 bibliographic records (MARCXML)",
    ),
    MetadataFormat.OAI_DC.value: FormatHandler(
        format=MetadataFormat.OAI_DC,
        parse_payload=oai_dc.parse_payload,
        description="Unqualified Dublin Core",
    ),
})


def get_format(metadata_prefix: str | MetadataFormat) -> FormatHandler:
    """Look up the handler for *metadata_prefix*.

    Raises:
        UnsupportedFormatError: if the prefix is not registered.
    """
    if isinstance(metadata_prefix, MetadataFormat):
        metadata_prefix = metadata_prefix.value
    handler = FORMATS.get(metadata_prefix)
    if handler is None:
        raise UnsupportedFormatError(metadata_prefix)
    return handler


__all__ = ["ExtractedMetadata", "FORMATS", "FormatHandler", "get_format"]
