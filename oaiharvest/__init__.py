"""OAI-PMH harvester for MARCXML and Dublin Core repositories."""

__version__ = "0.1.0"

from oaiharvest.client import OAIClient
from oaiharvest.envelope import OAIPMHResponse, load_response, parse_response
from oaiharvest.errors import (
    CallbackError,
    HarvestError,
    HarvestStopped,
    OAIProtocolError,
    ParseError,
    RequestConstructionError,
    TransportError,
    UnsupportedFormatError,
)
from oaiharvest.formats import FORMATS, get_format
from oaiharvest.formats.base import DateRange, MetadataFormat, OAIError
from oaiharvest.formats.marcxml import BookMetadata, MARCRecord
from oaiharvest.formats.oai_dc import DCMetadata, DublinCore

__all__ = [
    "__version__",
    "OAIClient",
    "OAIPMHResponse",
    "parse_response",
    "load_response",
    "FORMATS",
    "get_format",
    "DateRange",
    "MetadataFormat",
    "OAIError",
    "BookMetadata",
    "MARCRecord",
    "DCMetadata",
    "DublinCore",
    "HarvestError",
    "UnsupportedFormatError",
    "RequestConstructionError",
    "TransportError",
    "ParseError",
    "OAIProtocolError",
    "CallbackError",
    "HarvestStopped",
]
