"""OAI-PMH response envelope.

Parses one page returned by a ``ListRecords`` or ``GetRecord`` request:
  https://www.openarchives.org/OAI/openarchivesprotocol.html#XMLResponse

The envelope (header, resumption token, error) is the same for every
metadata format; only the ``metadata`` payload is handed to the format's
parser from :mod:`oaiharvest.formats`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lxml import etree

from oaiharvest.errors import OAIProtocolError, ParseError
from oaiharvest.formats import get_format
from oaiharvest.formats.base import (
    MetadataExtractor,
    MetadataFormat,
    OAIError,
    children,
    first_child,
    localname,
    text_of,
)

logger = logging.getLogger(__name__)


def _make_parser(encoding: str | None = None) -> etree.XMLParser:
    # One per call: lxml parser objects must not be shared between threads.
    return etree.XMLParser(
        encoding=encoding, resolve_entities=False, no_network=True, remove_comments=True
    )


@dataclass(frozen=True)
class OAIRequest:
    """The request as echoed back by the repository."""

    verb: str = ""
    metadata_prefix: str = ""
    resumption_token: str = ""
    url: str = ""


@dataclass(frozen=True)
class ResumptionToken:
    token: str = ""
    complete_list_size: int | None = None
    cursor: int | None = None
    expiration_date: str = ""


@dataclass(frozen=True)
class Header:
    identifier: str = ""
    datestamp: str = ""
    set_specs: list[str] = field(default_factory=list)
    status: str = ""

    @property
    def is_deleted(self) -> bool:
        return self.status == "deleted"


@dataclass(frozen=True)
class Record:
    """One OAI record: header plus the format-specific payload (None if deleted)."""

    header: Header
    metadata: MetadataExtractor | None = None


@dataclass
class OAIPMHResponse:
    """A parsed OAI-PMH page. Implements :class:`~oaiharvest.formats.base.OAIResponse`."""

    metadata_prefix: MetadataFormat
    response_date: str = ""
    request: OAIRequest = field(default_factory=OAIRequest)
    records: list[Record] = field(default_factory=list)
    resumption_token: ResumptionToken | None = None
    error: OAIError | None = None

    def get_records(self) -> list[MetadataExtractor]:
        if self.error is not None:
            return []
        return [r.metadata for r in self.records if r.metadata is not None]

    def get_resumption_token(self) -> str:
        if self.resumption_token is None:
            return ""
        return self.resumption_token.token

    def has_error(self) -> bool:
        return self.error is not None

    def get_error(self) -> OAIError | None:
        return self.error

    def raise_for_error(self) -> None:
        """Raise :class:`OAIProtocolError` if the repository reported an error."""
        if self.error is not None:
            raise OAIProtocolError(self.error)

    def extract_all_metadata(self) -> list[Any]:
        """Metadata projections of every record on this page, in document order."""
        return [rec.extract_metadata() for rec in self.get_records()]


def _optional_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring non-integer resumptionToken attribute %r", value)
        return None


def _parse_header(el: Any) -> Header:
    return Header(
        identifier=text_of(first_child(el, "identifier")).strip(),
        datestamp=text_of(first_child(el, "datestamp")).strip(),
        set_specs=[text_of(s).strip() for s in children(el, "setSpec")],
        status=el.get("status", ""),
    )


def _parse_record(el: Any, parse_payload: Any) -> Record:
    header_el = first_child(el, "header")
    header = _parse_header(header_el) if header_el is not None else Header()
    metadata_el = first_child(el, "metadata")
    payload = parse_payload(metadata_el) if metadata_el is not None else None
    if payload is None and not header.is_deleted:
        logger.warning("Record %s has no recognisable metadata payload", header.identifier or "?")
    return Record(header=header, metadata=payload)


def _parse_resumption_token(el: Any) -> ResumptionToken:
    return ResumptionToken(
        token=text_of(el).strip(),
        complete_list_size=_optional_int(el.get("completeListSize")),
        cursor=_optional_int(el.get("cursor")),
        expiration_date=el.get("expirationDate", ""),
    )


def parse_response(content: bytes | str, metadata_prefix: str) -> OAIPMHResponse:
    """Parse one OAI-PMH document whose records use *metadata_prefix*.

    A repository-reported error is kept on the returned object, not raised;
    call :meth:`OAIPMHResponse.raise_for_error` to turn it into an exception.

    Raises:
        UnsupportedFormatError: if *metadata_prefix* is not registered.
        ParseError: if *content* is not a well-formed OAI-PMH envelope.
    """
    handler = get_format(metadata_prefix)
    # Text input is already decoded, so its encoding declaration no longer applies.
    encoding = None
    if isinstance(content, str):
        content = content.encode("utf-8")
        encoding = "utf-8"

    try:
        root = etree.fromstring(content, parser=_make_parser(encoding))
    except etree.XMLSyntaxError as exc:
        raise ParseError(f"failed to parse XML: {exc}") from exc

    if localname(root) != "OAI-PMH":
        raise ParseError(f"expected an OAI-PMH root element, found {localname(root)!r}")

    request_el = first_child(root, "request")
    request = OAIRequest()
    if request_el is not None:
        request = OAIRequest(
            verb=request_el.get("verb", ""),
            metadata_prefix=request_el.get("metadataPrefix", ""),
            resumption_token=request_el.get("resumptionToken", ""),
            url=text_of(request_el).strip(),
        )

    response = OAIPMHResponse(
        metadata_prefix=handler.format,
        response_date=text_of(first_child(root, "responseDate")).strip(),
        request=request,
    )

    error_el = first_child(root, "error")
    if error_el is not None:
        response.error = OAIError(
            code=error_el.get("code", ""),
            message=text_of(error_el).strip(),
        )
        return response

    list_el = first_child(root, "ListRecords")
    if list_el is not None:
        response.records = [_parse_record(r, handler.parse_payload) for r in children(list_el, "record")]
        token_el = first_child(list_el, "resumptionToken")
        if token_el is not None:
            response.resumption_token = _parse_resumption_token(token_el)

    get_el = first_child(root, "GetRecord")
    if get_el is not None:
        response.records.extend(_parse_record(r, handler.parse_payload) for r in children(get_el, "record"))

    return response


def load_response(path: str | Path, metadata_prefix: str) -> OAIPMHResponse:
    """Parse a response previously saved to *path*."""
    path = Path(path).expanduser()
    logger.debug("Loading OAI-PMH response from %s", path)
    return parse_response(path.read_bytes(), metadata_prefix)
