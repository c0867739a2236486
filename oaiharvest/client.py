"""OAI-PMH client and the ListRecords pagination loop.

Protocol reference:
  https://www.openarchives.org/OAI/openarchivesprotocol.html#ListRecords

The first request of a listing carries ``metadataPrefix`` plus the optional
``from``/``until`` window.  Every later request carries only the
``resumptionToken`` from the previous page, since the repository encodes the
original selection inside it.  Pages are fetched strictly one at a time and
any failure ends the harvest; there is no retry.
"""

from __future__ import annotations

import logging
from typing import Callable

import httpx

from oaiharvest import __version__
from oaiharvest.envelope import OAIPMHResponse, parse_response
from oaiharvest.errors import CallbackError, RequestConstructionError, TransportError
from oaiharvest.formats import get_format
from oaiharvest.formats.base import DateRange

logger = logging.getLogger(__name__)

_REQUEST_TIMEOUT = 30.0
_USER_AGENT = f"oaiharvest/{__version__}"

HarvestCallback = Callable[[OAIPMHResponse], None]


def build_list_records_params(
    metadata_prefix: str,
    resumption_token: str = "",
    date_range: DateRange | None = None,
) -> dict[str, str]:
    """Query parameters for one ListRecords request.

    A non-empty *resumption_token* wins: it becomes the only selection
    parameter and *metadata_prefix* and *date_range* are dropped.
    """
    params = {"verb": "ListRecords"}
    if resumption_token:
        params["resumptionToken"] = resumption_token
    elif metadata_prefix:
        params["metadataPrefix"] = metadata_prefix
        if date_range is not None:
            if date_range.from_date:
                params["from"] = date_range.from_date
            if date_range.until_date:
                params["until"] = date_range.until_date
    else:
        raise RequestConstructionError("either metadataPrefix or resumptionToken must be provided")
    return params


class OAIClient:
    """Harvest records from one OAI-PMH repository.

    Args:
        base_url: The repository's OAI-PMH endpoint.
        timeout: Per-request timeout in seconds (ignored if *http_client* is given).
        user_agent: ``User-Agent`` header (ignored if *http_client* is given).
        http_client: Optional pre-built :class:`httpx.Client`.  The caller keeps
            ownership of it; otherwise the client creates and closes its own.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = _REQUEST_TIMEOUT,
        user_agent: str = _USER_AGENT,
        http_client: httpx.Client | None = None,
    ):
        self.base_url = base_url
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=timeout,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> OAIClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- Harvesting ---

    def harvest(
        self,
        metadata_prefix: str,
        date_range: DateRange | None,
        callback: HarvestCallback,
    ) -> int:
        """Walk a complete ListRecords listing, handing each page to *callback*.

        *date_range* only applies to the first request.  If *callback* raises,
        harvesting stops and the exception is re-raised as the ``__cause__`` of
        a :class:`CallbackError`.  Returns the number of pages delivered.

        Raises:
            UnsupportedFormatError: before any request, if *metadata_prefix*
                is not registered.
            TransportError, ParseError, OAIProtocolError: if a page fails.
            CallbackError: if *callback* raises.
        """
        metadata_prefix = get_format(metadata_prefix).format.value

        token = ""
        pages = 0
        records = 0

        while True:
            response = self.list_records(metadata_prefix, resumption_token=token, date_range=date_range)
            pages += 1
            page_records = len(response.get_records())
            records += page_records

            token = response.get_resumption_token()
            logger.info(
                "%s: page %d with %d records (resumptionToken=%s)",
                metadata_prefix, pages, page_records, token or "-",
            )

            try:
                callback(response)
            except Exception as exc:
                raise CallbackError(f"callback error: {exc}") from exc

            if not token:
                break
            # The token already embeds the original selection.
            date_range = None

        logger.info("%s: harvest complete, %d records in %d pages", metadata_prefix, records, pages)
        return pages

    def list_records(
        self,
        metadata_prefix: str,
        resumption_token: str = "",
        date_range: DateRange | None = None,
    ) -> OAIPMHResponse:
        """Fetch and parse a single ListRecords page.

        Records are parsed with *metadata_prefix*'s format even when the
        request itself only carries *resumption_token*.
        """
        metadata_prefix = get_format(metadata_prefix).format.value
        params = build_list_records_params(metadata_prefix, resumption_token, date_range)
        return self._request(params, metadata_prefix)

    def get_record(self, identifier: str, metadata_prefix: str) -> OAIPMHResponse:
        """Fetch a single record by its OAI identifier."""
        metadata_prefix = get_format(metadata_prefix).format.value
        if not identifier:
            raise RequestConstructionError("identifier must be provided")
        params = {"verb": "GetRecord", "identifier": identifier, "metadataPrefix": metadata_prefix}
        return self._request(params, metadata_prefix)

    def _request(self, params: dict[str, str], metadata_prefix: str) -> OAIPMHResponse:
        response = parse_response(self._fetch(params), metadata_prefix)
        response.raise_for_error()
        return response

    def _fetch(self, params: dict[str, str]) -> bytes:
        try:
            url = httpx.URL(self.base_url).copy_merge_params(params)
            resp = self._client.get(url)
        except httpx.RequestError as exc:
            raise TransportError(f"failed to fetch OAI data: {exc}") from exc

        logger.debug("GET %s -> %d", resp.request.url, resp.status_code)
        if resp.status_code != httpx.codes.OK:
            raise TransportError(f"unexpected status code: {resp.status_code}", status_code=resp.status_code)
        return resp.content
