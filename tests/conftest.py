"""Shared test fixtures: canned OAI-PMH pages and a scripted repository."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from oaiharvest.client import OAIClient

BASE_URL = "https://opac.example.org/oai"

_OAI_OPEN = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<OAI-PMH xmlns="http://www.openarchives.org/OAI/2.0/" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">\n'
    "<responseDate>2025-10-02T10:05:19Z</responseDate>\n"
)


def _marc_record(
    identifier: str,
    record_id: str,
    title: str,
    fields: str = "",
    sets: tuple[str, ...] = (),
) -> str:
    set_xml = "".join(f"<setSpec>{s}</setSpec>" for s in sets)
    return f"""
<record>
  <header>
    <identifier>{identifier}</identifier>
    <datestamp>2017-04-04T15:40:10Z</datestamp>{set_xml}
  </header>
  <metadata>
    <record xmlns="http://www.loc.gov/MARC21/slim">
      <leader>00000nam  2200000   4500</leader>
      <controlfield tag="001">{record_id}</controlfield>
      <controlfield tag="005">20170404154010.0</controlfield>
      <datafield tag="245" ind1="0" ind2="0">
        <subfield code="a">{title}</subfield>
      </datafield>{fields}
    </record>
  </metadata>
</record>"""


def _dc_record(identifier: str, elements: str) -> str:
    return f"""
<record>
  <header>
    <identifier>{identifier}</identifier>
    <datestamp>2024-03-01</datestamp>
  </header>
  <metadata>
    <oai_dc:dc xmlns:oai_dc="http://www.openarchives.org/OAI/2.0/oai_dc/"
               xmlns:dc="http://purl.org/dc/elements/1.1/">{elements}
    </oai_dc:dc>
  </metadata>
</record>"""


def _list_records_page(
    records: list[str],
    token: str = "",
    metadata_prefix: str = "marcxml",
    token_attrs: str = "",
) -> bytes:
    token_xml = ""
    if token or token_attrs:
        token_xml = f"<resumptionToken{token_attrs}>{token}</resumptionToken>"
    body = (
        _OAI_OPEN
        + f'<request verb="ListRecords" metadataPrefix="{metadata_prefix}">{BASE_URL}</request>\n'
        + "<ListRecords>"
        + "".join(records)
        + token_xml
        + "</ListRecords>\n</OAI-PMH>\n"
    )
    return body.encode("utf-8")


def _error_page(code: str, message: str) -> bytes:
    body = (
        _OAI_OPEN
        + f'<request verb="ListRecords">{BASE_URL}</request>\n'
        + f'<error code="{code}">{message}</error>\n</OAI-PMH>\n'
    )
    return body.encode("utf-8")


@pytest.fixture()
def marc_record() -> Callable[..., str]:
    return _marc_record


@pytest.fixture()
def dc_record() -> Callable[..., str]:
    return _dc_record


@pytest.fixture()
def list_records_page() -> Callable[..., bytes]:
    return _list_records_page


@pytest.fixture()
def error_page() -> Callable[[str, str], bytes]:
    return _error_page


@pytest.fixture()
def sample_marc_page() -> bytes:
    """Two bibliographic records and a resumption token."""
    first = _marc_record(
        "oai:opac.example.org:14",
        "YOGYA000000000002408",
        "PANDUAN cerdas mahasiswa Jogja",
        fields="""
      <datafield tag="020" ind1=" " ind2=" "><subfield code="a">979-3597-05-3</subfield></datafield>
      <datafield tag="082" ind1=" " ind2=" "><subfield code="a">378.198</subfield></datafield>
      <datafield tag="090" ind1=" " ind2=" ">
        <subfield code="a">378.198</subfield>
        <subfield code="b">PAN</subfield>
        <subfield code="c">c.1</subfield>
      </datafield>
      <datafield tag="260" ind1=" " ind2=" ">
        <subfield code="a">Yogyakarta</subfield>
        <subfield code="b">Kejora</subfield>
        <subfield code="c">2005</subfield>
      </datafield>
      <datafield tag="300" ind1=" " ind2=" ">
        <subfield code="a">xii, 220 hlm.</subfield>
        <subfield code="b">ilus.</subfield>
        <subfield code="c">21 cm</subfield>
      </datafield>
      <datafield tag="650" ind1=" " ind2="4"><subfield code="a">Mahasiswa</subfield></datafield>
      <datafield tag="650" ind1=" " ind2="4"><subfield code="a">Pendidikan tinggi</subfield></datafield>
      <datafield tag="700" ind1="0" ind2=" "><subfield code="a">M. Solikhin</subfield></datafield>
      <datafield tag="700" ind1="0" ind2=" "><subfield code="a">M. Farid</subfield></datafield>
      <datafield tag="856" ind1="4" ind2="0"><subfield code="u">http://opac.example.org/detail/14</subfield></datafield>
      <datafield tag="990" ind1=" " ind2=" "><subfield code="a">B001</subfield></datafield>
      <datafield tag="990" ind1=" " ind2=" "><subfield code="a">B002</subfield></datafield>
      <datafield tag="999" ind1=" " ind2=" "><subfield code="a">R001</subfield></datafield>""",
        sets=("books", "reference"),
    )
    second = _marc_record("oai:opac.example.org:17", "YOGYA-02090000041535", "Sejarah Kota Gede")
    return _list_records_page(
        [first, second],
        token="T1",
        token_attrs=' completeListSize="3" cursor="0" expirationDate="2025-10-03T10:05:19Z"',
    )


class ScriptedRepository:
    """``httpx.MockTransport`` handler that replays canned pages in order."""

    def __init__(self, pages: list[bytes | httpx.Response]):
        self.pages = list(pages)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.pages:
            raise AssertionError(f"unexpected request: {request.url}")
        page = self.pages.pop(0)
        if isinstance(page, httpx.Response):
            return page
        return httpx.Response(200, content=page, headers={"Content-Type": "text/xml"})

    @property
    def params(self) -> list[dict[str, str]]:
        return [dict(r.url.params) for r in self.requests]


@pytest.fixture()
def make_client():
    """Build an :class:`OAIClient` whose transport replays *pages*."""
    http_clients: list[httpx.Client] = []

    def _make(pages: list[bytes | httpx.Response]) -> tuple[OAIClient, ScriptedRepository]:
        repo = ScriptedRepository(pages)
        http = httpx.Client(transport=httpx.MockTransport(repo))
        http_clients.append(http)
        return OAIClient(BASE_URL, http_client=http), repo

    yield _make

    for http in http_clients:
        http.close()
