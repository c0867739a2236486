"""MARCXML records and their bibliographic projection.

Record structure follows the MARC 21 slim schema:
  https://www.loc.gov/standards/marcxml/

Control fields (001-009) hold a bare value; data fields (010-999) carry two
indicators and an ordered list of subfields.  Tags and subfield codes may
repeat, and order is significant, so nothing here deduplicates.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar

from oaiharvest.formats.base import (
    MetadataFormat,
    children,
    first_child,
    localname,
    text_of,
)


@dataclass(frozen=True)
class ControlField:
    tag: str
    value: str


@dataclass(frozen=True)
class Subfield:
    code: str
    value: str


@dataclass(frozen=True)
class DataField:
    tag: str
    ind1: str = " "
    ind2: str = " "
    subfields: list[Subfield] = field(default_factory=list)


@dataclass(frozen=True)
class BookMetadata:
    """Bibliographic view of a MARC record. Missing fields are empty, never None."""

    format_tag: ClassVar[MetadataFormat] = MetadataFormat.MARCXML

    record_id: str = ""  # 001
    last_modified: str = ""  # 005
    isbn: str = ""  # 020$a
    call_number: str = ""  # 090
    main_author: str = ""  # 100$a
    corporate_author: str = ""  # 110$a
    meeting_name: str = ""  # 111$a
    title: str = ""  # 245$a
    subtitle: str = ""  # 245$b
    responsibility: str = ""  # 245$c
    edition: str = ""  # 250$a
    publish_place: str = ""  # 260$a
    publisher: str = ""  # 260$b
    publish_year: str = ""  # 260$c
    physical_desc: str = ""  # 300
    notes: list[str] = field(default_factory=list)  # 500$a
    bibliography: str = ""  # 504$a
    subjects: list[str] = field(default_factory=list)  # 650$a
    authors: list[str] = field(default_factory=list)  # 700$a
    holdings: list[str] = field(default_factory=list)  # 990$a, 999$a
    url: str = ""  # 856$u
    classification: str = ""  # 082$a

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class MARCRecord:
    """A single MARCXML ``record`` element."""

    leader: str = ""
    control_fields: list[ControlField] = field(default_factory=list)
    data_fields: list[DataField] = field(default_factory=list)

    # --- Field access ---

    def get_field_value(self, tag: str, code: str) -> str:
        """First ``tag$code`` value across all occurrences of *tag*, or ``""``."""
        for df in self.data_fields:
            if df.tag != tag:
                continue
            for sf in df.subfields:
                if sf.code == code:
                    return sf.value
        return ""

    def get_field_values(self, tag: str, code: str) -> list[str]:
        """Every ``tag$code`` value in document order, duplicates included."""
        return [
            sf.value
            for df in self.data_fields
            if df.tag == tag
            for sf in df.subfields
            if sf.code == code
        ]

    def get_control_field_value(self, tag: str) -> str:
        for cf in self.control_fields:
            if cf.tag == tag:
                return cf.value
        return ""

    def get_all_subfields(self, tag: str) -> list[DataField]:
        """Every occurrence of data field *tag*, with its full subfield list."""
        return [df for df in self.data_fields if df.tag == tag]

    def _first_occurrence_values(self, tag: str) -> list[str]:
        occurrences = self.get_all_subfields(tag)
        if not occurrences:
            return []
        return [sf.value for sf in occurrences[0].subfields if sf.value]

    # --- Projection ---

    def extract_book_metadata(self) -> BookMetadata:
        # 090 keeps at most two parts (class + cutter); 300 keeps them all.
        call_parts = self._first_occurrence_values("090")
        physical_parts = self._first_occurrence_values("300")

        return BookMetadata(
            record_id=self.get_control_field_value("001"),
            last_modified=self.get_control_field_value("005"),
            isbn=self.get_field_value("020", "a"),
            classification=self.get_field_value("082", "a"),
            call_number=" ".join(call_parts[:2]),
            main_author=self.get_field_value("100", "a"),
            corporate_author=self.get_field_value("110", "a"),
            meeting_name=self.get_field_value("111", "a"),
            title=self.get_field_value("245", "a"),
            subtitle=self.get_field_value("245", "b"),
            responsibility=self.get_field_value("245", "c"),
            edition=self.get_field_value("250", "a"),
            publish_place=self.get_field_value("260", "a"),
            publisher=self.get_field_value("260", "b"),
            publish_year=self.get_field_value("260", "c"),
            physical_desc=" ".join(physical_parts),
            notes=self.get_field_values("500", "a"),
            bibliography=self.get_field_value("504", "a"),
            subjects=self.get_field_values("650", "a"),
            authors=self.get_field_values("700", "a"),
            holdings=self.get_field_values("990", "a") + self.get_field_values("999", "a"),
            url=self.get_field_value("856", "u"),
        )

    def extract_metadata(self) -> BookMetadata:
        return self.extract_book_metadata()

    def get_format(self) -> MetadataFormat:
        return MetadataFormat.MARCXML


def parse_marc_record(el: Any) -> MARCRecord:
    """Build a :class:`MARCRecord` from a MARCXML ``record`` element."""
    record = MARCRecord(leader=text_of(first_child(el, "leader")))
    for child in el:
        name = localname(child)
        if name == "controlfield":
            record.control_fields.append(
                ControlField(tag=child.get("tag", ""), value=text_of(child))
            )
        elif name == "datafield":
            record.data_fields.append(
                DataField(
                    tag=child.get("tag", ""),
                    ind1=child.get("ind1", " "),
                    ind2=child.get("ind2", " "),
                    subfields=[
                        Subfield(code=sf.get("code", ""), value=text_of(sf))
                        for sf in children(child, "subfield")
                    ],
                )
            )
    return record


def parse_payload(metadata_el: Any) -> MARCRecord | None:
    """Return the MARC record inside an OAI ``metadata`` element, if any."""
    marc_el = first_child(metadata_el, "record")
    if marc_el is None:
        return None
    return parse_marc_record(marc_el)
