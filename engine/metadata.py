"""
Document metadata

Builds the two metadata forms written on export: the trailer Info
dictionary and the XMP packet. Both are rendered from one PdfMetadata so
title and timestamps always agree.
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from xml.sax.saxutils import escape

from pikepdf import Dictionary, Name, String

from constants.pdf_keys import (
    KEY_TITLE, KEY_PRODUCER, KEY_CREATOR, KEY_KEYWORDS, KEY_TRAPPED,
    KEY_CREATION_DATE, KEY_MOD_DATE, KEY_PDFX_VERSION, VAL_TRUE, VAL_FALSE
)
from models.document_types import PdfConformance

logger = logging.getLogger(__name__)

INFO_DATE_FORMAT = "D:%Y%m%d%H%M%S+00'00'"
XMP_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S+00:00"

XMP_TEMPLATE = """<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>
<x:xmpmeta xmlns:x="adobe:ns:meta/">
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
<rdf:Description rdf:about=""
 xmlns:xmp="http://ns.adobe.com/xap/1.0/"
 xmlns:dc="http://purl.org/dc/elements/1.1/"
 xmlns:xmpMM="http://ns.adobe.com/xap/1.0/mm/"
 xmlns:pdf="http://ns.adobe.com/pdf/1.3/"
 xmlns:pdfx="http://ns.adobe.com/pdfx/1.3/"
 xmlns:pdfxid="http://www.npes.org/pdfx/ns/id/"
 xmlns:pdfaid="http://www.aiim.org/pdfa/ns/id/">
<xmp:CreateDate>{create_date}</xmp:CreateDate>
<xmp:ModifyDate>{modify_date}</xmp:ModifyDate>
<xmp:MetadataDate>{metadata_date}</xmp:MetadataDate>
<xmp:CreatorTool>{creator}</xmp:CreatorTool>
<dc:format>application/pdf</dc:format>
<dc:title><rdf:Alt><rdf:li xml:lang="x-default">{title}</rdf:li></rdf:Alt></dc:title>
<xmpMM:DocumentID>uuid:{document_id}</xmpMM:DocumentID>
<xmpMM:InstanceID>uuid:{instance_id}</xmpMM:InstanceID>
<xmpMM:RenditionClass>default</xmpMM:RenditionClass>
<xmpMM:VersionID>{version}</xmpMM:VersionID>
<pdf:Producer>{producer}</pdf:Producer>
<pdf:Trapped>{trapped}</pdf:Trapped>
{conformance}</rdf:Description>
</rdf:RDF>
</x:xmpmeta>
<?xpacket end="w"?>"""


def random_character_string_32() -> str:
    """32 uppercase hex characters, used for document and instance ids."""
    return secrets.token_hex(16).upper()


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_info_date(value: datetime) -> str:
    return _utc(value).strftime(INFO_DATE_FORMAT)


def format_xmp_date(value: datetime) -> str:
    return _utc(value).strftime(XMP_DATE_FORMAT)


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass
class PdfMetadata:
    """Document-wide metadata; ids are generated on export when left unset."""
    title: str
    trapping: bool = False
    document_id: Optional[str] = None
    instance_id: Optional[str] = None
    document_version: int = 1
    conformance: PdfConformance = PdfConformance.X3_2002_PDF_1_3
    creation_date: datetime = field(default_factory=_now)
    modification_date: datetime = field(default_factory=_now)
    metadata_date: datetime = field(default_factory=_now)
    keywords: Optional[str] = None

    def resolve_ids(self) -> None:
        """Fill in missing identifiers with fresh random ones."""
        if not self.document_id:
            self.document_id = random_character_string_32()
        if not self.instance_id:
            self.instance_id = random_character_string_32()

    def build_info_dictionary(self, creator: str, producer: str) -> Dictionary:
        info = Dictionary({
            KEY_TRAPPED: Name(VAL_TRUE if self.trapping else VAL_FALSE),
            KEY_CREATION_DATE: String(format_info_date(self.creation_date)),
            KEY_MOD_DATE: String(format_info_date(self.modification_date)),
            KEY_TITLE: String(self.title),
            KEY_CREATOR: String(creator),
            KEY_PRODUCER: String(producer),
        })
        if self.conformance.is_pdf_x:
            info[KEY_PDFX_VERSION] = String(self.conformance.value)
        if self.keywords:
            info[KEY_KEYWORDS] = String(self.keywords)
        return info

    def build_xmp_packet(self, creator: str, producer: str) -> bytes:
        conformance_lines = ""
        if self.conformance.is_pdf_x:
            conformance_lines = (
                f"<pdfx:GTS_PDFXVersion>{self.conformance.value}</pdfx:GTS_PDFXVersion>\n"
                f"<pdfxid:GTS_PDFXVersion>{self.conformance.value}</pdfxid:GTS_PDFXVersion>\n"
            )
        elif self.conformance.is_pdf_a:
            part = "1" if self.conformance is PdfConformance.A1B_2005_PDF_1_4 else "2"
            conformance_lines = (
                f"<pdfaid:part>{part}</pdfaid:part>\n"
                f"<pdfaid:conformance>B</pdfaid:conformance>\n"
            )

        packet = XMP_TEMPLATE.format(
            create_date=format_xmp_date(self.creation_date),
            modify_date=format_xmp_date(self.modification_date),
            metadata_date=format_xmp_date(self.metadata_date),
            creator=escape(creator),
            title=escape(self.title),
            document_id=self.document_id,
            instance_id=self.instance_id,
            version=self.document_version,
            producer=escape(producer),
            trapped="True" if self.trapping else "False",
            conformance=conformance_lines,
        )
        return packet.encode('utf-8')
