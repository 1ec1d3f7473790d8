"""Tests for document assembly and the written file structure."""

import io

import pdfplumber
import pikepdf
import pytest

from tests.conftest import FILLED_RECT_SVG, GRADIENT_SVG

from engine.config import ExportConfig
from engine.document import PdfDocument
from engine.document_assembler import DocumentAssembler
from engine.fonts import BuiltinFont
from models.document_types import IccProfile, PdfConformance
from models.graphics_types import Rgb
from processors.pdf_graphics import operators_in, summarize_operators
from processors.svg_scene_loader import load_svg
from utils.validation import DocumentConsumedError


def _open(data: bytes) -> pikepdf.Pdf:
    return pikepdf.open(io.BytesIO(data))


def _page_content(pdf: pikepdf.Pdf, index: int = 0) -> bytes:
    return pdf.pages[index].obj.Contents.read_bytes()


class TestStructure:
    def test_pages_and_layer_registry(self):
        doc, page, layer = PdfDocument.new("Layers", 300, 300, "P0L0")
        page.add_layer("P0L1")
        page2, _ = doc.add_page(300, 300, "P1L0")
        page2.add_layer("P1L1")
        page2.add_layer("P1L2")

        pdf = _open(DocumentAssembler().to_bytes(doc))
        assert len(pdf.pages) == 2
        assert int(pdf.Root.Pages.Count) == 2

        oc = pdf.Root.OCProperties
        names = [str(ocg.Name) for ocg in oc.OCGs]
        assert names == ["P0L0", "P0L1", "P1L0", "P1L1", "P1L2"]
        assert [str(ocg.Name) for ocg in oc.D.Order] == names
        assert len(oc.D.ON) == 5
        assert len(oc.D.RBGroups) == 0

    def test_ocg_dictionary(self):
        doc, page, layer = PdfDocument.new("OCG", 100, 100, "Only")
        pdf = _open(DocumentAssembler().to_bytes(doc))
        ocg = pdf.Root.OCProperties.OCGs[0]
        assert ocg.Type == pikepdf.Name.OCG
        assert [str(v) for v in ocg.Intent] == ["/View", "/Design"]
        assert ocg.Usage.CreatorInfo.Subtype == pikepdf.Name.Artwork

    def test_page_boxes(self):
        doc, page, layer = PdfDocument.new("Boxes", 200, 100, "Layer 1")
        pdf = _open(DocumentAssembler().to_bytes(doc))
        page_obj = pdf.pages[0].obj
        for key in ("/MediaBox", "/TrimBox", "/CropBox"):
            assert [float(v) for v in page_obj[key]] == [0.0, 0.0, 200.0, 100.0]
        assert int(page_obj.Rotate) == 0

    def test_catalog(self):
        doc, page, layer = PdfDocument.new("Catalog", 100, 100, "Layer 1")
        pdf = _open(DocumentAssembler().to_bytes(doc))
        assert pdf.Root.PageLayout == pikepdf.Name.OneColumn
        assert pdf.Root.PageMode == pikepdf.Name.UseNone
        assert "/OutputIntents" not in pdf.Root
        assert "/Metadata" in pdf.Root

    def test_trailer_ids(self):
        doc, page, layer = PdfDocument.new("Ids", 100, 100, "Layer 1")
        doc.with_document_id("A" * 32).with_instance_id("B" * 32)
        pdf = _open(DocumentAssembler().to_bytes(doc))
        assert [bytes(v) for v in pdf.trailer.ID] == [b"A" * 32, b"B" * 32]

    def test_trailer_ids_with_object_streams(self):
        doc, page, layer = PdfDocument.new("Ids", 100, 100, "Layer 1")
        doc.with_document_id("C" * 32)
        pdf = _open(DocumentAssembler(ExportConfig(object_stream_mode="generate")).to_bytes(doc))
        assert bytes(pdf.trailer.ID[0]) == b"C" * 32
        assert len(pdf.trailer.ID) == 2


class TestContent:
    def test_demo_content_stream(self, demo_document):
        pdf = _open(DocumentAssembler().to_bytes(demo_document))
        counts = summarize_operators(_page_content(pdf))
        assert counts[b'cm'] == 1
        assert counts[b'm'] + counts[b'l'] == 4
        assert counts[b'l'] == 3
        assert counts[b'S'] == 1
        assert counts[b'f'] == 0
        assert counts[b'BDC'] == 1
        assert counts[b'EMC'] == 1

    def test_layers_wrapped_in_order(self):
        doc, page, layer = PdfDocument.new("Order", 100, 100, "Back")
        front = page.add_layer("Front")
        layer.set_fill_color(Rgb(r=1, g=0, b=0))
        front.set_fill_color(Rgb(r=0, g=0, b=1))

        data = DocumentAssembler(ExportConfig(compress_streams=False)).to_bytes(doc)
        content = _page_content(_open(data))
        assert content.index(b"/MC0 BDC") < content.index(b"1 0 0 rg") < content.index(b"/MC1 BDC") < content.index(b"0 0 1 rg")
        assert operators_in(content, [b'BDC', b'q', b'Q', b'EMC']) == [b'BDC', b'q', b'Q', b'EMC'] * 2

    def test_properties_map_to_ocgs(self):
        doc, page, layer = PdfDocument.new("Props", 100, 100, "Layer 1")
        pdf = _open(DocumentAssembler().to_bytes(doc))
        properties = pdf.pages[0].obj.Resources.Properties
        assert properties.MC0.objgen == pdf.Root.OCProperties.OCGs[0].objgen

    def test_layer_resources_merged(self):
        doc, page, layer = PdfDocument.new("Resources", 100, 100, "Layer 1")
        second = page.add_layer("Layer 2")
        layer.set_fill_alpha(0.5)
        second.add_svg(load_svg(GRADIENT_SVG))

        pdf = _open(DocumentAssembler().to_bytes(doc))
        resources = pdf.pages[0].obj.Resources
        assert "/GS0_0" in resources.ExtGState
        assert len(resources.Shading) == 2
        assert all(name.startswith("/SH1_") for name in resources.Shading.keys())


class TestFonts:
    def test_builtin_font_shared_across_pages(self):
        doc, page, layer = PdfDocument.new("Fonts", 300, 300, "Layer 1")
        font = doc.add_builtin_font(BuiltinFont.HELVETICA)
        layer.use_text("Page one", 12, 10, 10, font)
        _, layer2 = doc.add_page(300, 300, "Layer 1")
        layer2.use_text("Page two", 12, 10, 10, font)

        pdf = _open(DocumentAssembler().to_bytes(doc))
        fonts = [p.obj.Resources.Font for p in pdf.pages]
        assert fonts[0].objgen == fonts[1].objgen
        assert fonts[0].F0.BaseFont == pikepdf.Name.Helvetica

    def test_external_font_embedded(self, test_font_bytes):
        doc, page, layer = PdfDocument.new("Embedded", 300, 300, "Layer 1")
        font = doc.add_external_font(io.BytesIO(test_font_bytes))
        layer.use_text("A A", 12, 10, 10, font)

        pdf = _open(DocumentAssembler().to_bytes(doc))
        font_dict = pdf.pages[0].obj.Resources.Font.F0
        assert font_dict.Subtype == pikepdf.Name.TrueType
        assert str(font_dict.BaseFont) == "/TestSans-Regular"
        assert font_dict.FontDescriptor.FontFile2.read_bytes() == test_font_bytes

    def test_no_fonts_no_font_resource(self):
        doc, page, layer = PdfDocument.new("No fonts", 100, 100, "Layer 1")
        pdf = _open(DocumentAssembler().to_bytes(doc))
        assert "/Font" not in pdf.pages[0].obj.Resources


class TestMetadata:
    def test_info_dictionary(self):
        doc, page, layer = PdfDocument.new("Report", 100, 100, "Layer 1")
        pdf = _open(DocumentAssembler().to_bytes(doc))
        info = pdf.trailer.Info
        assert str(info.Title) == "Report"
        assert str(info.Producer) == "rebirth-pdfgen"
        assert str(info.GTS_PDFXVersion) == "PDF/X-3:2002"
        assert str(info.CreationDate).startswith("D:")
        assert info.Trapped == pikepdf.Name("/False")

    def test_xmp_matches_info(self):
        doc, page, layer = PdfDocument.new("Report", 100, 100, "Layer 1")
        doc.with_document_id("0123456789ABCDEF0123456789ABCDEF")
        pdf = _open(DocumentAssembler().to_bytes(doc))
        xmp = pdf.Root.Metadata.read_bytes().decode("utf-8")
        assert "Report" in xmp
        assert "uuid:0123456789ABCDEF0123456789ABCDEF" in xmp
        created = str(pdf.trailer.Info.CreationDate)
        # D:YYYYMMDDHHmmSS matches the ISO form in the packet
        iso = f"{created[2:6]}-{created[6:8]}-{created[8:10]}T{created[10:12]}:{created[12:14]}:{created[14:16]}"
        assert f"<xmp:CreateDate>{iso}" in xmp

    def test_xmp_can_be_disabled(self):
        doc, page, layer = PdfDocument.new("No XMP", 100, 100, "Layer 1")
        pdf = _open(DocumentAssembler(ExportConfig(include_xmp_metadata=False)).to_bytes(doc))
        assert "/Metadata" not in pdf.Root

    def test_output_intent_with_icc_profile(self):
        doc, page, layer = PdfDocument.new("Print", 100, 100, "Layer 1")
        doc.add_icc_profile(IccProfile(data=b"fake icc profile bytes"))
        pdf = _open(DocumentAssembler().to_bytes(doc))
        intents = pdf.Root.OutputIntents
        assert len(intents) == 1
        assert intents[0].S == pikepdf.Name.GTS_PDFX
        assert int(intents[0].DestOutputProfile.N) == 4

    def test_pdf_version_follows_conformance(self):
        doc, page, layer = PdfDocument.new("Archive", 100, 100, "Layer 1")
        doc.with_conformance(PdfConformance.A1B_2005_PDF_1_4)
        data = DocumentAssembler().to_bytes(doc)
        assert data.startswith(b"%PDF-1.4")
        assert "/GTS_PDFXVersion" not in _open(data).trailer.Info


class TestExport:
    def test_export_twice_rejected(self, demo_document):
        assembler = DocumentAssembler()
        assembler.to_bytes(demo_document)
        with pytest.raises(DocumentConsumedError):
            assembler.to_bytes(demo_document)

    def test_export_returns_size(self, demo_document):
        sink = io.BytesIO()
        size = DocumentAssembler().export(demo_document, sink)
        assert size == len(sink.getvalue())

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            DocumentAssembler(ExportConfig(object_stream_mode="sometimes"))

    def test_readable_by_pdfplumber(self):
        doc, page, layer = PdfDocument.new("Plumbed", 300, 200, "Layer 1")
        layer.add_svg(load_svg(FILLED_RECT_SVG), 0, 0, 200, 200)
        data = DocumentAssembler().to_bytes(doc)
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            assert len(pdf.pages) == 1
            assert pdf.pages[0].width == 300
            assert pdf.pages[0].height == 200
            assert pdf.metadata["Title"] == "Plumbed"
