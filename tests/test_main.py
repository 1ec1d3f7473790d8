"""Tests for the command line entry point."""

from tests.conftest import FILLED_RECT_SVG

from main import main


def test_demo(tmp_path):
    target = tmp_path / "demo.pdf"
    assert main(["-o", str(target)]) == 0
    assert target.read_bytes().startswith(b"%PDF-")


def test_svg_file(tmp_path):
    source = tmp_path / "swatch.svg"
    source.write_text(FILLED_RECT_SVG, encoding="utf-8")
    target = tmp_path / "swatch.pdf"
    assert main([str(source), "-o", str(target)]) == 0
    assert target.exists()


def test_missing_svg(tmp_path):
    assert main([str(tmp_path / "nope.svg"), "-o", str(tmp_path / "out.pdf")]) == 1


def test_invalid_svg(tmp_path):
    source = tmp_path / "broken.svg"
    source.write_text("<svg", encoding="utf-8")
    assert main([str(source), "-o", str(tmp_path / "out.pdf")]) == 1
