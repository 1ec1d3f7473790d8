"""Tests for the pikepdf-backed object store."""

import io

import pikepdf
import pytest
from pikepdf import Array, Dictionary, Name

from engine.object_store import ObjectStore
from utils.validation import PdfExportError


class FailingWriter:
    def write(self, data):
        raise OSError("disk full")


def test_placeholder_filled_later():
    store = ObjectStore()
    placeholder = store.new_object_id()
    assert placeholder.objgen in store
    store.set_object(placeholder, Dictionary({"/Type": Name("/Pages"), "/Count": 0}))
    assert store.get_object(placeholder.objgen).Type == Name.Pages


def test_add_object_returns_indirect():
    store = ObjectStore()
    obj = store.add_object(Dictionary({"/Answer": 42}))
    assert obj.is_indirect
    assert store.get_object(obj.objgen) is not None
    # Adding an already indirect object keeps its id
    assert store.add_object(obj).objgen == obj.objgen


def test_prune_unreferenced():
    store = ObjectStore()
    linked = store.add_object(Dictionary({"/Linked": True}))
    orphan = store.add_object(Dictionary({"/Orphan": True}))
    store.catalog["/Linked"] = linked

    removed = store.prune_unreferenced()
    assert removed == 1
    assert linked.objgen in store
    assert orphan.objgen not in store


def test_drop_empty_streams():
    store = ObjectStore()
    empty = store.make_stream(b"")
    full = store.make_stream(b"0 0 m")
    store.catalog["/Empty"] = empty
    store.catalog["/List"] = Array([empty, full])

    assert store.drop_empty_streams() == 1
    assert "/Empty" not in store.catalog
    assert len(store.catalog.List) == 1
    assert empty.objgen not in store
    assert full.objgen in store


def test_save_to_writes_pdf():
    store = ObjectStore(pdf_version="1.4")
    sink = io.BytesIO()
    size = store.save_to(sink)
    assert size == len(sink.getvalue())
    assert sink.getvalue().startswith(b"%PDF-1.4")


def test_compress_flag():
    store = ObjectStore()
    store.catalog["/Data"] = store.make_stream(b"0 0 m 10 10 l S " * 50)
    plain = io.BytesIO()
    store.save_to(plain)

    store.compress()
    packed = io.BytesIO()
    store.save_to(packed)
    assert len(packed.getvalue()) < len(plain.getvalue())
    reopened = pikepdf.open(io.BytesIO(packed.getvalue()))
    assert reopened.Root.Data.read_bytes() == b"0 0 m 10 10 l S " * 50


def test_write_failure_is_export_error():
    store = ObjectStore()
    with pytest.raises(PdfExportError):
        store.save_to(FailingWriter())
