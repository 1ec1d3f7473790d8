"""
Object Store

Thin adapter over a pikepdf document that allocates object ids, keeps a
registry of the objects added during assembly, applies the post-processing
passes, and serializes the finished graph.
"""

import io
import logging
import re
from typing import BinaryIO, Dict, Iterator, Optional, Set, Tuple

import pikepdf
from pikepdf import Array, Dictionary, Object, Pdf, Stream

from utils.validation import PdfExportError

logger = logging.getLogger(__name__)

ObjectId = Tuple[int, int]

_PDF_STRING = rb'(?:<[0-9A-Fa-f\s]*>|\((?:\\.|[^\\)])*\))'
_TRAILER_ID_RE = re.compile(rb'(/ID\s*\[\s*' + _PDF_STRING + rb'\s*)' + _PDF_STRING + rb'(\s*\])')


class ObjectStore:
    """
    Object graph for one document.

    Ids are the (object number, generation) pairs assigned by pikepdf when an
    object is made indirect. Allocation is a plain counter inside QPDF and is
    not thread-safe.
    """

    def __init__(self, pdf_version: str = "1.3"):
        self.pdf = Pdf.new()
        self.pdf_version = pdf_version
        self.compress_streams = False
        self.object_stream_mode = "disable"
        self._objects: Dict[ObjectId, Object] = {}

    def new_object_id(self) -> Dictionary:
        """Reserve an id for an object whose contents are filled in later."""
        placeholder = self.pdf.make_indirect(Dictionary())
        self._objects[placeholder.objgen] = placeholder
        return placeholder

    def add_object(self, obj) -> Object:
        """Add an object to the graph and return its indirect reference."""
        if isinstance(obj, Object) and obj.is_indirect:
            self._objects[obj.objgen] = obj
            return obj
        indirect = self.pdf.make_indirect(obj)
        self._objects[indirect.objgen] = indirect
        return indirect

    def set_object(self, placeholder: Dictionary, payload: Dictionary) -> Dictionary:
        """Fill a reserved dictionary id with the keys of ``payload``."""
        for key in list(placeholder.keys()):
            del placeholder[key]
        for key in payload.keys():
            placeholder[key] = payload[key]
        return placeholder

    def get_object(self, object_id: ObjectId) -> Optional[Object]:
        return self._objects.get(object_id)

    def make_stream(self, data: bytes, **entries) -> Stream:
        stream = Stream(self.pdf, data)
        for key, value in entries.items():
            stream[f"/{key}"] = value
        return self.add_object(stream)

    @property
    def catalog(self) -> Dictionary:
        return self.pdf.Root

    @property
    def trailer(self) -> Dictionary:
        return self.pdf.trailer

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, object_id: ObjectId) -> bool:
        return object_id in self._objects

    def _walk(self, start: Object) -> Iterator[Object]:
        """Yield every container reachable from ``start``, visiting indirect objects once."""
        seen: Set[ObjectId] = set()
        stack = [start]
        while stack:
            obj = stack.pop()
            if not isinstance(obj, Object):
                continue
            if obj.is_indirect:
                if obj.objgen in seen:
                    continue
                seen.add(obj.objgen)
            if isinstance(obj, (Dictionary, Stream)):
                yield obj
                stack.extend(obj[key] for key in obj.keys())
            elif isinstance(obj, Array):
                yield obj
                stack.extend(obj)

    def reachable_ids(self) -> Set[ObjectId]:
        reachable = set()
        for obj in self._walk(self.trailer):
            for child in _children(obj):
                if isinstance(child, Object) and child.is_indirect:
                    reachable.add(child.objgen)
        return reachable

    def prune_unreferenced(self) -> int:
        """
        Forget registered objects that nothing reachable from the trailer refers to.

        Only the registry is updated here. The objects themselves are left out
        of the file by the QPDF writer, which serializes just what the trailer
        reaches.
        """
        reachable = self.reachable_ids()
        unreferenced = [object_id for object_id in self._objects if object_id not in reachable]
        for object_id in unreferenced:
            del self._objects[object_id]
        if unreferenced:
            logger.debug(f"Pruned {len(unreferenced)} unreferenced object(s)")
        return len(unreferenced)

    def drop_empty_streams(self) -> int:
        """Remove zero-length streams along with every reference to them."""
        empty = {
            object_id for object_id, obj in self._objects.items()
            if isinstance(obj, Stream) and len(obj.read_raw_bytes()) == 0
        }
        if not empty:
            return 0

        def is_empty_ref(value) -> bool:
            return isinstance(value, Object) and value.is_indirect and value.objgen in empty

        for obj in list(self._walk(self.trailer)):
            if isinstance(obj, Array):
                for index in reversed(range(len(obj))):
                    if is_empty_ref(obj[index]):
                        del obj[index]
            else:
                for key in list(obj.keys()):
                    if is_empty_ref(obj[key]):
                        del obj[key]

        for object_id in empty:
            del self._objects[object_id]
        logger.debug(f"Dropped {len(empty)} empty stream(s)")
        return len(empty)

    def compress(self) -> None:
        self.compress_streams = True

    def save_to(self, writer: BinaryIO) -> int:
        """
        Serialize the graph and write it to ``writer``.

        The file is rendered into memory first so the sink receives either the
        complete document or nothing.

        Returns:
            Number of bytes written
        """
        instance_id = self._requested_instance_id()
        buffer = io.BytesIO()
        try:
            self.pdf.save(
                buffer,
                compress_streams=self.compress_streams,
                min_version=self.pdf_version,
                fix_metadata_version=False,
                object_stream_mode=getattr(pikepdf.ObjectStreamMode, self.object_stream_mode),
            )
        except pikepdf.PdfError as e:
            logger.error(f"Failed to serialize document: {e}")
            raise PdfExportError(f"Failed to serialize document: {e}") from e

        data = buffer.getvalue()
        if instance_id is not None:
            data = _restore_instance_id(data, instance_id)
        try:
            writer.write(data)
        except OSError as e:
            logger.error(f"Failed to write document: {e}")
            raise PdfExportError(f"Failed to write document: {e}") from e

        logger.debug(f"Wrote {len(data)} bytes")
        return len(data)

    def _requested_instance_id(self) -> Optional[bytes]:
        ids = self.trailer.get("/ID")
        if not isinstance(ids, Array) or len(ids) != 2:
            return None
        return bytes(ids[1])


def _restore_instance_id(data: bytes, instance_id: bytes) -> bytes:
    """
    Put ``instance_id`` back into the second trailer /ID element.

    QPDF keeps the first element but always generates the second one. The
    trailer dictionary follows the cross-reference table, so rewriting it
    moves no object offsets. With an xref stream the trailer is part of a
    stream and the generated id is kept.
    """
    trailer_start = data.rfind(b"trailer")
    if trailer_start < 0:
        logger.debug("Trailer is stored in an xref stream, keeping the generated instance id")
        return data

    head, tail = data[:trailer_start], data[trailer_start:]
    replacement = b"<" + instance_id.hex().encode("ascii") + b">"
    tail, count = _TRAILER_ID_RE.subn(lambda m: m.group(1) + replacement + m.group(2), tail, count=1)
    if not count:
        logger.debug("No /ID entry found in the trailer")
    return head + tail


def _children(obj: Object):
    if isinstance(obj, Array):
        return list(obj)
    return [obj[key] for key in obj.keys()]
