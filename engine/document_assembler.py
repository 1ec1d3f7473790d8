"""
Document Assembler - PdfDocument to object graph

Turns the in-memory document into a wired pikepdf object graph and hands it to
the object store for post-processing and serialization. The document is
consumed on entry, so a document can only ever be exported once.

Usage:
    >>> from engine.document_assembler import DocumentAssembler
    >>>
    >>> doc, page, layer = PdfDocument.new("Demo", 500, 500, "Layer 1")
    >>> with open("out.pdf", "wb") as f:
    ...     DocumentAssembler().export(doc, f)
"""

import io
import logging
from typing import BinaryIO, Dict, List, Optional

from pikepdf import Array, Dictionary, Name, Object, String, unparse_content_stream

from constants.pdf_keys import (
    KEY_TYPE, KEY_SUBTYPE, KEY_RESOURCES, KEY_FONT, KEY_PROPERTIES, KEY_PAGES,
    KEY_KIDS, KEY_COUNT, KEY_PARENT, KEY_MEDIA_BOX, KEY_TRIM_BOX, KEY_CROP_BOX,
    KEY_ROTATE, KEY_CONTENTS, KEY_PAGE_LAYOUT, KEY_PAGE_MODE, KEY_OC_PROPERTIES,
    KEY_OUTPUT_INTENTS, KEY_METADATA, KEY_OCGS, KEY_DEFAULT_CONFIG, KEY_ORDER, KEY_ON,
    KEY_RB_GROUPS, KEY_NAME, KEY_INTENT, KEY_USAGE, KEY_CREATOR_INFO, KEY_CREATOR,
    KEY_INFO, KEY_ID, KEY_S, KEY_OUTPUT_CONDITION, KEY_OUTPUT_CONDITION_IDENTIFIER,
    KEY_REGISTRY_NAME, KEY_INFO_STRING, KEY_DEST_OUTPUT_PROFILE,
    VAL_CATALOG, VAL_PAGES, VAL_PAGE, VAL_OCG, VAL_VIEW, VAL_DESIGN, VAL_ARTWORK, VAL_OC,
    VAL_METADATA, VAL_XML, VAL_ONE_COLUMN, VAL_USE_NONE, VAL_OUTPUT_INTENT,
    VAL_GTS_PDFX, VAL_GTS_PDFA1, RESOURCE_NAME_PREFIX
)
from constants.pdf_operators import OP_BDC, OP_EMC, OP_SAVE_STATE, OP_RESTORE_STATE, OP_CTM
from engine.config import ExportConfig
from engine.document import DocumentState, PdfDocument, PdfLayer, PdfPage
from engine.object_store import ObjectStore
from models.document_types import IccProfile
from processors.pdf_graphics import format_operand, make_instruction

logger = logging.getLogger(__name__)


class DocumentAssembler:
    """
    Builds and writes the object graph of a PdfDocument.

    Example:
        >>> assembler = DocumentAssembler(ExportConfig(compress_streams=False))
        >>> data = assembler.to_bytes(doc)
    """

    def __init__(self, config: Optional[ExportConfig] = None):
        self.config = config or ExportConfig.default()
        if not self.config.validate():
            raise ValueError("Invalid ExportConfig")

    def assemble(self, document: PdfDocument) -> ObjectStore:
        """
        Consume ``document`` and return its fully wired object store.

        Raises:
            DocumentConsumedError: if the document was already exported
        """
        state = document._consume()
        store = state.store
        metadata = state.metadata
        metadata.resolve_ids()

        # Forward reference: pages point at their parent before it is filled in
        pages_root = store.new_object_id()

        info = store.add_object(metadata.build_info_dictionary(self.config.creator, self.config.producer))
        xmp_stream = None
        if self.config.include_xmp_metadata:
            xmp_stream = store.make_stream(
                metadata.build_xmp_packet(self.config.creator, self.config.producer),
                Type=Name(VAL_METADATA),
                Subtype=Name(VAL_XML),
            )
        elif metadata.conformance.requires_xmp_metadata:
            logger.debug(f"{metadata.conformance.value} expects XMP metadata but include_xmp_metadata is off")

        layer_groups = self._build_layer_registry(store, state.pages)
        all_groups = [ocg for page_groups in layer_groups for ocg in page_groups]

        font_dictionary = None
        if len(state.fonts):
            font_dictionary = store.add_object(state.fonts.build_font_dictionary(store))

        kids = [
            self._build_page(store, page, page_groups, pages_root, font_dictionary)
            for page, page_groups in zip(state.pages, layer_groups)
        ]
        store.set_object(pages_root, Dictionary({
            KEY_TYPE: Name(VAL_PAGES),
            KEY_KIDS: Array(kids),
            KEY_COUNT: len(kids),
        }))

        self._build_catalog(store, state, pages_root, all_groups, xmp_stream)
        store.trailer[KEY_INFO] = info
        store.trailer[KEY_ID] = Array([String(metadata.document_id), String(metadata.instance_id)])

        if self.config.optimize:
            store.prune_unreferenced()
            store.drop_empty_streams()
        if self.config.compress_streams:
            store.compress()
        store.pdf_version = self.config.pdf_version or metadata.conformance.pdf_version
        store.object_stream_mode = self.config.object_stream_mode

        logger.debug(
            f"Assembled '{metadata.title}': {len(kids)} page(s), "
            f"{len(all_groups)} layer(s), {len(state.fonts)} font(s)"
        )
        return store

    def export(self, document: PdfDocument, sink: BinaryIO) -> int:
        """
        Assemble ``document`` and write it to ``sink``.

        Returns:
            Number of bytes written

        Raises:
            DocumentConsumedError: if the document was already exported
            PdfExportError: if serialization or the final write fails
        """
        title = document.metadata.title
        store = self.assemble(document)
        size = store.save_to(sink)
        logger.info(f"Exported '{title}' ({size} bytes)")
        return size

    def to_bytes(self, document: PdfDocument) -> bytes:
        buffer = io.BytesIO()
        self.export(document, buffer)
        return buffer.getvalue()

    # --- Optional content ---

    def _build_layer_registry(self, store: ObjectStore, pages: List[PdfPage]) -> List[List[Object]]:
        """One OCG per (page, layer), grouped per page in layer order."""
        intent = store.add_object(Array([Name(VAL_VIEW), Name(VAL_DESIGN)]))
        usage = store.add_object(Dictionary({
            KEY_CREATOR_INFO: Dictionary({
                KEY_CREATOR: String(self.config.creator),
                KEY_SUBTYPE: Name(VAL_ARTWORK),
            }),
        }))

        registry = []
        for page in pages:
            registry.append([
                store.add_object(Dictionary({
                    KEY_TYPE: Name(VAL_OCG),
                    KEY_NAME: String(layer.name),
                    KEY_INTENT: intent,
                    KEY_USAGE: usage,
                }))
                for layer in page.layers
            ])
        return registry

    # --- Pages ---

    @staticmethod
    def _marker_name(layer: PdfLayer) -> str:
        return f"{RESOURCE_NAME_PREFIX[KEY_PROPERTIES]}{layer.index}"

    def _wrap_layer(self, layer: PdfLayer) -> bytes:
        """Layer content inside its optional-content marker and a neutral graphics state."""
        prefix = unparse_content_stream([
            make_instruction(OP_BDC, Name(VAL_OC), Name(f"/{self._marker_name(layer)}")),
            make_instruction(OP_SAVE_STATE),
            make_instruction(OP_CTM, 1, 0, 0, 1, 0, 0),
        ])
        suffix = unparse_content_stream([
            make_instruction(OP_RESTORE_STATE),
            make_instruction(OP_EMC),
        ])
        parts = [prefix, bytes(layer.content), suffix] if layer.content else [prefix, suffix]
        return b"\n".join(parts)

    def _build_page(self, store: ObjectStore, page: PdfPage, page_groups: List[Object],
                    pages_root: Dictionary, font_dictionary: Optional[Object]) -> Object:
        # Layers paint back to front in registration order
        content = b"\n".join(self._wrap_layer(layer) for layer in page.layers)

        resources: Dict[str, Dict[str, Object]] = {}
        for layer, ocg in zip(page.layers, page_groups):
            resources.setdefault(KEY_PROPERTIES, {})[f"/{self._marker_name(layer)}"] = ocg
            for category, entries in layer.resources.items():
                merged = resources.setdefault(category, {})
                for name, obj in entries.items():
                    merged[f"/{name}"] = obj

        resource_dictionary = Dictionary({
            category: Dictionary(entries) for category, entries in resources.items() if entries
        })
        if font_dictionary is not None:
            resource_dictionary[KEY_FONT] = font_dictionary

        box = [0, 0, format_operand(page.width), format_operand(page.height)]
        page_dictionary = Dictionary({
            KEY_TYPE: Name(VAL_PAGE),
            KEY_PARENT: pages_root,
            KEY_ROTATE: 0,
            KEY_MEDIA_BOX: Array(box),
            KEY_TRIM_BOX: Array(box),
            KEY_CROP_BOX: Array(box),
            KEY_CONTENTS: store.make_stream(content),
        })
        if len(resource_dictionary.keys()):
            page_dictionary[KEY_RESOURCES] = resource_dictionary
        else:
            logger.debug(f"Page {page.index} has no resources")
        return store.add_object(page_dictionary)

    # --- Catalog ---

    def _build_output_intent(self, store: ObjectStore, profile: IccProfile, pdf_a: bool) -> Object:
        icc_stream = store.make_stream(
            profile.data,
            N=profile.profile_type.component_count,
            Alternate=Name(profile.profile_type.alternate),
        )
        return store.add_object(Dictionary({
            KEY_TYPE: Name(VAL_OUTPUT_INTENT),
            KEY_S: Name(VAL_GTS_PDFA1 if pdf_a else VAL_GTS_PDFX),
            KEY_OUTPUT_CONDITION: String(profile.output_condition),
            KEY_OUTPUT_CONDITION_IDENTIFIER: String(profile.output_condition_identifier),
            KEY_REGISTRY_NAME: String(profile.registry_name),
            KEY_INFO_STRING: String(profile.info),
            KEY_DEST_OUTPUT_PROFILE: icc_stream,
        }))

    def _build_catalog(self, store: ObjectStore, state: DocumentState, pages_root: Dictionary,
                       all_groups: List[Object], xmp_stream: Optional[Object]) -> None:
        catalog = store.catalog
        catalog[KEY_TYPE] = Name(VAL_CATALOG)
        catalog[KEY_PAGES] = pages_root
        catalog[KEY_PAGE_LAYOUT] = Name(VAL_ONE_COLUMN)
        catalog[KEY_PAGE_MODE] = Name(VAL_USE_NONE)
        catalog[KEY_OC_PROPERTIES] = Dictionary({
            KEY_OCGS: Array(all_groups),
            KEY_DEFAULT_CONFIG: Dictionary({
                KEY_ORDER: Array(all_groups),
                KEY_ON: Array(all_groups),
                KEY_RB_GROUPS: Array([]),
            }),
        })
        if xmp_stream is not None:
            catalog[KEY_METADATA] = xmp_stream

        if state.icc_profiles:
            pdf_a = state.metadata.conformance.is_pdf_a
            catalog[KEY_OUTPUT_INTENTS] = Array([
                self._build_output_intent(store, profile, pdf_a) for profile in state.icc_profiles
            ])
        elif state.metadata.conformance.requires_icc_profile:
            logger.debug(f"{state.metadata.conformance.value} expects an output intent but no ICC profile was added")
