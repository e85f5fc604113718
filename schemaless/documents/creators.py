from __future__ import annotations

import csv
import io
import json
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..errors import DocumentProcessingError
from ..settings import settings
from .coercion import coerce_text
from .flattener import Document, FieldPairs, StructureFlattener
from .sanitizer import sanitize_field_name

log = logging.getLogger(__name__)

RECORD_ELEMENTS = ("doc", "item", "record")
ATTRIBUTE_SUFFIX = "_attr"

FORMAT_SUFFIXES = {
    ".json": "json",
    ".csv": "csv",
    ".xml": "xml",
}


def detect_format(path: str | Path) -> str:
    suffix = Path(path).suffix.lower()
    fmt = FORMAT_SUFFIXES.get(suffix)
    if fmt is None:
        raise DocumentProcessingError(f"Cannot detect document format from file suffix: {suffix or path}")
    return fmt


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON literal: {name}")


def _local_name(tag: str) -> str:
    # "{namespace}name" -> "name"
    return tag.rsplit("}", 1)[-1]


class DocumentCreator:
    """Parses JSON, CSV or XML text into flattened documents, one per record."""

    def __init__(self, flattener: Optional[StructureFlattener] = None, max_input_chars: Optional[int] = None) -> None:
        self.flattener = flattener or StructureFlattener()
        self.max_input_chars = max_input_chars if max_input_chars is not None else settings.max_input_chars

    def create_documents(self, fmt: str, text: str) -> List[Document]:
        creators: Dict[str, Callable[[str], List[Document]]] = {
            "json": self.create_from_json,
            "csv": self.create_from_csv,
            "xml": self.create_from_xml,
        }
        creator = creators.get((fmt or "").lower())
        if creator is None:
            raise DocumentProcessingError(f"Unsupported document format: {fmt}")
        return creator(text)

    def _check_size(self, text: str, fmt: str) -> None:
        if len(text) > self.max_input_chars:
            raise DocumentProcessingError(
                f"{fmt.upper()} input too large: {len(text)} characters (limit {self.max_input_chars})"
            )

    # ---- JSON ----

    def create_from_json(self, text: str) -> List[Document]:
        """Each object of a top-level JSON array becomes one document.

        Any other top-level value yields no documents.
        """
        self._check_size(text, "json")
        try:
            data = json.loads(text, object_pairs_hook=FieldPairs, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as e:
            raise DocumentProcessingError(f"Invalid JSON: {e}") from e

        if not isinstance(data, list) or isinstance(data, FieldPairs):
            log.warning("JSON input is not an array (got %s); no documents created", type(data).__name__)
            return []

        docs: List[Document] = []
        for idx, item in enumerate(data):
            if not isinstance(item, FieldPairs):
                log.warning("Skipping JSON array element %d: expected an object, got %s", idx, type(item).__name__)
                continue
            try:
                docs.append(self.flattener.flatten(item))
            except RecursionError as e:
                raise DocumentProcessingError(f"Invalid JSON: array element {idx} is nested too deeply") from e
        return docs

    # ---- CSV ----

    def create_from_csv(self, text: str) -> List[Document]:
        """First row is the header; every following non-blank row is a document.

        Values are kept as strings.
        """
        self._check_size(text, "csv")
        if text.startswith("\ufeff"):
            text = text[1:]
        # cells may be as long as the whole input
        if csv.field_size_limit() < self.max_input_chars:
            csv.field_size_limit(self.max_input_chars)
        reader = csv.reader(io.StringIO(text, newline=""), strict=True)
        docs: List[Document] = []
        try:
            header: Optional[List[str]] = None
            for row in reader:
                if not row or (len(row) == 1 and row[0] == ""):
                    continue
                if header is None:
                    header = row
                    continue
                if len(row) != len(header):
                    raise DocumentProcessingError(
                        f"Invalid CSV: line {reader.line_num} has {len(row)} columns, header has {len(header)}"
                    )
                docs.append(self.flattener.flatten(FieldPairs(zip(header, row))))
        except csv.Error as e:
            raise DocumentProcessingError(f"Invalid CSV at line {reader.line_num}: {e}") from e

        if header is None:
            log.warning("CSV input has no header row; no documents created")
        return docs

    # ---- XML ----

    def create_from_xml(self, text: str) -> List[Document]:
        """Children of the root named doc, item or record are the documents;
        otherwise the root element itself is the only one.
        """
        self._check_size(text, "xml")
        try:
            root = ET.fromstring(text)
        except (ET.ParseError, ValueError) as e:
            raise DocumentProcessingError(f"Invalid XML: {e}") from e

        records = [child for child in root if _local_name(child.tag) in RECORD_ELEMENTS]
        if not records:
            records = [root]
        try:
            return [self.flattener.flatten(self._element_fields(el)) for el in records]
        except RecursionError as e:
            raise DocumentProcessingError("Invalid XML: elements are nested too deeply") from e

    def _element_fields(self, element: ET.Element) -> FieldPairs:
        fields = FieldPairs()
        for name, value in element.attrib.items():
            attr_field = sanitize_field_name(_local_name(name)) + ATTRIBUTE_SUFFIX
            fields.append((attr_field, coerce_text(value)))
        for child in element:
            fields.append((_local_name(child.tag), self._element_value(child)))
        return fields

    def _element_value(self, element: ET.Element) -> Any:
        if len(element) == 0 and not element.attrib:
            return coerce_text(element.text or "")
        fields = self._element_fields(element)
        text = element.text or ""
        if len(element):
            text = text.strip()
        if text:
            # mixed content: the element's own text is stored under its own name
            fields.insert(0, ("", coerce_text(text)))
        return fields


_default_creator: Optional[DocumentCreator] = None


def get_document_creator() -> DocumentCreator:
    global _default_creator
    if _default_creator is None:
        _default_creator = DocumentCreator()
    return _default_creator
