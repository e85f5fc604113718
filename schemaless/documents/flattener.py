from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple, Union

from .coercion import Scalar, coerce_value, is_scalar
from .sanitizer import join_field_name, sanitize_field_name

FieldValue = Union[Scalar, List[Scalar]]
Document = Dict[str, FieldValue]


class FieldPairs(List[Tuple[str, Any]]):
    """Ordered ``(key, value)`` pairs of one parsed object.

    Used instead of a dict wherever the input can repeat a key (duplicate JSON
    object keys, duplicate CSV headers, repeated XML child elements), so every
    occurrence reaches the flattener. Also usable as ``object_pairs_hook``
    for :func:`json.loads`.
    """


def _items(value: Any) -> Iterable[Tuple[str, Any]]:
    if isinstance(value, FieldPairs):
        return value
    return value.items()


def _is_mapping(value: Any) -> bool:
    return isinstance(value, (dict, FieldPairs))


class StructureFlattener:
    """Flatten one parsed record into a :data:`Document`.

    Nested keys are joined with ``_`` after sanitizing each of them. A field
    reached more than once (repeated keys, arrays, or different paths that
    sanitize to the same name) becomes multi-valued in encounter order.
    Objects and arrays nested inside an array are dropped; only the scalar
    elements of such an array are kept.
    """

    def flatten(self, record: Any) -> Document:
        doc: Document = {}
        self._visit(record, "", doc)
        return doc

    def _visit(self, value: Any, prefix: str, doc: Document) -> None:
        if _is_mapping(value):
            for key, child in _items(value):
                self._visit(child, join_field_name(prefix, sanitize_field_name(str(key))), doc)
        elif isinstance(value, list):
            self._visit_sequence(value, prefix, doc)
        elif value is not None:
            self._add(doc, prefix, coerce_value(value))

    def _visit_sequence(self, values: List[Any], prefix: str, doc: Document) -> None:
        # TODO: give arrays of objects a per-element representation instead of dropping them
        coerced = [coerce_value(v) for v in values if v is not None and is_scalar(v)]
        if not coerced:
            return
        existing = doc.get(prefix)
        if existing is None:
            doc[prefix] = coerced
        elif isinstance(existing, list):
            existing.extend(coerced)
        else:
            doc[prefix] = [existing] + coerced

    @staticmethod
    def _add(doc: Document, field: str, value: Scalar) -> None:
        if field not in doc:
            doc[field] = value
            return
        existing = doc[field]
        if isinstance(existing, list):
            existing.append(value)
        else:
            doc[field] = [existing, value]


def flatten(record: Any) -> Document:
    return StructureFlattener().flatten(record)
