"""Merge sparse locale overrides onto canonical content records.

Every function here is pure: canonical records are never mutated, and a
missing, empty, or malformed override yields the canonical object itself.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import fields, is_dataclass, replace
from typing import TypeVar

from .models import ContentBlock, Document, DocumentOverride, TocEntry, TocItem, protected_fields

R = TypeVar("R")


def merge_fields(item: R, override: object) -> R:
    """Shallow-merge override fields onto one record.

    Unknown fields, protected fields (code, anchors) and ``None`` values are
    ignored, so the record class, and with it the variant tag, never changes.
    """
    changes = _applicable_fields(item, override)
    if not changes:
        return item
    return replace(item, **changes)  # type: ignore[type-var]


def resolve_blocks(
    canonical: Sequence[ContentBlock], overrides: Mapping[int, Mapping[str, object]] | None
) -> tuple[ContentBlock, ...]:
    """Return effective blocks; length and order always match `canonical`."""
    if not isinstance(overrides, Mapping) or not overrides:
        return tuple(canonical)
    return tuple(merge_fields(block, overrides.get(index)) for index, block in enumerate(canonical))


def resolve_toc(canonical: Sequence[TocItem], labels: Mapping[str, str] | None) -> tuple[TocItem, ...]:
    """Replace navigation labels by id, keeping ids and nesting."""
    if not isinstance(labels, Mapping) or not labels:
        return tuple(canonical)
    resolved: list[TocItem] = []
    for item in canonical:
        children = tuple(_relabel(child, labels) for child in item.children)
        relabeled = _relabel(item, labels)
        if any(new is not old for new, old in zip(children, item.children, strict=True)):
            relabeled = replace(relabeled, children=children)
        resolved.append(relabeled)
    return tuple(resolved)


def resolve_document(document: Document, override: DocumentOverride | None) -> Document:
    """Return the document with TOC labels, title and blocks overlaid."""
    if override is None or override.is_empty():
        return document
    return replace(
        document,
        title=override.title or document.title,
        toc=resolve_toc(document.toc, override.toc),
        blocks=resolve_blocks(document.blocks, override.blocks),
    )


def resolve_fields_by_id(canonical_record: R, override_record: object) -> R:
    """Merge a lesson-shaped override field by field.

    Lists of records (``practice``, ``sections``) merge index-wise; other
    lists and scalars are replaced whole. When the canonical list of records
    is absent there is nothing to merge onto and the field stays absent.
    """
    if not is_dataclass(canonical_record) or not isinstance(override_record, Mapping) or not override_record:
        return canonical_record

    names = {item.name for item in fields(canonical_record)}
    blocked = protected_fields(type(canonical_record))
    changes: dict[str, object] = {}
    for key, value in override_record.items():
        if key not in names or key in blocked or value is None:
            continue
        current = getattr(canonical_record, key)
        if _is_record_tuple(current):
            if isinstance(value, list | tuple):
                merged = _resolve_sequence(current, value)
                if merged is not current:
                    changes[key] = merged
            continue
        if _looks_like_records(value):
            continue
        changes[key] = _freeze(value)

    if not changes:
        return canonical_record
    return replace(canonical_record, **changes)  # type: ignore[type-var]


def _resolve_sequence(canonical: tuple[object, ...], overrides: Sequence[object]) -> tuple[object, ...]:
    """Merge the i-th override onto the i-th canonical element."""
    merged = tuple(
        merge_fields(item, overrides[index] if index < len(overrides) else None)
        for index, item in enumerate(canonical)
    )
    if all(new is old for new, old in zip(merged, canonical, strict=True)):
        return canonical
    return merged


def _applicable_fields(item: object, override: object) -> dict[str, object]:
    """Filter an override down to the fields it may replace on `item`."""
    if not is_dataclass(item) or not isinstance(override, Mapping) or not override:
        return {}
    names = {entry.name for entry in fields(item)}
    blocked = protected_fields(type(item))
    return {
        key: _freeze(value)
        for key, value in override.items()
        if key in names and key not in blocked and value is not None
    }


def _relabel(entry: TocEntry | TocItem, labels: Mapping[str, str]) -> TocEntry | TocItem:
    label = labels.get(entry.id)
    if not isinstance(label, str) or not label or label == entry.label:
        return entry
    return replace(entry, label=label)


def _is_record_tuple(value: object) -> bool:
    return isinstance(value, tuple) and bool(value) and is_dataclass(value[0])


def _looks_like_records(value: object) -> bool:
    if not isinstance(value, list | tuple):
        return False
    return any(isinstance(item, Mapping) for item in value)


def _freeze(value: object) -> object:
    """Convert lists coming from JSON into tuples."""
    if isinstance(value, list | tuple):
        return tuple(_freeze(item) for item in value)
    return value
