"""Load canonical content and locale overrides from bundled JSON resources."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import fields, is_dataclass, replace
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .locales import is_default_locale, normalize_locale
from .models import (
    BLOCK_TYPES,
    COURSE_KINDS,
    KIND_BLOG,
    KIND_BLOG_CATEGORY,
    KIND_DOCS,
    BlogCategory,
    BlogPost,
    CodeExample,
    ContentBlock,
    Course,
    Document,
    DocumentOverride,
    HeadingBlock,
    Lesson,
    LessonSection,
    PracticeChallenge,
    SolutionBlock,
    TestCase,
    TocEntry,
    TocItem,
    domain_id,
    protected_fields,
)
from .store import ContentStore

logger = logging.getLogger(__name__)

CONTENT_PACKAGE = "localedocs"
CONTENT_ROOT = "content"
OVERRIDES_DIR = "overrides"

# Lesson fields holding records even when the canonical lesson leaves them out.
RECORD_LIST_FIELDS = frozenset({"practice", "sections"})

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def load_store() -> ContentStore:
    """Load bundled content."""
    return _load_store(resources.files(CONTENT_PACKAGE).joinpath(CONTENT_ROOT))


def load_store_from_dir(path: Path | str) -> ContentStore:
    """Load content from a directory for tests/tools."""
    return _load_store(Path(path))


def _load_store(root: Traversable) -> ContentStore:
    canonical: dict[str, object] = {}
    courses: dict[str, tuple[str, ...]] = {}

    documents: dict[str, Document] = {}
    for entry in _json_files(root.joinpath("documents")):
        document = _document_from_dict(_read_json(entry), entry.name)
        _register(canonical, domain_id(KIND_DOCS, document.id), document, "document")
        documents[_stem(entry.name)] = document

    course_files: dict[str, Course] = {}
    for entry in _json_files(root.joinpath("courses")):
        course = _course_from_dict(_read_json(entry), entry.name)
        if course.kind in courses:
            raise ValueError(f"Duplicate course kind: {course.kind}")
        for lesson in course.lessons:
            _register(canonical, domain_id(course.kind, lesson.id), lesson, "lesson")
        courses[course.kind] = tuple(lesson.id for lesson in course.lessons)
        course_files[_stem(entry.name)] = course

    blog_dir = root.joinpath("blog")
    posts = _read_optional_list(blog_dir.joinpath("posts.json"))
    for raw in posts:
        post = _blog_post_from_dict(raw)
        _register(canonical, domain_id(KIND_BLOG, post.id), post, "blog post")
    categories = _read_optional_list(blog_dir.joinpath("categories.json"))
    owners: dict[str, str] = {}
    for raw in categories:
        category = _blog_category_from_dict(raw)
        _register(canonical, domain_id(KIND_BLOG_CATEGORY, category.slug), category, "blog category")
        for post_id in category.posts:
            if domain_id(KIND_BLOG, post_id) not in canonical:
                raise ValueError(f"Blog category '{category.slug}' lists unknown post '{post_id}'.")
            if post_id in owners:
                raise ValueError(f"Blog post '{post_id}' is listed by both '{owners[post_id]}' and '{category.slug}'.")
            owners[post_id] = category.slug

    overrides: dict[str, dict[str, object]] = {}
    overrides_root = root.joinpath(OVERRIDES_DIR)
    if overrides_root.is_dir():
        for locale_dir in sorted(overrides_root.iterdir(), key=lambda item: item.name):
            if not locale_dir.is_dir():
                continue
            locale = _override_locale(locale_dir.name)
            overrides[locale] = _load_locale_overrides(locale_dir, canonical, documents, course_files)

    logger.debug(
        "Loaded %d canonical records (%d documents, %d courses) with overrides for %s",
        len(canonical),
        len(documents),
        len(courses),
        ", ".join(sorted(overrides)) or "no locales",
    )
    return ContentStore(canonical, overrides, courses)


def _override_locale(name: str) -> str:
    """Return the locale an override folder serves; lookups use the normalized code."""
    locale = normalize_locale(name)
    if locale != name:
        raise ValueError(f"Override folder '{name}' must be named by its bare lower-case language code '{locale}'.")
    if is_default_locale(locale):
        raise ValueError(f"Override folder '{name}' targets the canonical locale.")
    return locale


def _load_locale_overrides(
    locale_dir: Traversable,
    canonical: Mapping[str, object],
    documents: Mapping[str, Document],
    courses: Mapping[str, Course],
) -> dict[str, object]:
    """Load one locale's override files mirroring the canonical layout."""
    locale = locale_dir.name
    table: dict[str, object] = {}

    for entry in _json_files(locale_dir.joinpath("documents")):
        document = documents.get(_stem(entry.name))
        if document is None:
            raise ValueError(f"Override '{locale}/documents/{entry.name}' has no canonical document.")
        override = _document_override_from_dict(document, _read_json(entry), f"{locale}/documents/{entry.name}")
        if not override.is_empty():
            table[domain_id(KIND_DOCS, document.id)] = override

    for entry in _json_files(locale_dir.joinpath("courses")):
        course = courses.get(_stem(entry.name))
        if course is None:
            raise ValueError(f"Override '{locale}/courses/{entry.name}' has no canonical course.")
        raw = _as_mapping(_read_json(entry), entry.name)
        lessons_by_id = {lesson.id: lesson for lesson in course.lessons}
        for lesson_id, raw_override in _as_mapping(raw.get("lessons", {}), entry.name).items():
            lesson = lessons_by_id.get(lesson_id)
            if lesson is None:
                raise ValueError(f"Override for unknown {course.kind} lesson '{lesson_id}' ({locale}).")
            where = f"{locale}/{course.kind}/{lesson_id}"
            override = _record_override(lesson, raw_override, where)
            if override:
                table[domain_id(course.kind, lesson_id)] = override

    blog_dir = locale_dir.joinpath("blog")
    for kind, file_name in ((KIND_BLOG, "posts.json"), (KIND_BLOG_CATEGORY, "categories.json")):
        entry = blog_dir.joinpath(file_name)
        if not entry.is_file():
            continue
        for slug, raw_override in _as_mapping(_read_json(entry), file_name).items():
            key = domain_id(kind, slug)
            record = canonical.get(key)
            if record is None:
                raise ValueError(f"Override for unknown {kind} '{slug}' ({locale}).")
            override = _record_override(record, raw_override, f"{locale}/{kind}/{slug}")
            if override:
                table[key] = override

    return table


def _document_from_dict(raw: dict[str, Any], where: str) -> Document:
    """Build a document from raw JSON content."""
    doc_id = str(raw["id"])
    toc = tuple(_toc_item_from_dict(item) for item in raw.get("toc", []))
    _validate_unique_toc_ids(doc_id, toc)
    blocks = tuple(_block_from_dict(item, f"{where} block {index}") for index, item in enumerate(raw.get("blocks", [])))
    _validate_unique_anchors(doc_id, blocks)
    return Document(id=doc_id, title=str(raw.get("title", doc_id)), toc=toc, blocks=blocks)


def _toc_item_from_dict(raw: dict[str, Any]) -> TocItem:
    children = tuple(TocEntry(id=str(child["id"]), label=str(child["label"])) for child in raw.get("children", []))
    return TocItem(id=str(raw["id"]), label=str(raw["label"]), children=children)


def _block_from_dict(raw: dict[str, Any], where: str) -> ContentBlock:
    """Build one tagged content block."""
    data = _normalize_keys(raw)
    tag = str(data.pop("type", ""))
    block_type = BLOCK_TYPES.get(tag)
    if block_type is None:
        raise ValueError(f"Unknown block type '{tag}' in {where}.")
    names = {item.name for item in fields(block_type)}
    unknown = sorted(set(data) - names)
    if unknown:
        raise ValueError(f"Unknown field(s) {', '.join(unknown)} for {tag} block in {where}.")
    try:
        return block_type(**{key: _freeze(value) for key, value in data.items()})
    except TypeError as exc:
        raise ValueError(f"Invalid {tag} block in {where}: {exc}") from exc


def _course_from_dict(raw: dict[str, Any], where: str) -> Course:
    """Build a course and link lessons in step order."""
    kind = str(raw.get("kind", ""))
    if kind not in COURSE_KINDS:
        raise ValueError(f"Course file '{where}' has unknown kind '{kind}'.")
    lessons = [_lesson_from_dict(item, position) for position, item in enumerate(raw.get("lessons", []), start=1)]
    lessons.sort(key=lambda item: item.step)

    seen: set[str] = set()
    for lesson in lessons:
        if lesson.id in seen:
            raise ValueError(f"Duplicate lesson id: {lesson.id} (in {kind})")
        seen.add(lesson.id)

    linked: list[Lesson] = []
    for index, lesson in enumerate(lessons):
        next_step = lesson.next_step
        if next_step is None and index + 1 < len(lessons):
            next_step = lessons[index + 1].id
        prev_step = lesson.prev_step
        if prev_step is None and index > 0:
            prev_step = lessons[index - 1].id
        linked.append(replace(lesson, next_step=next_step, prev_step=prev_step))

    return Course(id=str(raw.get("id", kind)), kind=kind, title=str(raw.get("title", kind)), lessons=tuple(linked))


def _lesson_from_dict(raw: dict[str, Any], position: int) -> Lesson:
    """Build a lesson from raw JSON content."""
    data = _normalize_keys(raw)
    practice_raw = data.get("practice")
    sections_raw = data.get("sections")
    return Lesson(
        id=str(data["id"]),
        step=int(data.get("step", position)),
        title=str(data["title"]),
        content=tuple(str(item) for item in data.get("content", [])),
        code_examples=tuple(
            CodeExample(code=str(item["code"]), comment=item.get("comment")) for item in data.get("code_examples", [])
        ),
        default_code=str(data.get("default_code", "")),
        practice=None if practice_raw is None else tuple(_practice_from_dict(item) for item in practice_raw),
        sections=None if sections_raw is None else tuple(_section_from_dict(item) for item in sections_raw),
        next_step=data.get("next_step"),
        prev_step=data.get("prev_step"),
    )


def _practice_from_dict(raw: dict[str, Any]) -> PracticeChallenge:
    data = _normalize_keys(raw)
    return PracticeChallenge(
        id=str(data["id"]),
        title=str(data["title"]),
        description=str(data.get("description", "")),
        starter_code=str(data.get("starter_code", "")),
        test_cases=tuple(
            TestCase(input=str(item.get("input", "")), output=str(item.get("output", "")))
            for item in data.get("test_cases", [])
        ),
        hint=data.get("hint"),
        solution=data.get("solution"),
    )


def _section_from_dict(raw: dict[str, Any]) -> LessonSection:
    data = _normalize_keys(raw)
    badges = data.get("badges")
    return LessonSection(
        tag=str(data["tag"]),
        body=str(data["body"]),
        title=data.get("title"),
        code=data.get("code"),
        badges=None if badges is None else tuple(str(item) for item in badges),
    )


def _blog_post_from_dict(raw: dict[str, Any]) -> BlogPost:
    data = _normalize_keys(raw)
    return BlogPost(
        id=str(data["id"]),
        title=str(data["title"]),
        subtitle=str(data.get("subtitle", "")),
        breadcrumb_label=str(data.get("breadcrumb_label", data["title"])),
        intro_paragraph=data.get("intro_paragraph"),
        categories_description=data.get("categories_description"),
    )


def _blog_category_from_dict(raw: dict[str, Any]) -> BlogCategory:
    return BlogCategory(
        slug=str(raw["slug"]),
        title=str(raw["title"]),
        description=str(raw.get("description", "")),
        posts=tuple(str(item) for item in raw.get("posts", [])),
    )


def _document_override_from_dict(document: Document, raw: dict[str, Any], where: str) -> DocumentOverride:
    """Validate a document override and normalize block keys to indices."""
    toc_ids = {item.id for item in document.toc} | {child.id for item in document.toc for child in item.children}
    labels: dict[str, str] = {}
    for toc_id, label in _as_mapping(raw.get("toc", {}), where).items():
        if toc_id not in toc_ids:
            raise ValueError(f"TOC override for unknown id '{toc_id}' in {where}.")
        labels[toc_id] = str(label)

    anchors = {
        block.id: index
        for index, block in enumerate(document.blocks)
        if isinstance(block, HeadingBlock | SolutionBlock) and block.id
    }
    blocks: dict[int, Mapping[str, object]] = {}
    for key, raw_override in _as_mapping(raw.get("blocks", {}), where).items():
        index = _block_index(key, document, anchors, where)
        if index in blocks:
            raise ValueError(f"Block {index} is overridden twice in {where}.")
        override = _record_override(document.blocks[index], raw_override, f"{where} block {key}")
        if override:
            blocks[index] = override

    title = raw.get("title")
    return DocumentOverride(
        title=None if title is None else str(title),
        toc=MappingProxyType(labels),
        blocks=MappingProxyType(blocks),
    )


def _block_index(key: str, document: Document, anchors: Mapping[str, int], where: str) -> int:
    """Resolve an override key (``"4"`` or ``"#anchor"``) to a block index."""
    if key.startswith("#"):
        anchor = key[1:]
        if anchor not in anchors:
            raise ValueError(f"Block override for unknown anchor '{anchor}' in {where}.")
        return anchors[anchor]
    try:
        index = int(key)
    except ValueError:
        raise ValueError(f"Block override key '{key}' is neither an index nor an anchor in {where}.") from None
    if not 0 <= index < len(document.blocks):
        size = len(document.blocks)
        raise ValueError(
            f"Block override index {index} is out of range for '{document.id}' ({size} blocks) in {where}."
        )
    return index


def _record_override(record: object, raw: object, where: str) -> Mapping[str, object]:
    """Validate one sparse record override against its canonical record."""
    data = _normalize_keys(_as_mapping(raw, where))
    if "type" in data:
        raise ValueError(f"Override may not change the block type in {where}.")
    names = {item.name for item in fields(record)}  # type: ignore[arg-type]
    unknown = sorted(set(data) - names)
    if unknown:
        raise ValueError(f"Unknown field(s) {', '.join(unknown)} in {where}.")
    blocked = sorted(set(data) & protected_fields(type(record)))
    if blocked:
        raise ValueError(f"Override may not replace {', '.join(blocked)} in {where}.")

    cleaned: dict[str, object] = {}
    for key, value in data.items():
        if value is None:
            continue
        current = getattr(record, key)
        if _holds_records(key, current):
            if not isinstance(value, list) or not all(item is None or isinstance(item, dict) for item in value):
                raise ValueError(f"Override for '{key}' must be a list of objects or nulls in {where}.")
            if not isinstance(current, tuple) or len(value) > len(current):
                size = 0 if current is None else len(current)
                raise ValueError(f"Override for '{key}' has {len(value)} entries but canonical has {size} in {where}.")
            cleaned[key] = tuple(
                None if item is None else _record_override(current[index], item, f"{where} {key}[{index}]")
                for index, item in enumerate(value)
            )
            continue
        if isinstance(value, list) and any(isinstance(item, dict) for item in value):
            raise ValueError(f"Override for '{key}' may not contain objects in {where}.")
        cleaned[key] = _freeze(value)
    return MappingProxyType(cleaned)


def _holds_records(key: str, current: object) -> bool:
    """Return whether a field is a list of records, merged index-wise."""
    if key in RECORD_LIST_FIELDS:
        return True
    return isinstance(current, tuple) and bool(current) and is_dataclass(current[0])


def _validate_unique_toc_ids(doc_id: str, toc: Iterable[TocItem]) -> None:
    """Validate that navigation ids are unique within one document."""
    seen: set[str] = set()
    for item in toc:
        for entry_id in [item.id, *(child.id for child in item.children)]:
            if entry_id in seen:
                raise ValueError(f"Duplicate TOC id '{entry_id}' in document '{doc_id}'.")
            seen.add(entry_id)


def _validate_unique_anchors(doc_id: str, blocks: Iterable[ContentBlock]) -> None:
    """Heading and solution ids address ``"#id"`` overrides, so each may appear once."""
    seen: set[str] = set()
    for block in blocks:
        if isinstance(block, HeadingBlock | SolutionBlock) and block.id:
            if block.id in seen:
                raise ValueError(f"Duplicate block anchor '{block.id}' in document '{doc_id}'.")
            seen.add(block.id)


def _register(canonical: dict[str, object], key: str, record: object, label: str) -> None:
    if key in canonical:
        raise ValueError(f"Duplicate {label} id: {key}")
    canonical[key] = record


def _json_files(directory: Traversable) -> list[Traversable]:
    if not directory.is_dir():
        return []
    return sorted((entry for entry in directory.iterdir() if entry.name.endswith(".json")), key=lambda item: item.name)


def _read_json(entry: Traversable) -> Any:
    return json.loads(entry.read_text(encoding="utf-8-sig"))


def _read_optional_list(entry: Traversable) -> list[dict[str, Any]]:
    if not entry.is_file():
        return []
    raw = _read_json(entry)
    if not isinstance(raw, list):
        raise ValueError(f"'{entry.name}' must contain a JSON array.")
    return raw


def _as_mapping(raw: object, where: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a JSON object in {where}.")
    return raw


def _normalize_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Accept camelCase keys from older exports (``showPlay`` -> ``show_play``)."""
    return {_CAMEL_BOUNDARY.sub("_", str(key)).lower(): value for key, value in raw.items()}


def _freeze(value: object) -> object:
    if isinstance(value, list | tuple):
        return tuple(_freeze(item) for item in value)
    return value


def _stem(name: str) -> str:
    return name.rsplit(".", 1)[0]
