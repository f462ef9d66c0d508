"""Core content records for documentation pages, courses, and blog metadata."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar

KIND_DOCS = "docs"
KIND_KOTLIN_COURSE = "kotlin-course"
KIND_REACT_COURSE = "react-course"
KIND_BLOG = "blog"
KIND_BLOG_CATEGORY = "blog-category"

COURSE_KINDS = (KIND_KOTLIN_COURSE, KIND_REACT_COURSE)
DOMAIN_KINDS = (KIND_DOCS, KIND_KOTLIN_COURSE, KIND_REACT_COURSE, KIND_BLOG, KIND_BLOG_CATEGORY)


@dataclass(frozen=True)
class HeadingBlock:
    """Section heading; `id` is the deep-link anchor."""

    type: ClassVar[str] = "heading"

    level: int
    id: str
    text: str


@dataclass(frozen=True)
class ParagraphBlock:
    type: ClassVar[str] = "paragraph"

    text: str


@dataclass(frozen=True)
class StepTitleBlock:
    type: ClassVar[str] = "stepTitle"

    number: int
    text: str


@dataclass(frozen=True)
class InfoBoxBlock:
    type: ClassVar[str] = "infoBox"

    variant: str
    content: str


@dataclass(frozen=True)
class CodeBlock:
    """Code sample; never translated."""

    type: ClassVar[str] = "code"

    code: str
    show_play: bool = False
    comment: str | None = None


@dataclass(frozen=True)
class ImageBlock:
    type: ClassVar[str] = "image"

    src: str
    alt: str


@dataclass(frozen=True)
class ListBlock:
    type: ClassVar[str] = "list"

    items: tuple[str, ...]


@dataclass(frozen=True)
class SolutionBlock:
    """Worked solution for one tutorial task."""

    type: ClassVar[str] = "solution"

    task_number: int
    id: str | None = None
    paragraphs: tuple[str, ...] | None = None
    steps: tuple[str, ...] | None = None
    code: str | None = None
    code_show_play: bool = False
    paragraph_after_code: str | None = None


ContentBlock = (
    HeadingBlock
    | ParagraphBlock
    | StepTitleBlock
    | InfoBoxBlock
    | CodeBlock
    | ImageBlock
    | ListBlock
    | SolutionBlock
)

BLOCK_TYPES: dict[str, type[ContentBlock]] = {
    block_type.type: block_type
    for block_type in (
        HeadingBlock,
        ParagraphBlock,
        StepTitleBlock,
        InfoBoxBlock,
        CodeBlock,
        ImageBlock,
        ListBlock,
        SolutionBlock,
    )
}


@dataclass(frozen=True)
class TocEntry:
    """Second-level navigation entry."""

    id: str
    label: str


@dataclass(frozen=True)
class TocItem:
    """Top-level navigation entry with optional children."""

    id: str
    label: str
    children: tuple[TocEntry, ...] = ()


@dataclass(frozen=True)
class Document:
    """Documentation page: navigation tree plus ordered blocks."""

    id: str
    title: str
    toc: tuple[TocItem, ...]
    blocks: tuple[ContentBlock, ...]


@dataclass(frozen=True)
class CodeExample:
    code: str
    comment: str | None = None


@dataclass(frozen=True)
class TestCase:
    __test__ = False

    input: str
    output: str


@dataclass(frozen=True)
class PracticeChallenge:
    """One practice exercise attached to a lesson."""

    id: str
    title: str
    description: str
    starter_code: str = ""
    test_cases: tuple[TestCase, ...] = ()
    hint: str | None = None
    solution: str | None = None


@dataclass(frozen=True)
class LessonSection:
    """Tagged lesson section (concept, exercise, tip, key-point)."""

    tag: str
    body: str
    title: str | None = None
    code: str | None = None
    badges: tuple[str, ...] | None = None


@dataclass(frozen=True)
class Lesson:
    """Course lesson with prose, examples, and optional exercises."""

    id: str
    step: int
    title: str
    content: tuple[str, ...]
    code_examples: tuple[CodeExample, ...] = ()
    default_code: str = ""
    practice: tuple[PracticeChallenge, ...] | None = None
    sections: tuple[LessonSection, ...] | None = None
    next_step: str | None = None
    prev_step: str | None = None


@dataclass(frozen=True)
class Course:
    """Ordered lessons of one course."""

    id: str
    kind: str
    title: str
    lessons: tuple[Lesson, ...]


@dataclass(frozen=True)
class BlogPost:
    """Localizable header content of a blog post."""

    id: str
    title: str
    subtitle: str
    breadcrumb_label: str
    intro_paragraph: str | None = None
    categories_description: str | None = None


@dataclass(frozen=True)
class BlogCategory:
    slug: str
    title: str
    description: str
    posts: tuple[str, ...] = ()


@dataclass(frozen=True)
class DocumentOverride:
    """Sparse locale override for one document."""

    title: str | None = None
    toc: Mapping[str, str] = field(default_factory=dict)
    blocks: Mapping[int, Mapping[str, object]] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.title and not self.toc and not self.blocks


# Fields that hold code or deep-link ids; overrides never replace them.
PROTECTED_FIELDS: frozenset[str] = frozenset(
    {"code", "starter_code", "solution", "test_cases", "default_code", "code_examples"}
)
PROTECTED_FIELDS_BY_TYPE: dict[type, frozenset[str]] = {
    HeadingBlock: PROTECTED_FIELDS | {"id"},
    SolutionBlock: PROTECTED_FIELDS | {"id"},
    Lesson: PROTECTED_FIELDS | {"id", "step", "next_step", "prev_step"},
    PracticeChallenge: PROTECTED_FIELDS | {"id"},
    BlogPost: PROTECTED_FIELDS | {"id"},
    BlogCategory: PROTECTED_FIELDS | {"slug", "posts"},
}


def protected_fields(record_type: type) -> frozenset[str]:
    """Return field names an override may not replace for a record type."""
    return PROTECTED_FIELDS_BY_TYPE.get(record_type, PROTECTED_FIELDS)


def domain_id(kind: str, slug: str) -> str:
    """Build a domain id such as ``docs/coroutines-basics``."""
    return f"{kind}/{slug}"


def split_domain_id(value: str) -> tuple[str, str]:
    """Split a domain id into kind and slug; raise ValueError when malformed."""
    kind, sep, slug = value.partition("/")
    if not sep or not kind or not slug:
        raise ValueError(f"Malformed domain id: {value!r}")
    return kind, slug
