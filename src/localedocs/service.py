"""Application service: locale-aware getters for documents, lessons, and blog metadata."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .content_loader import load_store
from .locales import is_default_locale, normalize_locale
from .models import (
    KIND_BLOG,
    KIND_BLOG_CATEGORY,
    KIND_DOCS,
    KIND_KOTLIN_COURSE,
    KIND_REACT_COURSE,
    BlogCategory,
    BlogPost,
    Document,
    DocumentOverride,
    Lesson,
    domain_id,
)
from .overlay import merge_fields, resolve_document, resolve_fields_by_id
from .store import ContentStore, UnknownDomainError

logger = logging.getLogger(__name__)

COROUTINES_BASICS_DOC = "coroutines-basics"
COROUTINES_CHANNELS_DOC = "coroutines-channels"
REACTOR_FLUX_DOC = "reactor-flux"


@dataclass(frozen=True)
class LessonReference:
    """Lesson metadata for course listings."""

    lesson_id: str
    step: int
    title: str
    practice_count: int
    section_count: int


class ContentService:
    """Serves effective content for a (domain id, locale) pair."""

    def __init__(self, store: ContentStore | None = None) -> None:
        """Initialize service with an explicit store or the bundled content."""
        self.store = store if store is not None else load_store()

    def get_content_for_locale(self, domain: str, locale: str) -> object | None:
        """Return effective content, or None when the domain id is unknown.

        The default locale returns the canonical record itself. Other locales
        overlay whatever override exists and fall back to English otherwise.
        """
        try:
            canonical = self.store.get_canonical(domain)
        except UnknownDomainError:
            logger.debug("No canonical content for %s", domain)
            return None
        if is_default_locale(locale):
            return canonical

        override = self.store.get_overrides(domain, normalize_locale(locale))
        if isinstance(canonical, Document):
            return resolve_document(canonical, override if isinstance(override, DocumentOverride) else None)
        if isinstance(canonical, Lesson):
            return resolve_fields_by_id(canonical, override)
        return merge_fields(canonical, override)

    def get_document_for_locale(self, doc_id: str, locale: str) -> Document | None:
        """Return a documentation page (TOC and blocks) for a locale."""
        document = self.get_content_for_locale(domain_id(KIND_DOCS, doc_id), locale)
        return document if isinstance(document, Document) else None

    def get_coroutines_basics_doc(self, locale: str) -> Document | None:
        return self.get_document_for_locale(COROUTINES_BASICS_DOC, locale)

    def get_coroutines_channels_doc(self, locale: str) -> Document | None:
        return self.get_document_for_locale(COROUTINES_CHANNELS_DOC, locale)

    def get_reactor_flux_doc(self, locale: str) -> Document | None:
        return self.get_document_for_locale(REACTOR_FLUX_DOC, locale)

    def get_lesson_for_locale(self, course_kind: str, locale: str, lesson_id: str) -> Lesson | None:
        """Return one course lesson for a locale."""
        lesson = self.get_content_for_locale(domain_id(course_kind, lesson_id), locale)
        return lesson if isinstance(lesson, Lesson) else None

    def get_kotlin_lesson_for_locale(self, locale: str, lesson_id: str) -> Lesson | None:
        return self.get_lesson_for_locale(KIND_KOTLIN_COURSE, locale, lesson_id)

    def get_react_lesson_for_locale(self, locale: str, lesson_id: str) -> Lesson | None:
        return self.get_lesson_for_locale(KIND_REACT_COURSE, locale, lesson_id)

    def get_lesson_by_step(self, course_kind: str, step: int, locale: str) -> Lesson | None:
        """Return the lesson at a given step, or None."""
        for lesson in self.store.course_lessons(course_kind):
            if lesson.step == step:
                return self.get_lesson_for_locale(course_kind, locale, lesson.id)
        return None

    def list_course_lessons(self, course_kind: str, locale: str) -> list[Lesson]:
        """Return every lesson of a course, resolved for a locale, in step order."""
        lessons: list[Lesson] = []
        for lesson_id in self.store.course_lesson_ids(course_kind):
            lesson = self.get_lesson_for_locale(course_kind, locale, lesson_id)
            if lesson is not None:
                lessons.append(lesson)
        return lessons

    def list_course_lesson_references(self, course_kind: str, locale: str) -> list[LessonReference]:
        """Return ordered lesson metadata for a course listing."""
        return [
            LessonReference(
                lesson_id=lesson.id,
                step=lesson.step,
                title=lesson.title,
                practice_count=len(lesson.practice or ()),
                section_count=len(lesson.sections or ()),
            )
            for lesson in self.list_course_lessons(course_kind, locale)
        ]

    def get_blog_post_content(self, post_id: str, locale: str) -> BlogPost | None:
        """Return blog post header content, falling back to English per field."""
        post = self.get_content_for_locale(domain_id(KIND_BLOG, post_id), locale)
        return post if isinstance(post, BlogPost) else None

    def get_category_for_locale(self, slug: str, locale: str) -> BlogCategory | None:
        """Return blog category title and description for a locale."""
        category = self.get_content_for_locale(domain_id(KIND_BLOG_CATEGORY, slug), locale)
        return category if isinstance(category, BlogCategory) else None

    def get_category_for_post(self, post_id: str, locale: str) -> BlogCategory | None:
        """Return the category listing a blog post, resolved for a locale."""
        for key in self.store.domain_ids(KIND_BLOG_CATEGORY):
            category = self.store.get_canonical(key)
            if isinstance(category, BlogCategory) and post_id in category.posts:
                return self.get_category_for_locale(category.slug, locale)
        logger.debug("No blog category lists post %s", post_id)
        return None

    def list_domains(self, kind: str | None = None) -> list[str]:
        """Return known domain ids, optionally filtered by kind."""
        return self.store.domain_ids(kind)
