"""Immutable in-memory store of canonical content and locale overrides."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from .locales import normalize_locale
from .models import Lesson, domain_id, split_domain_id

EMPTY_OVERRIDES: Mapping[object, object] = MappingProxyType({})


class UnknownDomainError(KeyError):
    """Raised when a domain id has no canonical content."""


class ContentStore:
    """Read-only view over canonical records and sparse per-locale overrides.

    ``canonical`` maps domain ids (``kind/slug``) to records. ``overrides``
    maps a locale to a mapping of domain id to override data. ``courses``
    maps a course kind to its lesson ids in step order.
    """

    def __init__(
        self,
        canonical: Mapping[str, object],
        overrides: Mapping[str, Mapping[str, object]] | None = None,
        courses: Mapping[str, tuple[str, ...]] | None = None,
    ) -> None:
        """Freeze the given tables into read-only mappings."""
        self._canonical: Mapping[str, object] = MappingProxyType(dict(canonical))
        self._overrides: Mapping[str, Mapping[str, object]] = MappingProxyType(
            {locale: MappingProxyType(dict(table)) for locale, table in (overrides or {}).items()}
        )
        self._courses: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {kind: tuple(ids) for kind, ids in (courses or {}).items()}
        )

    def get_canonical(self, domain_id: str) -> object:
        """Return the canonical record for a domain id."""
        try:
            return self._canonical[domain_id]
        except KeyError:
            raise UnknownDomainError(domain_id) from None

    def get_overrides(self, domain_id: str, locale: str) -> object:
        """Return the override for a domain and locale, or an empty table."""
        table = self._overrides.get(normalize_locale(locale))
        if table is None:
            return EMPTY_OVERRIDES
        return table.get(domain_id, EMPTY_OVERRIDES)

    def has_domain(self, domain_id: str) -> bool:
        return domain_id in self._canonical

    def domain_ids(self, kind: str | None = None) -> list[str]:
        """Return sorted domain ids, optionally filtered by kind."""
        if kind is None:
            return sorted(self._canonical)
        return sorted(item for item in self._canonical if split_domain_id(item)[0] == kind)

    def course_lesson_ids(self, course_kind: str) -> tuple[str, ...]:
        """Return lesson slugs of a course in step order."""
        return self._courses.get(course_kind, ())

    def course_lessons(self, course_kind: str) -> list[Lesson]:
        """Return canonical lessons of a course in step order."""
        lessons: list[Lesson] = []
        for slug in self.course_lesson_ids(course_kind):
            record = self._canonical.get(domain_id(course_kind, slug))
            if isinstance(record, Lesson):
                lessons.append(record)
        return lessons

    def locales(self) -> list[str]:
        """Return locales that carry at least one override."""
        return sorted(locale for locale, table in self._overrides.items() if table)
