from pathlib import Path

from localedocs.content_loader import load_store, load_store_from_dir
from localedocs.models import (
    CodeBlock,
    Document,
    DocumentOverride,
    HeadingBlock,
    ImageBlock,
    Lesson,
    SolutionBlock,
)

DOCUMENT = {
    "id": "guide",
    "title": "Guide",
    "toc": [
        {"id": "intro", "label": "Intro", "children": [{"id": "details", "label": "Details"}]},
        {"id": "solution-task-1", "label": "Solution"},
    ],
    "blocks": [
        {"type": "heading", "level": 2, "id": "intro", "text": "Intro"},
        {"type": "paragraph", "text": "Hello"},
        {"type": "code", "code": "fun main() {}", "showPlay": True},
        {"type": "image", "src": "/img.svg", "alt": "Diagram"},
        {
            "type": "solution",
            "taskNumber": 1,
            "id": "solution-task-1",
            "steps": ["Group", "Sort"],
            "code": "groupBy {}",
            "paragraphAfterCode": "Done.",
        },
    ],
}

COURSE = {
    "id": "kotlin",
    "kind": "kotlin-course",
    "title": "Kotlin",
    "lessons": [
        {
            "id": "second",
            "step": 2,
            "title": "Second",
            "content": ["Two"],
            "practice": [
                {"id": "p", "title": "Exercise", "description": "Do it", "testCases": [{"input": "", "output": "ok"}]}
            ],
        },
        {
            "id": "first",
            "step": 1,
            "title": "First",
            "content": ["One"],
            "codeExamples": [{"code": "println()", "comment": "print"}],
            "defaultCode": "fun main() {}",
        },
    ],
}


def test_load_store_from_dir_reads_documents(write_json, content_root: Path) -> None:
    write_json("documents/guide.json", DOCUMENT)
    store = load_store_from_dir(content_root)

    document = store.get_canonical("docs/guide")
    assert isinstance(document, Document)
    assert document.toc[0].children[0].id == "details"
    assert isinstance(document.blocks[0], HeadingBlock)
    assert document.blocks[2] == CodeBlock(code="fun main() {}", show_play=True)
    assert isinstance(document.blocks[3], ImageBlock)
    solution = document.blocks[4]
    assert isinstance(solution, SolutionBlock)
    assert solution.task_number == 1
    assert solution.steps == ("Group", "Sort")
    assert solution.paragraph_after_code == "Done."


def test_load_store_from_dir_links_lessons_in_step_order(write_json, content_root: Path) -> None:
    write_json("courses/kotlin.json", COURSE)
    store = load_store_from_dir(content_root)

    assert store.course_lesson_ids("kotlin-course") == ("first", "second")
    first = store.get_canonical("kotlin-course/first")
    second = store.get_canonical("kotlin-course/second")
    assert isinstance(first, Lesson) and isinstance(second, Lesson)
    assert first.next_step == "second"
    assert first.prev_step is None
    assert second.prev_step == "first"
    assert first.code_examples[0].comment == "print"
    assert first.default_code == "fun main() {}"
    assert second.practice is not None
    assert second.practice[0].test_cases[0].output == "ok"
    assert second.sections is None


def test_document_override_accepts_indices_and_anchors(write_json, content_root: Path) -> None:
    write_json("documents/guide.json", DOCUMENT)
    write_json(
        "overrides/es/documents/guide.json",
        {
            "title": "Guía",
            "toc": {"intro": "Introducción", "details": "Detalles"},
            "blocks": {
                "#intro": {"text": "Introducción"},
                "1": {"text": "Hola"},
                "3": {"alt": "Diagrama"},
                "#solution-task-1": {"steps": ["Agrupa", "Ordena"], "paragraphAfterCode": "Listo."},
            },
        },
    )
    store = load_store_from_dir(content_root)

    override = store.get_overrides("docs/guide", "es")
    assert isinstance(override, DocumentOverride)
    assert override.title == "Guía"
    assert override.toc["details"] == "Detalles"
    assert sorted(override.blocks) == [0, 1, 3, 4]
    assert override.blocks[4]["steps"] == ("Agrupa", "Ordena")
    assert override.blocks[4]["paragraph_after_code"] == "Listo."
    assert store.locales() == ["es"]


def test_empty_overrides_are_not_stored(write_json, content_root: Path) -> None:
    write_json("documents/guide.json", DOCUMENT)
    write_json("courses/kotlin.json", COURSE)
    write_json("overrides/es/documents/guide.json", {"toc": {}, "blocks": {"1": {}}})
    write_json("overrides/es/courses/kotlin.json", {"lessons": {"first": {"title": None}}})
    store = load_store_from_dir(content_root)

    assert store.get_overrides("docs/guide", "es") == {}
    assert store.get_overrides("kotlin-course/first", "es") == {}
    assert store.locales() == []


def test_lesson_override_practice_entries_are_validated_per_index(write_json, content_root: Path) -> None:
    write_json("courses/kotlin.json", COURSE)
    write_json(
        "overrides/es/courses/kotlin.json",
        {"lessons": {"second": {"title": "Segunda", "practice": [{"title": "Ejercicio"}]}}},
    )
    store = load_store_from_dir(content_root)

    override = store.get_overrides("kotlin-course/second", "es")
    assert override["title"] == "Segunda"
    assert override["practice"][0]["title"] == "Ejercicio"


def test_blog_posts_and_categories(write_json, content_root: Path) -> None:
    write_json(
        "blog/posts.json",
        [{"id": "aws-cloud", "title": "AWS Cloud", "subtitle": "Guide", "breadcrumbLabel": "AWS"}],
    )
    write_json("blog/categories.json", [{"slug": "cloud", "title": "Cloud", "description": "Infra"}])
    write_json("overrides/es/blog/posts.json", {"aws-cloud": {"title": "AWS Nube"}})
    write_json("overrides/es/blog/categories.json", {"cloud": {"title": "Nube"}})
    store = load_store_from_dir(content_root)

    post = store.get_canonical("blog/aws-cloud")
    assert post.breadcrumb_label == "AWS"
    assert post.intro_paragraph is None
    assert store.get_overrides("blog/aws-cloud", "es") == {"title": "AWS Nube"}
    assert store.get_overrides("blog-category/cloud", "es") == {"title": "Nube"}


def test_missing_sections_of_tree_are_optional(content_root: Path) -> None:
    store = load_store_from_dir(content_root)
    assert store.domain_ids() == []
    assert store.locales() == []


def test_utf8_bom_is_accepted(content_root: Path) -> None:
    path = content_root / "blog" / "categories.json"
    path.parent.mkdir(parents=True)
    path.write_text('[{"slug": "s", "title": "Título", "description": ""}]', encoding="utf-8-sig")
    store = load_store_from_dir(content_root)
    assert store.get_canonical("blog-category/s").title == "Título"


def test_load_store_reads_bundled_content() -> None:
    store = load_store()
    assert store.has_domain("docs/coroutines-basics")
    assert store.has_domain("kotlin-course/basic-types")
    assert store.has_domain("react-course/react-1")
    assert store.has_domain("blog/aws-cloud")
    assert store.has_domain("blog-category/react-development")
    assert "es" in store.locales()
