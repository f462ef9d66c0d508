from __future__ import annotations

import json
import shutil
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from localedocs.content_loader import load_store  # noqa: E402
from localedocs.service import ContentService  # noqa: E402
from localedocs.store import ContentStore  # noqa: E402

WriteJson = Callable[[str, Any], Path]


def _tmp_path_fixture() -> Iterator[Path]:
    """Per-test temporary directory kept under ``.tmp_pytest/`` in the workspace."""
    base = ROOT / ".tmp_pytest"
    base.mkdir(parents=True, exist_ok=True)
    path = base / str(uuid4())
    path.mkdir(parents=True, exist_ok=False)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        try:
            next(base.iterdir())
        except StopIteration:
            base.rmdir()
        except FileNotFoundError:
            pass


tmp_path = pytest.fixture(name="tmp_path")(_tmp_path_fixture)


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture
def write_json(content_root: Path) -> WriteJson:
    """Write a payload to a path relative to the content root."""

    def _write(relative: str, payload: Any) -> Path:
        path = content_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture(scope="session")
def bundled_store() -> ContentStore:
    return load_store()


@pytest.fixture
def service(bundled_store: ContentStore) -> ContentService:
    return ContentService(bundled_store)
