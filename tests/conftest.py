from __future__ import annotations

import shutil
import sys
from collections.abc import Iterator
from pathlib import Path
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from casecoach.config import Settings  # noqa: E402
from casecoach.models import CaseType, Catalog, ComboCase, Framework, Industry  # noqa: E402


def _tmp_path_fixture() -> Iterator[Path]:
    """Provide per-test temporary directory path inside the workspace.

    Overrides pytest's builtin ``tmp_path`` so temporary files stay under
    ``.tmp_pytest/`` in the project directory.
    """
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


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_case_type(case_id: str, name: str | None = None) -> CaseType:
    return CaseType(
        id=case_id,
        name=name or case_id.upper(),
        category="core",
        duration="20 min",
        difficulty="Medium",
        description=f"{case_id} description",
        when_used=f"when {case_id}",
        framework=Framework(steps=[f"{case_id} step 1", f"{case_id} step 2"], key_areas=["area"]),
        clarifying_questions=["question?"],
        common_pitfalls=["pitfall"],
        example_prompt=f"{case_id} example",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def small_catalog() -> Catalog:
    case_types = {case_id: make_case_type(case_id) for case_id in ("a", "b", "c")}
    return Catalog(
        industries=[
            Industry(id="retail", name="Retail", icon="🛒"),
            Industry(id="energy", name="Energy", icon="⚡"),
        ],
        case_types=case_types,
        industry_relevance={"retail": ["a", "c"]},
        combo_cases=[ComboCase(name="A + B", description="Both", example="Example")],
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings.from_env({"CASECOACH_HOME": str(tmp_path / "home")})
