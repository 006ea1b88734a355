"""Application service tying catalog, timer, history, and AI generation together."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .ai_client import CaseGenerator
from .config import Settings
from .content_loader import load_catalog, load_catalog_from_file
from .errors import CatalogUnavailable, MissingCredential, PersistenceUnavailable
from .history import HistoryStore
from .models import CaseType, Catalog, ComboCase, Industry, PracticeSession
from .stats import PracticeStats, compute_stats
from .storage import KeyValueStore
from .timer import Clock, PracticeTimer, TickListener, TickScheduler
from .tracker import SessionTracker, utc_now

API_KEY_KEY = "apiKey"
MIN_API_KEY_LENGTH = 10

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaseCard:
    """One case type as listed for an industry."""

    case_type: CaseType
    highlighted: bool


@dataclass(frozen=True)
class GeneratedCase:
    """AI-written case prompt with the selection that produced it."""

    industry: Industry
    case_type: CaseType
    text: str


class CoachService:
    """Explicit application state, built once at process start."""

    def __init__(
        self,
        settings: Settings,
        *,
        db_path: Path | str | None = None,
        catalog: Catalog | None = None,
        clock: Clock | None = None,
        now: Callable[[], datetime] = utc_now,
        on_tick: TickListener | None = None,
        generator: CaseGenerator | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize service; ``db_path`` overrides the settings path (e.g. ``":memory:"``)."""
        self.settings = settings
        if catalog is not None:
            self.catalog = catalog
        elif settings.catalog_path is not None:
            try:
                self.catalog = load_catalog_from_file(settings.catalog_path)
            except (OSError, ValueError) as exc:
                raise CatalogUnavailable(f"Could not load catalog {settings.catalog_path}: {exc}") from exc
        else:
            self.catalog = load_catalog()
        self.storage = _open_storage(db_path if db_path is not None else settings.db_path)
        self.history = HistoryStore(self.storage)
        self.history.load()
        self.scheduler = TickScheduler(clock) if clock is not None else TickScheduler()
        self.timer = PracticeTimer(self.scheduler, on_tick=on_tick)
        self.tracker = SessionTracker(self.timer, self.history, now=now)
        self.generator = generator if generator is not None else CaseGenerator(settings)
        self._rng = rng if rng is not None else random.Random()

    # Browsing

    def list_industries(self) -> list[Industry]:
        return list(self.catalog.industries)

    def list_case_types(self) -> list[CaseType]:
        return list(self.catalog.case_types.values())

    def combo_cases(self) -> list[ComboCase]:
        return list(self.catalog.combo_cases)

    def select_industry(self, industry_id: str | None) -> Industry | None:
        """Select an industry by id, or clear the selection with None."""
        if industry_id is None:
            self.tracker.select_industry(None)
            return None
        industry = self.catalog.industry(industry_id)
        if industry is None:
            raise LookupError(f"Unknown industry: {industry_id}")
        self.tracker.select_industry(industry)
        return industry

    def random_industry(self) -> Industry:
        industry = self._rng.choice(self.catalog.industries)
        self.tracker.select_industry(industry)
        return industry

    @property
    def selected_industry(self) -> Industry | None:
        return self.tracker.selected_industry

    def case_cards(self, industry_id: str) -> list[CaseCard]:
        """All case types in catalog order, flagged when typical for the industry."""
        relevant = set(self.catalog.relevant_case_type_ids(industry_id))
        return [
            CaseCard(case_type=case_type, highlighted=case_type.id in relevant)
            for case_type in self.catalog.case_types.values()
        ]

    def open_case(self, case_type_id: str) -> CaseType:
        """Show a case type's detail, which also makes it the pending practice session."""
        case_type = self.catalog.case_type(case_type_id)
        if case_type is None:
            raise LookupError(f"Unknown case type: {case_type_id}")
        self.tracker.select_case_type(case_type)
        return case_type

    @property
    def active_case_type(self) -> CaseType | None:
        return self.tracker.active_case_type

    # Timer

    def run_pending(self) -> int:
        return self.scheduler.run_pending()

    def start_timer(self) -> None:
        self.tracker.start_timer()

    def pause_timer(self) -> bool:
        return self.tracker.pause_timer()

    def reset_timer(self) -> None:
        self.tracker.reset_timer()

    def complete_case(self) -> PracticeSession:
        self.run_pending()
        return self.tracker.complete()

    @property
    def timer_display(self) -> str:
        return self.timer.display

    @property
    def timer_running(self) -> bool:
        return self.timer.running

    # History and stats

    def stats(self) -> PracticeStats:
        return compute_stats(self.history.sessions, self.catalog.case_types.values())

    def clear_history(self) -> None:
        self.history.clear()
        logger.info("Practice history cleared")

    # Credential and AI generation

    def save_api_key(self, api_key: str) -> None:
        key = api_key.strip()
        if not key:
            raise ValueError("Please enter an API key.")
        if len(key) < MIN_API_KEY_LENGTH:
            raise ValueError("API key seems too short. Please check and try again.")
        self.storage.set(API_KEY_KEY, key)
        logger.info("API key saved (length %d)", len(key))

    def api_key(self) -> str | None:
        value = self.storage.get(API_KEY_KEY)
        return value if value else None

    def api_key_status(self) -> int | None:
        """Length of the saved key, or None when no key is saved."""
        key = self.api_key()
        return len(key) if key is not None else None

    def test_api_key(self) -> None:
        key = self.api_key()
        if key is None:
            raise MissingCredential("No API key found. Please save one first.")
        self.generator.test_credential(key)

    def generate_ai_case(self, industry_id: str, case_type_id: str) -> GeneratedCase:
        """Ask the chat endpoint for a case; timer, selection, and history are untouched."""
        key = self.api_key()
        if key is None:
            raise MissingCredential()
        industry = self.catalog.industry(industry_id) if industry_id else None
        case_type = self.catalog.case_type(case_type_id) if case_type_id else None
        if industry is None or case_type is None:
            raise LookupError("Please select both an industry and a case type.")
        text = self.generator.generate_case(key, industry, case_type)
        return GeneratedCase(industry=industry, case_type=case_type, text=text)

    def close(self) -> None:
        """Stop the timer and close storage."""
        self.timer.stop()
        self.storage.close()

    def __del__(self) -> None:  # pragma: no cover
        """Best-effort cleanup."""
        try:
            self.close()
        except Exception:
            pass


def _open_storage(db_path: Path | str) -> KeyValueStore:
    """Open durable storage, falling back to an in-memory store for this run."""
    try:
        return KeyValueStore(db_path)
    except PersistenceUnavailable as exc:
        logger.warning("Storage unavailable, practice history will not be kept after exit: %s", exc)
        return KeyValueStore(":memory:")
