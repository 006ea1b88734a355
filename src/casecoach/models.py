"""Core domain models for case framework practice."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Industry:
    """Industry a case can be set in."""

    id: str
    name: str
    icon: str

    @property
    def label(self) -> str:
        return f"{self.icon} {self.name}".strip()


@dataclass(frozen=True)
class Framework:
    """Ordered steps and focus areas for one case type."""

    steps: list[str]
    key_areas: list[str]


@dataclass(frozen=True)
class CaseType:
    """One case interview framework from the catalog."""

    id: str
    name: str
    category: str
    duration: str
    difficulty: str
    description: str
    when_used: str
    framework: Framework
    clarifying_questions: list[str]
    common_pitfalls: list[str]
    example_prompt: str


@dataclass(frozen=True)
class ComboCase:
    """Case that blends several frameworks."""

    name: str
    description: str
    example: str


@dataclass(frozen=True)
class Catalog:
    """Immutable framework catalog loaded at startup."""

    industries: list[Industry]
    case_types: dict[str, CaseType]
    industry_relevance: dict[str, list[str]] = field(default_factory=dict)
    combo_cases: list[ComboCase] = field(default_factory=list)

    def industry(self, industry_id: str) -> Industry | None:
        """Look up an industry by id."""
        for industry in self.industries:
            if industry.id == industry_id:
                return industry
        return None

    def case_type(self, case_type_id: str) -> CaseType | None:
        """Look up a case type by id."""
        return self.case_types.get(case_type_id)

    def relevant_case_type_ids(self, industry_id: str) -> list[str]:
        """Return case type ids flagged as typical for an industry."""
        return list(self.industry_relevance.get(industry_id, []))


@dataclass(frozen=True)
class PracticeSession:
    """One completed practice attempt."""

    case_type_name: str
    industry_name: str | None
    duration_seconds: int
    timestamp: datetime
