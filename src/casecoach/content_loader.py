"""Load the declarative case framework catalog from bundled JSON."""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

from .models import CaseType, Catalog, ComboCase, Framework, Industry

CONTENT_PACKAGE = "casecoach.content"
CATALOG_RESOURCE = "case_framework_data.json"

logger = logging.getLogger(__name__)


def _required_text(raw: dict[str, Any], key: str, owner: str) -> str:
    value = raw.get(key)
    if value is None or not str(value).strip():
        raise ValueError(f"{owner} is missing required field '{key}'.")
    return str(value).strip()


def _text_list(raw: dict[str, Any], key: str) -> list[str]:
    return [str(item).strip() for item in raw.get(key, []) if str(item).strip()]


def _industry_from_dict(raw: dict[str, Any]) -> Industry:
    """Build an industry from raw JSON content."""
    industry_id = _required_text(raw, "id", "Industry")
    return Industry(
        id=industry_id,
        name=_required_text(raw, "name", f"Industry '{industry_id}'"),
        icon=str(raw.get("icon", "")).strip(),
    )


def _case_type_from_dict(case_type_id: str, raw: dict[str, Any]) -> CaseType:
    """Build a case type from raw JSON content."""
    owner = f"Case type '{case_type_id}'"
    framework_raw = raw.get("framework") or {}
    if not isinstance(framework_raw, dict):
        raise ValueError(f"{owner} has a malformed 'framework' section.")
    steps = _text_list(framework_raw, "steps")
    if not steps:
        raise ValueError(f"{owner} has no framework steps.")
    return CaseType(
        id=case_type_id,
        name=_required_text(raw, "name", owner),
        category=str(raw.get("category", "")).strip(),
        duration=str(raw.get("duration", "")).strip(),
        difficulty=str(raw.get("difficulty", "")).strip(),
        description=str(raw.get("description", "")).strip(),
        when_used=str(raw.get("when_used", "")).strip(),
        framework=Framework(steps=steps, key_areas=_text_list(framework_raw, "key_areas")),
        clarifying_questions=_text_list(raw, "clarifying_questions"),
        common_pitfalls=_text_list(raw, "common_pitfalls"),
        example_prompt=str(raw.get("example_prompt", "")).strip(),
    )


def _combo_from_dict(raw: dict[str, Any]) -> ComboCase:
    return ComboCase(
        name=_required_text(raw, "name", "Combo case"),
        description=str(raw.get("description", "")).strip(),
        example=str(raw.get("example", "")).strip(),
    )


def _catalog_from_dict(raw: dict[str, Any]) -> Catalog:
    """Build and validate a catalog from the top-level JSON object."""
    industries: list[Industry] = []
    seen_industries: set[str] = set()
    for item in raw.get("industries", []):
        industry = _industry_from_dict(item)
        if industry.id in seen_industries:
            raise ValueError(f"Duplicate industry id: {industry.id}")
        seen_industries.add(industry.id)
        industries.append(industry)

    raw_case_types = raw.get("case_types", {})
    if not isinstance(raw_case_types, dict):
        raise ValueError("'case_types' must be an object keyed by case type id.")
    case_types = {str(key): _case_type_from_dict(str(key), value) for key, value in raw_case_types.items()}
    _validate_unique_case_names(case_types)

    relevance: dict[str, list[str]] = {}
    for industry_id, case_ids in raw.get("industry_relevance", {}).items():
        if industry_id not in seen_industries:
            raise ValueError(f"Relevance entry references unknown industry '{industry_id}'.")
        resolved: list[str] = []
        for case_id in case_ids:
            if case_id not in case_types:
                raise ValueError(f"Industry '{industry_id}' references unknown case type '{case_id}'.")
            resolved.append(str(case_id))
        relevance[str(industry_id)] = resolved

    combos = [_combo_from_dict(item) for item in raw.get("combo_cases", [])]
    return Catalog(industries=industries, case_types=case_types, industry_relevance=relevance, combo_cases=combos)


def _validate_unique_case_names(case_types: dict[str, CaseType]) -> None:
    """History is keyed by display name, so names must not collide."""
    seen: dict[str, str] = {}
    for case_type in case_types.values():
        previous = seen.get(case_type.name)
        if previous is not None:
            raise ValueError(f"Duplicate case type name '{case_type.name}' (in {previous} and {case_type.id})")
        seen[case_type.name] = case_type.id


def load_catalog() -> Catalog:
    """Load the bundled catalog."""
    entry = resources.files(CONTENT_PACKAGE).joinpath(CATALOG_RESOURCE)
    raw = json.loads(entry.read_text(encoding="utf-8-sig"))
    catalog = _catalog_from_dict(raw)
    logger.debug(
        "Loaded bundled catalog: %d industries, %d case types", len(catalog.industries), len(catalog.case_types)
    )
    return catalog


def load_catalog_from_file(path: Path | str) -> Catalog:
    """Load a catalog from an explicit JSON file."""
    file_path = Path(path)
    raw = json.loads(file_path.read_text(encoding="utf-8-sig"))
    if not isinstance(raw, dict):
        raise ValueError(f"Catalog file {file_path} must contain a JSON object.")
    catalog = _catalog_from_dict(raw)
    logger.debug("Loaded catalog from %s", file_path)
    return catalog
