"""Merge helpers for partial profile updates.

Every helper takes the current value and returns a new one; the caller's
profile is never modified in place.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..questions.catalog import CATEGORIES, find_question
from .schemas import Answer, Discovered, Profile, Tracker, utcnow

UNKNOWN_QUESTION = "Unknown Question"

DISCOVERED_FIELDS: tuple = ("interests", "strengths", "goals")


def merge_answers(profile: Profile, category: str, answers_by_id: Mapping[str, Any]) -> List[Answer]:
    """Replace every answer of ``category`` with ``answers_by_id``.

    Answers of other categories keep their relative order and come first;
    the new answers follow in the mapping's iteration order. An empty
    mapping therefore removes the category's answers altogether.
    """
    formatted = []
    for question_id, answer in (answers_by_id or {}).items():
        question = find_question(category, question_id)
        formatted.append(
            Answer(
                id=question_id,
                category=category,
                question=question["question"] if question else UNKNOWN_QUESTION,
                answer=answer,
            )
        )

    kept = [a.model_copy(deep=True) for a in profile.questionnaire if a.category != category]
    return kept + formatted


def apply_answers(profile: Profile, category: str, answers_by_id: Mapping[str, Any]) -> Profile:
    updated = profile.model_copy(deep=True)
    updated.questionnaire = merge_answers(profile, category, answers_by_id)
    updated.last_updated = utcnow()
    return updated


def merge_tracker(tracker: Tracker, patch: Mapping[str, Any]) -> Tracker:
    """Overwrite the sub-trackers named in ``patch``; keep the others.

    ``sat`` and ``gpa`` are replaced as whole records (a field omitted from
    the patched record falls back to its default) and ``competitions`` is
    replaced as a whole list.
    """
    unknown = [k for k in (patch or {}) if k not in Tracker.model_fields]
    if unknown:
        raise ValidationError(f"Unknown tracker keys: {', '.join(sorted(unknown))}")

    current = tracker.model_dump(by_alias=True)
    for key, value in (patch or {}).items():
        current[key] = value
    try:
        return Tracker.model_validate(current)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid tracker update: {e}") from e


def merge_discovered(discovered: Discovered, field: str, values: List[str], replace: bool = False) -> Discovered:
    """Append to (or replace) one discovered list. Duplicates are kept."""
    if field not in DISCOVERED_FIELDS:
        raise ValidationError(f"Unknown discovered field: {field!r}")
    updated = discovered.model_copy(deep=True)
    existing = [] if replace else list(getattr(updated, field))
    setattr(updated, field, existing + [str(v) for v in values or []])
    return updated


def answers_for_ui(profile: Profile) -> Dict[str, Dict[str, Any]]:
    """Fold the questionnaire back into ``{category: {question_id: answer}}``."""
    out: Dict[str, Dict[str, Any]] = {c: {} for c in CATEGORIES}
    for item in profile.questionnaire:
        if item.category in out:
            out[item.category][item.id] = item.answer
    return out
