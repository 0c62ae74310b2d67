"""Profile operations behind the web layer's profile routes.

Every mutation follows the same path: merge into a copy of the stored
profile, regenerate the summary, save. Store calls run in a worker thread
so a blocking backend never stalls the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from ..errors import NotFoundError, ValidationError
from ..summary.generator import SummaryGenerator
from ..workflow.config import STRENGTHS
from ..workflow.parsing import parse_json_field
from .merge import answers_for_ui, apply_answers, merge_discovered, merge_tracker
from .schemas import Profile, StrengthCard, new_profile, utcnow
from .storage import ProfileStore

logger = logging.getLogger(__name__)


# Rule-based strength cards: (category, question id, answer) -> card.
STRENGTH_RULES: List[tuple] = [
    (
        "academics", "a1", "3.8 - 4.0",
        {"id": "s1", "text": "High GPA",
         "details": "Your GPA is in the top tier, which is highly attractive to selective colleges."},
    ),
    (
        "academics", "a2", "Yes, many",
        {"id": "s2", "text": "Rigorous Course Load",
         "details": "Taking many AP, IB, or Honors courses shows you are prepared for college-level work."},
    ),
    (
        "interests", "i1", "Volunteering",
        {"id": "s3", "text": "Community Service",
         "details": "Your commitment to volunteering demonstrates strong character and community involvement."},
    ),
    (
        "interests", "i1", "Sports",
        {"id": "s4", "text": "Athletic Achievements",
         "details": "Participation in sports showcases teamwork, discipline, and dedication."},
    ),
]


def build_strengths_prompt(profile: Profile) -> str:
    prompt = (
        "Analyze the following student profile and identify their key strengths "
        "for college applications. List only the strengths.\n\n"
    )
    prompt += f"Student Name: {profile.name}\n"
    prompt += "--- Questionnaire Answers ---\n"
    for item in profile.questionnaire:
        prompt += f"- {item.question}: {item.answer}\n"
    prompt += "\n--- Other Discovered Information ---\n"
    if profile.discovered.interests:
        prompt += f"- Interests: {', '.join(profile.discovered.interests)}\n"
    return prompt


class ProfileService:
    def __init__(self, store: ProfileStore, backend: Any, summarizer: Optional[SummaryGenerator] = None) -> None:
        self.store = store
        self.backend = backend
        self.summarizer = summarizer or SummaryGenerator(backend)

    async def get_profile(self, user_id: str) -> Profile:
        profile = await asyncio.to_thread(self.store.find_by_key, user_id)
        if profile is None:
            raise NotFoundError(f"Profile not found: {user_id}")
        return profile

    async def create_profile(self, user_id: str, name: str, password_hash: str) -> Profile:
        if not (user_id and name and password_hash):
            raise ValidationError("Name, email, and password are required.")
        if await asyncio.to_thread(self.store.find_by_key, user_id) is not None:
            raise ValidationError(f"A user with this email already exists: {user_id}")
        profile = new_profile(user_id, name, password_hash)
        await asyncio.to_thread(self.store.save, profile)
        logger.info("Created profile %s", user_id)
        return profile

    async def _refresh_and_save(self, profile: Profile) -> Profile:
        updated = await self.summarizer.refresh(profile)
        await asyncio.to_thread(self.store.save, updated)
        return updated

    async def update_questionnaire(self, user_id: str, payload: Mapping[str, Any]) -> Profile:
        """Merge one category of answers, e.g. ``{"academics": {"a1": "3.8 - 4.0"}}``."""
        if not isinstance(payload, Mapping) or not payload:
            raise ValidationError("Questionnaire update must name a category")
        if len(payload) != 1:
            raise ValidationError("Questionnaire update must contain exactly one category")

        category, answers = next(iter(payload.items()))
        if answers is None:
            answers = {}
        if not isinstance(answers, Mapping):
            raise ValidationError(f"Answers for {category!r} must be a mapping of question id to answer")

        profile = await self.get_profile(user_id)
        updated = apply_answers(profile, category, answers)
        logger.info("Merged %d %s answers for %s", len(answers), category, user_id)
        return await self._refresh_and_save(updated)

    async def update_tracker(self, user_id: str, patch: Mapping[str, Any]) -> Profile:
        if not isinstance(patch, Mapping) or not patch:
            raise ValidationError("Tracker update is empty")
        profile = await self.get_profile(user_id)
        updated = profile.model_copy(deep=True)
        updated.tracker = merge_tracker(profile.tracker, patch)
        updated.last_updated = utcnow()
        return await self._refresh_and_save(updated)

    async def update_discovered(self, user_id: str, field: str, values: List[str], replace: bool = False) -> Profile:
        profile = await self.get_profile(user_id)
        updated = profile.model_copy(deep=True)
        updated.discovered = merge_discovered(profile.discovered, field, values, replace=replace)
        updated.last_updated = utcnow()
        return await self._refresh_and_save(updated)

    async def get_answers(self, user_id: str) -> Dict[str, Dict[str, Any]]:
        return answers_for_ui(await self.get_profile(user_id))

    async def list_strengths(self, user_id: str) -> List[Dict[str, str]]:
        answers = answers_for_ui(await self.get_profile(user_id))
        return [dict(card) for category, qid, value, card in STRENGTH_RULES if answers[category].get(qid) == value]

    async def analyze_strengths(self, user_id: str) -> List[Dict[str, Any]]:
        """Ask the strengths workflow for strength cards and store their labels."""
        profile = await self.get_profile(user_id)
        outputs = await self.backend.run(STRENGTHS, {"prompt": build_strengths_prompt(profile)}, user_id)
        cards = parse_json_field(outputs, "strengths", List[StrengthCard])

        updated = profile.model_copy(deep=True)
        updated.discovered = merge_discovered(profile.discovered, "strengths", [c.text for c in cards], replace=True)
        await asyncio.to_thread(self.store.save, updated)
        logger.info("Stored %d AI strengths for %s", len(cards), user_id)
        return [c.model_dump() for c in cards]
