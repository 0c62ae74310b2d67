"""Natural-language profile summary.

The summary is regenerated after every questionnaire/tracker change and is
the only profile context the recommendation workflows receive. Unlike the
other AI-backed steps it never fails: if the workflow is unavailable the
plain-text rendering is used as the summary.
"""

from __future__ import annotations

import logging
from typing import Any

from ..profile.schemas import Profile
from ..workflow.config import PROFILE_SUMMARY
from ..workflow.parsing import require_text

logger = logging.getLogger(__name__)


def render_profile_text(profile: Profile) -> str:
    """Deterministic plain-text rendering of the profile."""
    text = "--- Student Profile ---\n"

    if profile.questionnaire:
        text += "Questionnaire Answers:\n"
        for item in profile.questionnaire:
            text += f"- {item.question}: {item.answer}\n"

    if profile.discovered.interests:
        text += "Discovered Interests: " + ", ".join(profile.discovered.interests) + "\n"

    if profile.discovered.strengths:
        text += "Discovered Strengths: " + ", ".join(profile.discovered.strengths) + "\n"

    return text.strip()


class SummaryGenerator:
    def __init__(self, backend: Any) -> None:
        self.backend = backend

    async def generate(self, profile: Profile) -> str:
        profile_text = render_profile_text(profile)
        logger.debug("Summarizing profile for %s:\n%s", profile.user_id, profile_text)

        try:
            outputs = await self.backend.run(PROFILE_SUMMARY, {"profile": profile_text}, profile.user_id)
            summary = require_text(outputs, "summary")
        except Exception as e:  # any failure falls back to the rendering
            logger.warning(
                "Profile summary failed for %s (%s); using plain-text rendering: %s",
                profile.user_id,
                getattr(e, "kind", type(e).__name__),
                e,
            )
            return profile_text

        logger.info("Generated profile summary for %s", profile.user_id)
        return summary

    async def refresh(self, profile: Profile) -> Profile:
        """Return a copy of ``profile`` with ``profile_summary`` regenerated."""
        updated = profile.model_copy(deep=True)
        updated.profile_summary = await self.generate(profile)
        return updated
