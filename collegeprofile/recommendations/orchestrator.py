"""Recommendation orchestrator.

Drives the AI-backed recommendation steps for one profile:
- categorized college list generation,
- per-school "why" reasons (generated at most once per school),
- a sequential backfill of missing reasons,
- application strategy generation.

All steps read the cached profile summary (computing and persisting it
first when it is missing). Each operation takes a profile and returns its
result together with an updated copy of that profile; the input profile is
never modified. Writes go through the store's targeted ``update_field``
wherever one field is enough, so concurrent updates to sibling fields of
the same profile are not overwritten. Store calls run in a worker thread
so a blocking backend never stalls the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Tuple

from ..errors import NotFoundError, UpstreamError, ValidationError
from ..profile.schemas import BUCKETS, ApplicationStrategies, College, CollegeList, Profile, utcnow
from ..profile.storage import ProfileStore
from ..summary.generator import SummaryGenerator
from ..workflow.config import COLLEGE_LIST, STRATEGIES, WHY_REASONS
from ..workflow.parsing import parse_json_field
from .prompts import build_college_listing
from .schemas import GeneratedSchool, StrategiesOutput, bucket_for

logger = logging.getLogger(__name__)


class RecommendationOrchestrator:
    def __init__(self, store: ProfileStore, backend: Any, summarizer: Optional[SummaryGenerator] = None) -> None:
        self.store = store
        self.backend = backend
        self.summarizer = summarizer or SummaryGenerator(backend)

    async def _write_field(self, user_id: str, field_path: str, value: Any) -> None:
        if not await asyncio.to_thread(self.store.update_field, user_id, {}, field_path, value):
            raise NotFoundError(f"Profile not found: {user_id}")

    async def ensure_summary(self, profile: Profile) -> Profile:
        """Return a copy of ``profile`` that has a profile summary."""
        if profile.profile_summary.strip():
            return profile.model_copy(deep=True)

        logger.info("No cached summary for %s; generating one", profile.user_id)
        updated = await self.summarizer.refresh(profile)
        await self._write_field(updated.user_id, "profileSummary", updated.profile_summary)
        return updated

    async def generate_college_list(self, profile: Profile) -> Tuple[CollegeList, Profile]:
        updated = await self.ensure_summary(profile)

        outputs = await self.backend.run(
            COLLEGE_LIST, {"profile_summary": updated.profile_summary}, updated.user_id
        )
        schools = parse_json_field(outputs, "CollegeList", List[GeneratedSchool])

        college_list = CollegeList(last_generated=utcnow())
        for school in schools:
            bucket = bucket_for(school.category)
            if bucket is None:
                logger.debug("Dropping %s with unknown category %r", school.name, school.category)
                continue
            # Fresh generation: reasons from an earlier list are not carried over.
            college_list.bucket(bucket).append(College(name=school.name, category=bucket, reasons=[]))

        await self._write_field(updated.user_id, "collegeList", college_list.model_dump(mode="json", by_alias=True))
        updated.college_list = college_list
        logger.info(
            "Generated college list for %s: %d reach, %d target, %d likely",
            updated.user_id,
            len(college_list.reach),
            len(college_list.target),
            len(college_list.likely),
        )
        return college_list.model_copy(deep=True), updated

    async def _request_reasons(self, profile: Profile, school_name: str) -> List[str]:
        outputs = await self.backend.run(
            WHY_REASONS,
            {"profile_summary": profile.profile_summary, "school_name": school_name},
            profile.user_id,
        )
        return parse_json_field(outputs, "reasoning", List[str])

    async def generate_why_reasons(self, profile: Profile, school_name: str) -> Tuple[List[str], Profile]:
        if not (school_name or "").strip():
            raise ValidationError("A school name is required")

        match = profile.college_list.find(school_name)
        if match is not None and match[1].reasons:
            return list(match[1].reasons), profile.model_copy(deep=True)

        updated = await self.ensure_summary(profile)
        reasons = await self._request_reasons(updated, school_name)

        if match is None:
            logger.info("%s is not on %s's college list; reasons not stored", school_name, updated.user_id)
            return reasons, updated

        bucket, _ = match
        updated.college_list.find(school_name)[1].reasons = list(reasons)
        stored = await asyncio.to_thread(
            self.store.update_field,
            updated.user_id,
            {"name": school_name},
            f"collegeList.{bucket}.$.reasons",
            reasons,
        )
        if not stored:
            logger.warning("%s disappeared from %s's stored college list; reasons not stored", school_name, updated.user_id)
        return list(reasons), updated

    async def _backfill(self, profile: Profile) -> Profile:
        pending = [c for b in BUCKETS for c in profile.college_list.bucket(b) if not c.reasons]
        if not pending:
            return profile.model_copy(deep=True)

        updated = await self.ensure_summary(profile)
        filled = 0
        # One school at a time to stay within the workflow's rate limits.
        for bucket in BUCKETS:
            for college in updated.college_list.bucket(bucket):
                if college.reasons:
                    continue
                college.reasons = await self._request_reasons(updated, college.name)
                filled += 1

        await asyncio.to_thread(self.store.save, updated)
        logger.info("Backfilled reasons for %d schools for %s", filled, updated.user_id)
        return updated

    async def backfill_all_reasons(self, profile: Profile, timeout_s: Optional[float] = None) -> Profile:
        """Generate reasons for every listed school that has none.

        Nothing is written unless the whole sweep succeeds.
        """
        if timeout_s is None:
            return await self._backfill(profile)
        try:
            return await asyncio.wait_for(self._backfill(profile), timeout_s)
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"Reasons backfill for {profile.user_id} exceeded {timeout_s}s") from e

    async def generate_strategies(self, profile: Profile) -> Tuple[ApplicationStrategies, Profile]:
        if profile.college_list.is_empty():
            raise NotFoundError(f"No college list for {profile.user_id}; generate one first")

        updated = await self.ensure_summary(profile)
        outputs = await self.backend.run(
            STRATEGIES,
            {
                "profile_summary": updated.profile_summary,
                "college_list": build_college_listing(updated.college_list),
            },
            updated.user_id,
        )
        parsed = parse_json_field(outputs, "answer", StrategiesOutput)
        strategies = ApplicationStrategies.model_validate(parsed.model_dump())

        await self._write_field(
            updated.user_id, "applicationStrategies", strategies.model_dump(mode="json", by_alias=True)
        )
        updated.application_strategies = strategies
        return strategies.model_copy(deep=True), updated
