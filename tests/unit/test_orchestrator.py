"""
Unit tests for RecommendationOrchestrator.
"""

import asyncio
import threading

import pytest

from collegeprofile.errors import NotFoundError, ParseError, UpstreamError, ValidationError
from collegeprofile.profile.schemas import College, CollegeList
from collegeprofile.profile.storage import JsonFileProfileStore
from collegeprofile.recommendations.orchestrator import RecommendationOrchestrator
from collegeprofile.workflow.config import COLLEGE_LIST, PROFILE_SUMMARY, STRATEGIES, WHY_REASONS
from tests.conftest import json_output


@pytest.fixture
def orchestrator(store, backend):
    """Orchestrator over the in-memory store and scripted backend."""
    return RecommendationOrchestrator(store, backend)


class TestEnsureSummary:
    """Test read-through population of the cached summary."""

    @pytest.mark.asyncio
    async def test_cached_summary_used(self, orchestrator, backend, store, stored, profile):
        """Test that an existing summary is reused without calls or writes."""
        # Arrange
        stored(profile)

        # Act
        updated = await orchestrator.ensure_summary(profile)

        # Assert
        assert updated.profile_summary == profile.profile_summary
        assert backend.calls == []
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_missing_summary_generated_and_persisted(self, orchestrator, backend, store, stored, profile):
        """Test that a missing summary is generated and written to its field only."""
        # Arrange
        profile.profile_summary = ""
        stored(profile)
        backend.responses[PROFILE_SUMMARY] = {"summary": "Fresh summary."}

        # Act
        updated = await orchestrator.ensure_summary(profile)

        # Assert
        assert updated.profile_summary == "Fresh summary."
        assert profile.profile_summary == ""
        assert store.find_by_key(profile.user_id).profile_summary == "Fresh summary."
        assert store.writes == [("update_field", profile.user_id, "profileSummary")]


class TestGenerateCollegeList:
    """Test categorized college list generation."""

    @pytest.mark.asyncio
    async def test_tags_normalized_into_buckets(self, orchestrator, backend, store, stored, profile):
        """Test that tags bucket case-insensitively, Safety maps to likely, unknown tags drop."""
        # Arrange
        stored(profile)
        backend.responses[COLLEGE_LIST] = json_output("CollegeList", [
            {"name": "MIT", "category": "Reach"},
            {"name": "Caltech", "category": "reach"},
            {"name": "Ohio State University", "category": "Safety"},
            {"name": "University of Michigan", "category": "target"},
            {"name": "Hogwarts", "category": "Dream"},
        ])

        # Act
        college_list, updated = await orchestrator.generate_college_list(profile)

        # Assert
        assert [c.name for c in college_list.reach] == ["MIT", "Caltech"]
        assert [c.name for c in college_list.target] == ["University of Michigan"]
        assert [c.name for c in college_list.likely] == ["Ohio State University"]
        assert all(c.reasons == [] for c in college_list.reach + college_list.target + college_list.likely)
        assert college_list.last_generated is not None
        assert updated.college_list == college_list
        assert backend.calls_for(COLLEGE_LIST)[0]["inputs"] == {"profile_summary": profile.profile_summary}

        saved = store.find_by_key(profile.user_id)
        assert [c.name for c in saved.college_list.reach] == ["MIT", "Caltech"]

    @pytest.mark.asyncio
    async def test_previous_reasons_discarded(self, orchestrator, backend, store, stored, listed_profile):
        """Test that a fresh list replaces the old one wholesale, reasons included."""
        # Arrange
        stored(listed_profile)
        backend.responses[COLLEGE_LIST] = json_output("CollegeList", [{"name": "MIT", "category": "Reach"}])

        # Act
        college_list, _ = await orchestrator.generate_college_list(listed_profile)

        # Assert
        assert college_list.reach[0].reasons == []
        assert store.find_by_key(listed_profile.user_id).college_list.target == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response, error",
        [
            (UpstreamError("down"), UpstreamError),
            ({"CollegeList": "not json"}, ParseError),
            ({"CollegeList": '[{"school": "MIT"}]'}, ParseError),
            ({"answer": "[]"}, ParseError),
        ],
    )
    async def test_failure_does_not_persist(self, orchestrator, backend, store, stored, listed_profile, response, error):
        """Test that upstream and parse failures leave the stored list untouched."""
        # Arrange
        stored(listed_profile)
        backend.responses[COLLEGE_LIST] = response

        # Act
        with pytest.raises(error):
            await orchestrator.generate_college_list(listed_profile)

        # Assert
        assert store.writes == []
        assert store.find_by_key(listed_profile.user_id).college_list == listed_profile.college_list


class TestGenerateWhyReasons:
    """Test memoized per-school reasons."""

    @pytest.mark.asyncio
    async def test_reasons_memoized(self, orchestrator, backend, store, stored, listed_profile):
        """Test that the second request for a school makes no workflow call."""
        # Arrange
        stored(listed_profile)
        backend.responses[WHY_REASONS] = json_output("reasoning", ["Strong design program", "Great weather"])

        # Act
        first, updated = await orchestrator.generate_why_reasons(listed_profile, "Stanford University")
        second, _ = await orchestrator.generate_why_reasons(updated, "Stanford University")

        # Assert
        assert first == ["Strong design program", "Great weather"]
        assert second == first
        assert len(backend.calls_for(WHY_REASONS)) == 1
        assert backend.calls_for(WHY_REASONS)[0]["inputs"] == {
            "profile_summary": listed_profile.profile_summary,
            "school_name": "Stanford University",
        }

    @pytest.mark.asyncio
    async def test_existing_reasons_returned_without_call(self, orchestrator, backend, store, listed_profile):
        """Test that stored reasons are returned as-is."""
        # Act
        reasons, _ = await orchestrator.generate_why_reasons(listed_profile, "MIT")

        # Assert
        assert reasons == ["Top robotics labs"]
        assert backend.calls == []
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_targeted_persist(self, orchestrator, backend, store, stored, listed_profile):
        """Test that only the matched school's reasons are written."""
        # Arrange
        stored(listed_profile)
        backend.responses[WHY_REASONS] = json_output("reasoning", ["Honors college"])
        # A concurrent writer adds reasons to a sibling school.
        concurrent = store.find_by_key(listed_profile.user_id)
        concurrent.college_list.target[0].reasons = ["Strong engineering"]
        store.save(concurrent)
        store.writes.clear()

        # Act
        await orchestrator.generate_why_reasons(listed_profile, "Ohio State University")

        # Assert
        saved = store.find_by_key(listed_profile.user_id)
        assert saved.college_list.likely[0].reasons == ["Honors college"]
        assert saved.college_list.target[0].reasons == ["Strong engineering"]
        assert store.writes == [("update_field", listed_profile.user_id, "collegeList.likely.$.reasons")]

    @pytest.mark.asyncio
    async def test_first_match_in_bucket_order(self, orchestrator, backend, store, stored, listed_profile):
        """Test that reach is searched before likely."""
        # Arrange
        listed_profile.college_list.likely.append(College(name="Stanford University", category="likely"))
        stored(listed_profile)
        backend.responses[WHY_REASONS] = json_output("reasoning", ["x"])

        # Act
        _, updated = await orchestrator.generate_why_reasons(listed_profile, "Stanford University")

        # Assert
        assert updated.college_list.reach[1].reasons == ["x"]
        assert updated.college_list.likely[-1].reasons == []

    @pytest.mark.asyncio
    async def test_unlisted_school_not_persisted(self, orchestrator, backend, store, stored, listed_profile):
        """Test that reasons for a school off the list are returned but not stored."""
        # Arrange
        stored(listed_profile)
        backend.responses[WHY_REASONS] = json_output("reasoning", ["Nice campus"])

        # Act
        reasons, updated = await orchestrator.generate_why_reasons(listed_profile, "Yale University")

        # Assert
        assert reasons == ["Nice campus"]
        assert store.writes == []
        assert updated.college_list == listed_profile.college_list

    @pytest.mark.asyncio
    async def test_failure_propagates(self, orchestrator, backend, stored, listed_profile):
        """Test that a non-list reasoning output raises ParseError."""
        # Arrange
        stored(listed_profile)
        backend.responses[WHY_REASONS] = {"reasoning": "Because it is good."}

        # Act / Assert
        with pytest.raises(ParseError):
            await orchestrator.generate_why_reasons(listed_profile, "Stanford University")

    @pytest.mark.asyncio
    async def test_blank_school_name(self, orchestrator, listed_profile):
        """Test that a blank school name is rejected."""
        # Act / Assert
        with pytest.raises(ValidationError):
            await orchestrator.generate_why_reasons(listed_profile, "  ")

    @pytest.mark.asyncio
    async def test_storage_runs_off_event_loop_thread(self, backend, tmp_path, listed_profile):
        """Test that store reads and writes run in a worker thread."""
        # Arrange
        store = JsonFileProfileStore(tmp_path / "profiles.json")
        store.save(listed_profile)
        backend.responses[WHY_REASONS] = json_output("reasoning", ["Design school"])
        loop_thread = threading.get_ident()
        threads = []
        original_load = store._load_all

        def recording_load():
            threads.append(threading.get_ident())
            return original_load()

        store._load_all = recording_load
        orchestrator = RecommendationOrchestrator(store, backend)

        # Act
        await orchestrator.generate_why_reasons(listed_profile, "Stanford University")

        # Assert
        assert threads
        assert loop_thread not in threads
        assert store.find_by_key(listed_profile.user_id).college_list.reach[1].reasons == ["Design school"]


class TestBackfillAllReasons:
    """Test the sequential reasons backfill."""

    @pytest.mark.asyncio
    async def test_fills_missing_reasons_sequentially(self, orchestrator, backend, store, stored, listed_profile):
        """Test that schools without reasons are filled in bucket order and saved once."""
        # Arrange
        stored(listed_profile)
        backend.responses[WHY_REASONS] = lambda inputs: json_output("reasoning", [f"Why {inputs['school_name']}"])

        # Act
        updated = await orchestrator.backfill_all_reasons(listed_profile)

        # Assert
        schools = [c["inputs"]["school_name"] for c in backend.calls_for(WHY_REASONS)]
        assert schools == ["Stanford University", "University of Michigan", "Ohio State University"]
        assert updated.college_list.reach[0].reasons == ["Top robotics labs"]
        assert updated.college_list.target[0].reasons == ["Why University of Michigan"]
        assert store.writes == [("save", listed_profile.user_id)]
        assert store.find_by_key(listed_profile.user_id).college_list.likely[0].reasons == ["Why Ohio State University"]
        assert listed_profile.college_list.target[0].reasons == []

    @pytest.mark.asyncio
    async def test_no_write_when_nothing_missing(self, orchestrator, backend, store, stored, profile):
        """Test that a complete list triggers no calls and no writes."""
        # Arrange
        profile.college_list = CollegeList(reach=[College(name="MIT", category="reach", reasons=["Labs"])])
        stored(profile)

        # Act
        await orchestrator.backfill_all_reasons(profile)

        # Assert
        assert backend.calls == []
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_partial_failure_not_persisted(self, orchestrator, backend, store, stored, listed_profile):
        """Test that a failure mid-sweep writes nothing."""
        # Arrange
        stored(listed_profile)

        def respond(inputs):
            if inputs["school_name"] == "Ohio State University":
                raise UpstreamError("rate limited", status_code=429)
            return json_output("reasoning", ["ok"])

        backend.responses[WHY_REASONS] = respond

        # Act
        with pytest.raises(UpstreamError):
            await orchestrator.backfill_all_reasons(listed_profile)

        # Assert
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_deadline(self, orchestrator, store, stored, listed_profile):
        """Test that the caller deadline aborts the sweep without writing."""
        # Arrange
        stored(listed_profile)

        class SlowBackend:
            async def run(self, workflow, inputs, user):
                await asyncio.sleep(5)

        orchestrator.backend = SlowBackend()

        # Act
        with pytest.raises(UpstreamError, match="exceeded"):
            await orchestrator.backfill_all_reasons(listed_profile, timeout_s=0.05)

        # Assert
        assert store.writes == []


class TestGenerateStrategies:
    """Test application strategy generation."""

    @pytest.mark.asyncio
    async def test_requires_college_list(self, orchestrator, backend, profile):
        """Test that a profile without a college list fails before any call."""
        # Act
        with pytest.raises(NotFoundError):
            await orchestrator.generate_strategies(profile)

        # Assert
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_generates_and_persists(self, orchestrator, backend, store, stored, listed_profile):
        """Test that strategies are parsed, stored and built from the grouped listing."""
        # Arrange
        stored(listed_profile)
        backend.responses[STRATEGIES] = json_output("answer", {
            "earlyDecision": ["MIT"],
            "earlyAction": ["University of Michigan", "Ohio State University"],
            "strengthsToHighlight": {"Community Service": "Lead with the tutoring program."},
        })

        # Act
        strategies, updated = await orchestrator.generate_strategies(listed_profile)

        # Assert
        assert strategies.early_decision == ["MIT"]
        assert strategies.strengths_to_highlight == {"Community Service": "Lead with the tutoring program."}
        assert updated.application_strategies == strategies
        assert store.find_by_key(listed_profile.user_id).application_strategies == strategies

        listing = backend.calls_for(STRATEGIES)[0]["inputs"]["college_list"]
        assert listing == (
            "Reach:\n- MIT\n- Stanford University\n\n"
            "Target:\n- University of Michigan\n\n"
            "Likely:\n- Ohio State University"
        )

    @pytest.mark.asyncio
    async def test_malformed_answer(self, orchestrator, backend, store, stored, listed_profile):
        """Test that a malformed answer raises ParseError and writes nothing."""
        # Arrange
        stored(listed_profile)
        backend.responses[STRATEGIES] = json_output("answer", {"earlyDecision": "MIT"})

        # Act
        with pytest.raises(ParseError):
            await orchestrator.generate_strategies(listed_profile)

        # Assert
        assert store.writes == []
