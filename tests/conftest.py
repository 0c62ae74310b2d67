"""
Shared fixtures: a scripted workflow backend and seeded profiles.
"""

import json
from typing import Any, Dict, List

import pytest

from collegeprofile.errors import UpstreamError
from collegeprofile.profile.schemas import Answer, College, CollegeList, Profile, new_profile
from collegeprofile.profile.storage import InMemoryProfileStore


class FakeWorkflowBackend:
    """Answers workflow runs from a script and records every call.

    ``responses`` maps a workflow name to either an outputs dict, an
    exception to raise, or a callable ``(inputs) -> outputs``.
    """

    def __init__(self, responses: Dict[str, Any] = None):
        self.responses = dict(responses or {})
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def aclose(self):
        self.closed = True

    def calls_for(self, workflow: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["workflow"] == workflow]

    async def run(self, workflow, inputs, user):
        self.calls.append({"workflow": workflow, "inputs": dict(inputs), "user": user})
        response = self.responses.get(workflow)
        if response is None:
            raise UpstreamError(f"No scripted response for {workflow}")
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(inputs)
        return response


def json_output(field: str, value: Any) -> Dict[str, str]:
    return {field: json.dumps(value)}


@pytest.fixture
def backend():
    """Scripted backend with no responses configured."""
    return FakeWorkflowBackend()


@pytest.fixture
def store():
    """Empty in-memory store that records its writes."""
    return InMemoryProfileStore()


@pytest.fixture
def profile():
    """Profile with academics and interests answered and a cached summary."""
    p = new_profile("jane@example.com", "Jane Doe", "$2b$10$hash")
    p.questionnaire = [
        Answer(id="a1", category="academics", question="What is your GPA (on a 4.0 scale)?", answer="3.8 - 4.0"),
        Answer(id="a2", category="academics", question="Have you taken any AP, IB, or Honors courses?", answer="Yes, many"),
        Answer(id="i1", category="interests", question="Which extracurricular activities are you involved in?", answer="Volunteering"),
    ]
    p.discovered.interests = ["Robotics", "Debate"]
    p.profile_summary = "Jane is a high-achieving student interested in robotics."
    return p


@pytest.fixture
def listed_profile(profile):
    """Profile that already has a college list; MIT already has reasons."""
    p = profile.model_copy(deep=True)
    p.college_list = CollegeList(
        reach=[
            College(name="MIT", category="reach", reasons=["Top robotics labs"]),
            College(name="Stanford University", category="reach"),
        ],
        target=[College(name="University of Michigan", category="target")],
        likely=[College(name="Ohio State University", category="likely")],
    )
    return p


@pytest.fixture
def stored(store):
    """Save a profile into the store and return it."""

    def _stored(p: Profile) -> Profile:
        store.save(p)
        store.writes.clear()
        return p

    return _stored
