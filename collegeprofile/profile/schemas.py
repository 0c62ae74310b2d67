"""Profile document models.

Attributes are snake_case in Python; the persisted document keeps the
camelCase keys the web client already reads (``collegeList``,
``profileSummary`` ...), so every model dumps ``by_alias``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


BUCKETS: tuple = ("reach", "target", "likely")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Answer(DocumentModel):
    id: str
    category: str
    question: str = Field(..., description="Question text snapshotted at answer time")
    answer: Any = None


class Discovered(DocumentModel):
    interests: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    goals: List[str] = Field(default_factory=list)


class SatTracker(DocumentModel):
    current: Optional[float] = None
    goal: Optional[float] = None
    target_date: str = ""


class GpaTracker(DocumentModel):
    current: Optional[float] = None
    goal: Optional[float] = None


class Competition(DocumentModel):
    id: Optional[str] = None
    name: Optional[str] = None
    result: Optional[str] = None


class Tracker(DocumentModel):
    sat: SatTracker = Field(default_factory=SatTracker)
    gpa: GpaTracker = Field(default_factory=GpaTracker)
    competitions: List[Competition] = Field(default_factory=list)


class College(DocumentModel):
    name: str
    category: str
    reasons: List[str] = Field(default_factory=list)


class CollegeList(DocumentModel):
    reach: List[College] = Field(default_factory=list)
    target: List[College] = Field(default_factory=list)
    likely: List[College] = Field(default_factory=list)
    last_generated: Optional[datetime] = None

    def is_empty(self) -> bool:
        return not (self.reach or self.target or self.likely)

    def bucket(self, name: str) -> List[College]:
        return getattr(self, name)

    def find(self, school_name: str) -> Optional[tuple]:
        """Return ``(bucket, college)`` for the first match in reach/target/likely order."""
        for bucket in BUCKETS:
            for college in self.bucket(bucket):
                if college.name == school_name:
                    return bucket, college
        return None


class StrengthCard(BaseModel):
    """A strength as shown to the student; only ``text`` is stored on the profile."""

    id: Optional[str] = None
    text: str = Field(..., min_length=1)
    details: str = ""


class ApplicationStrategies(DocumentModel):
    early_decision: List[str] = Field(default_factory=list)
    early_action: List[str] = Field(default_factory=list)
    strengths_to_highlight: Dict[str, str] = Field(default_factory=dict)


class Profile(DocumentModel):
    user_id: str = Field(..., min_length=1, description="Unique key (the account email)")
    name: str = ""
    password: str = Field("", description="Credential hash, never the raw password")
    last_updated: datetime = Field(default_factory=utcnow)
    questionnaire: List[Answer] = Field(default_factory=list)
    discovered: Discovered = Field(default_factory=Discovered)
    tracker: Tracker = Field(default_factory=Tracker)
    college_list: CollegeList = Field(default_factory=CollegeList)
    profile_summary: str = ""
    application_strategies: ApplicationStrategies = Field(default_factory=ApplicationStrategies)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Profile":
        return cls.model_validate(doc)


def new_profile(user_id: str, name: str, password_hash: str) -> Profile:
    """Return a profile with only identity fields populated."""
    return Profile(user_id=user_id, name=name, password=password_hash)
