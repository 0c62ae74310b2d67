from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Case-insensitive category tag -> bucket. Anything else is dropped.
CATEGORY_BUCKETS: Dict[str, str] = {
    "reach": "reach",
    "target": "target",
    "likely": "likely",
    "safety": "likely",
}


class GeneratedSchool(BaseModel):
    name: str = Field(..., min_length=1)
    category: str = Field(..., description="Reach / Target / Likely (or Safety)")


class StrategiesOutput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    early_decision: List[str]
    early_action: List[str]
    strengths_to_highlight: Dict[str, str]


def bucket_for(category: str) -> Optional[str]:
    return CATEGORY_BUCKETS.get((category or "").strip().lower())
