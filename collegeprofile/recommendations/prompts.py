"""Text inputs for the recommendation workflows."""

from ..profile.schemas import BUCKETS, CollegeList

_HEADERS = {"reach": "Reach", "target": "Target", "likely": "Likely"}


def build_college_listing(college_list: CollegeList) -> str:
    """School names grouped under Reach/Target/Likely headers."""
    sections = []
    for bucket in BUCKETS:
        lines = [f"{_HEADERS[bucket]}:"]
        lines += [f"- {c.name}" for c in college_list.bucket(bucket)]
        sections.append("\n".join(lines))
    return "\n\n".join(sections)
