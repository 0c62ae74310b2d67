"""Question catalog for the profile questionnaire.

Kept Python-native (dicts/lists) so the same objects can be returned by the
web layer as JSON and used by the answer merger to snapshot question text.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

from ..errors import NotFoundError

ALL_QUESTIONS: Dict[str, List[Dict[str, Any]]] = {
    "collegeMatch": [
        {
            "id": "q1",
            "question": "What type of college are you looking for?",
            "options": ["Public", "Private", "Community College", "Online"],
        },
        {
            "id": "q2",
            "question": "What size of college are you looking for?",
            "options": [
                "Small (under 5,000 students)",
                "Medium (5,000 - 15,000 students)",
                "Large (over 15,000 students)",
            ],
        },
        {
            "id": "q3",
            "question": "What is your preferred location?",
            "options": ["Urban", "Suburban", "Rural"],
        },
        {
            "id": "q4",
            "question": "What is your preferred region?",
            "options": ["Northeast", "Southeast", "Midwest", "West"],
        },
    ],
    "academics": [
        {
            "id": "a1",
            "question": "What is your GPA (on a 4.0 scale)?",
            "options": ["Below 3.0", "3.0 - 3.4", "3.5 - 3.7", "3.8 - 4.0"],
        },
        {
            "id": "a2",
            "question": "Have you taken any AP, IB, or Honors courses?",
            "options": ["Yes, many", "Yes, a few", "No"],
        },
        {
            "id": "a3",
            "question": "What is your intended major or field of study?",
            "options": [
                "STEM (Science, Tech, Engineering, Math)",
                "Humanities",
                "Arts",
                "Business",
                "Undecided",
            ],
        },
    ],
    "interests": [
        {
            "id": "i1",
            "question": "Which extracurricular activities are you involved in?",
            "options": ["Sports", "Music/Arts", "Volunteering", "Debate/Model UN", "STEM Club"],
        },
        {
            "id": "i2",
            "question": "What do you enjoy doing in your free time?",
            "options": [
                "Reading/Writing",
                "Gaming",
                "Coding/Building things",
                "Spending time outdoors",
                "Socializing",
            ],
        },
        {
            "id": "i3",
            "question": "What kind of campus environment appeals to you?",
            "options": [
                "A very social, spirited campus",
                "A quiet, studious atmosphere",
                "A politically active campus",
                "A diverse, multicultural environment",
            ],
        },
    ],
    "financial": [
        {
            "id": "f1",
            "question": "Do you intend to apply for financial aid?",
            "options": ["Yes", "No", "Unsure"],
        },
        {
            "id": "f2",
            "question": "What is your estimated annual household income?",
            "options": [
                "Less than $50,000",
                "$50,000 - $100,000",
                "$100,000 - $150,000",
                "More than $150,000",
            ],
        },
        {
            "id": "f3",
            "question": "Are you interested in work-study programs?",
            "options": ["Yes", "No", "Maybe"],
        },
    ],
}

CATEGORIES: tuple = tuple(ALL_QUESTIONS)


def _resolve_category(category: str) -> Optional[str]:
    # Route segments arrive lowercased ("collegematch").
    wanted = (category or "").strip().lower()
    for name in CATEGORIES:
        if name.lower() == wanted:
            return name
    return None


def get_questions(category: str) -> List[Dict[str, Any]]:
    """Return an independent copy of the questions for ``category``."""
    name = _resolve_category(category)
    if name is None:
        raise NotFoundError(f"Unknown questionnaire category: {category!r}")
    return copy.deepcopy(ALL_QUESTIONS[name])


def find_question(category: str, question_id: str) -> Optional[Dict[str, Any]]:
    for q in ALL_QUESTIONS.get(category) or []:
        if q["id"] == question_id:
            return q
    return None
