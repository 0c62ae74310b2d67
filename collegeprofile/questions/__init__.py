"""Static questionnaire catalog served to the questionnaire screens."""

from .catalog import ALL_QUESTIONS, CATEGORIES, find_question, get_questions

__all__ = ["ALL_QUESTIONS", "CATEGORIES", "find_question", "get_questions"]
