"""Core package for the college-counseling profile backend.

Exposes the profile service (questionnaire/tracker merges with summary
regeneration) and the recommendation orchestrator, both meant to sit
behind a thin web layer and a document store.
"""

from .profile.service import ProfileService  # re-export for convenience
from .recommendations.orchestrator import RecommendationOrchestrator

__all__ = ["ProfileService", "RecommendationOrchestrator"]
