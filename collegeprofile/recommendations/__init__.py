"""AI-backed college list, why-reasons and application strategies."""

from .orchestrator import RecommendationOrchestrator

__all__ = ["RecommendationOrchestrator"]
