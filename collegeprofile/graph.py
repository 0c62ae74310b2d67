"""LangGraph pipeline running every recommendation step for one student.

load_profile -> college_list -> backfill_reasons -> strategies

Each node hands the updated profile copy to the next one. The first
failure stops the pipeline with ``error``/``error_kind`` set; whatever the
earlier nodes stored stays stored.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, TypedDict

from langgraph.graph import END, StateGraph

from .errors import CollegeProfileError, NotFoundError
from .profile.schemas import Profile
from .profile.storage import ProfileStore
from .recommendations.orchestrator import RecommendationOrchestrator

logger = logging.getLogger(__name__)


class GraphState(TypedDict, total=False):
    user_id: str
    profile: Optional[Profile]
    college_list: Optional[Dict[str, Any]]
    application_strategies: Optional[Dict[str, Any]]
    reasons_timeout_s: Optional[float]
    error: Optional[str]
    error_kind: Optional[str]


def _failed(state: GraphState, node: str, e: CollegeProfileError) -> GraphState:
    logger.error("Node %s failed for %s (%s): %s", node, state.get("user_id"), e.kind, e)
    return {**state, "error": str(e), "error_kind": e.kind}


def _next_or_end(next_node: str) -> Callable[[GraphState], str]:
    def route(state: GraphState) -> str:
        return END if state.get("error") else next_node

    return route


def build_recommendation_graph(orchestrator: RecommendationOrchestrator, store: Optional[ProfileStore] = None):
    """Compile the pipeline; profiles are loaded from ``store`` (the orchestrator's by default)."""
    if store is None:
        store = orchestrator.store

    async def load_profile_node(state: GraphState) -> GraphState:
        user_id = state["user_id"]
        logger.info("Loading profile for %s", user_id)
        profile = await asyncio.to_thread(store.find_by_key, user_id)
        if profile is None:
            return _failed(state, "load_profile", NotFoundError(f"Profile not found: {user_id}"))
        return {**state, "profile": profile}

    async def college_list_node(state: GraphState) -> GraphState:
        logger.info("Entering College List Node")
        try:
            college_list, profile = await orchestrator.generate_college_list(state["profile"])
        except CollegeProfileError as e:
            return _failed(state, "college_list", e)
        return {**state, "profile": profile, "college_list": college_list.model_dump(mode="json", by_alias=True)}

    async def backfill_reasons_node(state: GraphState) -> GraphState:
        logger.info("Entering Reasons Backfill Node")
        try:
            profile = await orchestrator.backfill_all_reasons(
                state["profile"], timeout_s=state.get("reasons_timeout_s")
            )
        except CollegeProfileError as e:
            return _failed(state, "backfill_reasons", e)
        return {
            **state,
            "profile": profile,
            "college_list": profile.college_list.model_dump(mode="json", by_alias=True),
        }

    async def strategies_node(state: GraphState) -> GraphState:
        logger.info("Entering Strategies Node")
        try:
            strategies, profile = await orchestrator.generate_strategies(state["profile"])
        except CollegeProfileError as e:
            return _failed(state, "strategies", e)
        return {
            **state,
            "profile": profile,
            "application_strategies": strategies.model_dump(mode="json", by_alias=True),
        }

    workflow = StateGraph(GraphState)
    workflow.add_node("load_profile", load_profile_node)
    workflow.add_node("college_list", college_list_node)
    workflow.add_node("backfill_reasons", backfill_reasons_node)
    workflow.add_node("strategies", strategies_node)

    workflow.set_entry_point("load_profile")
    for node, next_node in (
        ("load_profile", "college_list"),
        ("college_list", "backfill_reasons"),
        ("backfill_reasons", "strategies"),
    ):
        workflow.add_conditional_edges(node, _next_or_end(next_node), {next_node: next_node, END: END})
    workflow.add_edge("strategies", END)

    return workflow.compile()


async def run_recommendation_pipeline(
    orchestrator: RecommendationOrchestrator,
    user_id: str,
    reasons_timeout_s: Optional[float] = None,
    store: Optional[ProfileStore] = None,
) -> GraphState:
    app = build_recommendation_graph(orchestrator, store)
    return await app.ainvoke({"user_id": user_id, "reasons_timeout_s": reasons_timeout_s})
