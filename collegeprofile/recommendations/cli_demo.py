"""Minimal CLI demo for the recommendation pipeline.

Not production-facing: runs college list -> reasons -> strategies for one
profile stored in the JSON file store and prints the outcome.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from ..graph import run_recommendation_pipeline
from ..profile.storage import JsonFileProfileStore
from ..workflow import get_workflow_backend
from .orchestrator import RecommendationOrchestrator


async def run_demo(user_id: str, path: str = "data/profiles.json") -> int:
    store = JsonFileProfileStore(path)
    backend = get_workflow_backend()
    orchestrator = RecommendationOrchestrator(store, backend)

    try:
        result = await run_recommendation_pipeline(orchestrator, user_id, reasons_timeout_s=600)
    finally:
        await backend.aclose()

    if result.get("error"):
        print(f"Pipeline stopped ({result.get('error_kind')}): {result['error']}")
        return 1

    college_list = result.get("college_list") or {}
    for bucket in ("reach", "target", "likely"):
        print(f"\n=== {bucket.upper()} ===")
        for college in college_list.get(bucket) or []:
            print(f"- {college['name']}")
            for reason in college.get("reasons") or []:
                print(f"    * {reason}")

    strategies = result.get("application_strategies") or {}
    print("\n=== STRATEGY ===")
    print("Early Decision: " + (", ".join(strategies.get("earlyDecision") or []) or "-"))
    print("Early Action: " + (", ".join(strategies.get("earlyAction") or []) or "-"))
    for strength, how in (strategies.get("strengthsToHighlight") or {}).items():
        print(f"{strength}: {how}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    user = sys.argv[1] if len(sys.argv) > 1 else "test_user"
    sys.exit(asyncio.run(run_demo(user)))
