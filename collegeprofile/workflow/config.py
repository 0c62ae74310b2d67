"""Workflow endpoint configuration.

Environment variables are loaded from a ``.env`` file if present, using
``python-dotenv``, so API keys can live in ``.env`` during development.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from dotenv import load_dotenv


load_dotenv()


# Workflow names used by the core; each maps to its own credential.
PROFILE_SUMMARY = "profile_summary"
COLLEGE_LIST = "college_list"
WHY_REASONS = "why_reasons"
STRATEGIES = "strategies"
STRENGTHS = "strengths"

_CREDENTIAL_ENV = {
    PROFILE_SUMMARY: "PROFILE_SUMMARY_KEY",
    COLLEGE_LIST: "COLLEGE_LIST_KEY",
    WHY_REASONS: "WHY_REASONS_KEY",
    STRATEGIES: "STRATEGY_KEY",
    STRENGTHS: "STRENGTHS_KEY",
}

DEFAULT_MODEL = os.getenv("COLLEGEPROFILE_MODEL", "gpt-5.2")

# Default request timeout (seconds) to avoid hanging forever.
DEFAULT_TIMEOUT_S = float(os.getenv("COLLEGEPROFILE_TIMEOUT_S", "120"))


@dataclass(frozen=True)
class WorkflowSettings:
    """Where and how to reach the AI workflows."""

    backend: str = "dify"  # "dify" | "openai"
    url: str = "https://api.dify.ai/v1/workflows/run"
    credentials: Dict[str, str] = field(default_factory=dict)
    timeout_s: float = DEFAULT_TIMEOUT_S
    model: str = DEFAULT_MODEL

    def credential_for(self, workflow: str) -> Optional[str]:
        return self.credentials.get(workflow)


def load_settings() -> WorkflowSettings:
    credentials = {name: os.environ[env] for name, env in _CREDENTIAL_ENV.items() if os.getenv(env)}
    return WorkflowSettings(
        backend=os.getenv("COLLEGEPROFILE_WORKFLOW_BACKEND", "dify").strip().lower(),
        url=os.getenv("WORKFLOW_URL", WorkflowSettings.url),
        credentials=credentials,
        timeout_s=float(os.getenv("COLLEGEPROFILE_TIMEOUT_S", str(DEFAULT_TIMEOUT_S))),
        model=os.getenv("COLLEGEPROFILE_MODEL", DEFAULT_MODEL),
    )
