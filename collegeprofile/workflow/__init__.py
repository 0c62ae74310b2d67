"""AI workflow collaborators and typed parsing of their outputs."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol

from .client import DifyWorkflowClient
from .config import WorkflowSettings, load_settings
from .openai_backend import OpenAIWorkflowBackend


class WorkflowBackend(Protocol):
    async def run(self, workflow: str, inputs: Mapping[str, str], user: str) -> Dict[str, Any]:  # pragma: no cover - interface only
        ...

    async def aclose(self) -> None:  # pragma: no cover - interface only
        ...


def get_workflow_backend(settings: Optional[WorkflowSettings] = None) -> Any:
    settings = settings or load_settings()
    if settings.backend == "openai":
        return OpenAIWorkflowBackend(settings=settings)
    return DifyWorkflowClient(settings=settings)


__all__ = [
    "DifyWorkflowClient",
    "OpenAIWorkflowBackend",
    "WorkflowBackend",
    "WorkflowSettings",
    "get_workflow_backend",
    "load_settings",
]
