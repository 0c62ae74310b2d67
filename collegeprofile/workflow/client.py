"""HTTP client for the hosted AI workflows.

Each workflow is a black box: one blocking round trip that takes a mapping
of string inputs and answers ``{"data": {"outputs": {...}}}``. Interpreting
the outputs is left to the call sites (see :mod:`.parsing`).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from ..errors import ParseError, UpstreamError, ValidationError
from .config import WorkflowSettings, load_settings

logger = logging.getLogger(__name__)


class DifyWorkflowClient:
    def __init__(
        self,
        settings: Optional[WorkflowSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.http_client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(self.settings.timeout_s))

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def invoke(
        self,
        endpoint: str,
        credential: str,
        inputs: Mapping[str, str],
        user: str,
    ) -> Dict[str, Any]:
        """POST one blocking workflow run and return its ``outputs`` mapping."""
        body = {"inputs": dict(inputs), "response_mode": "blocking", "user": user}
        headers = {"Authorization": f"Bearer {credential}", "Content-Type": "application/json"}

        try:
            resp = await self.http_client.post(endpoint, json=body, headers=headers)
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Workflow call timed out: {endpoint}") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Workflow call failed: {e}") from e

        if resp.status_code >= 400:
            snippet = resp.text[:300].replace("\n", "\\n")
            raise UpstreamError(
                f"Workflow returned HTTP {resp.status_code}: {snippet}",
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise ParseError("Workflow response is not JSON", snippet=resp.text[:300]) from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if isinstance(data, dict) and data.get("status") not in (None, "succeeded"):
            raise UpstreamError(f"Workflow run {data.get('status')}: {data.get('error') or 'no details'}")

        outputs = data.get("outputs") if isinstance(data, dict) else None
        if not isinstance(outputs, dict):
            raise ParseError("Workflow response has no outputs mapping", field="data.outputs")
        return outputs

    async def run(self, workflow: str, inputs: Mapping[str, str], user: str) -> Dict[str, Any]:
        credential = self.settings.credential_for(workflow)
        if not credential:
            raise ValidationError(f"No credential configured for workflow {workflow!r}")
        logger.info("Running workflow %s for %s", workflow, user)
        return await self.invoke(self.settings.url, credential, inputs, user)
