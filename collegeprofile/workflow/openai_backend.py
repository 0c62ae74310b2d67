"""Run the workflows directly on the OpenAI Responses API.

Same contract as :class:`DifyWorkflowClient.run`: string inputs in, a
mapping of string outputs back. Each workflow is asked for a strict JSON
object holding exactly its one output field.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

import httpx
from openai import AsyncOpenAI, OpenAIError

from ..errors import ParseError, UpstreamError, ValidationError
from .config import WorkflowSettings, load_settings
from .prompts import INSTRUCTIONS, OUTPUT_FIELDS

logger = logging.getLogger(__name__)


def get_openai_client(settings: WorkflowSettings, api_key: Optional[str] = None) -> AsyncOpenAI:
    """Return an async OpenAI client with an explicit request timeout.

    The SDK already respects OPENAI_API_KEY; this only centralizes
    construction so tests can pass their own client.
    """
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.timeout_s))

    if api_key is not None:
        return AsyncOpenAI(api_key=api_key, http_client=http_client)
    return AsyncOpenAI(http_client=http_client)


def _output_schema(field: str) -> Dict[str, Any]:
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": {field: {"type": "string"}},
        "required": [field],
    }


def _extract_first_message_text(resp: Any) -> str:
    """Pull the first assistant message text chunk deterministically."""
    t = getattr(resp, "output_text", None)
    if isinstance(t, str) and t.strip():
        return t.strip()

    # Depending on SDK version, items may be objects or plain dicts.
    output = getattr(resp, "output", None)
    if output is None and isinstance(resp, dict):
        output = resp.get("output")

    for item in output or []:
        item_type = item.get("type") if isinstance(item, dict) else getattr(item, "type", None)
        if item_type != "message":
            continue

        content = item.get("content") if isinstance(item, dict) else getattr(item, "content", None)
        for c in content or []:
            c_type = c.get("type") if isinstance(c, dict) else getattr(c, "type", None)
            if c_type not in ("output_text", "text"):
                continue
            text = c.get("text") if isinstance(c, dict) else getattr(c, "text", None)
            if isinstance(text, str) and text.strip():
                return text.strip()

    return ""


class OpenAIWorkflowBackend:
    def __init__(
        self,
        settings: Optional[WorkflowSettings] = None,
        client: Any = None,
        max_output_tokens: int = 1200,
    ) -> None:
        self.settings = settings or load_settings()
        self.client = client or get_openai_client(self.settings)
        self.max_output_tokens = max_output_tokens

    async def aclose(self) -> None:
        await self.client.close()

    async def run(self, workflow: str, inputs: Mapping[str, str], user: str) -> Dict[str, Any]:
        if workflow not in INSTRUCTIONS:
            raise ValidationError(f"Unknown workflow: {workflow!r}")
        field = OUTPUT_FIELDS[workflow]

        logger.info("Running workflow %s for %s on %s", workflow, user, self.settings.model)
        try:
            resp = await self.client.responses.create(
                model=self.settings.model,
                instructions=INSTRUCTIONS[workflow],
                input=[{"role": "user", "content": json.dumps(dict(inputs), ensure_ascii=False)}],
                text={
                    "format": {
                        "type": "json_schema",
                        "name": f"collegeprofile_{workflow}",
                        "strict": True,
                        "schema": _output_schema(field),
                    }
                },
                max_output_tokens=self.max_output_tokens,
                store=False,
            )
        except (OpenAIError, httpx.HTTPError) as e:
            raise UpstreamError(f"OpenAI call failed for workflow {workflow!r}: {e}") from e

        raw = _extract_first_message_text(resp)
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            snippet = raw[:300].replace("\n", "\\n")
            raise ParseError("Failed to parse model JSON", field=field, position=e.pos, snippet=snippet) from e
        if not isinstance(data, dict):
            raise ParseError("Model output is not a JSON object", field=field)
        return data
