"""Typed parsing of workflow outputs.

Workflows return every output as a string; structured outputs are JSON
encoded inside that string. A missing field, undecodable JSON or a value
of the wrong shape raises :class:`ParseError` instead of being coerced.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, Type, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..errors import ParseError

T = TypeVar("T")

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n(.*?)\n?```$", re.DOTALL)


def _snippet(raw: str) -> str:
    return raw[:300].replace("\n", "\\n")


def strip_code_fence(raw: str) -> str:
    raw = (raw or "").strip()
    m = _FENCE_RE.match(raw)
    return m.group(1).strip() if m else raw


def require_text(outputs: Mapping[str, Any], field: str) -> str:
    value = outputs.get(field) if isinstance(outputs, Mapping) else None
    if not isinstance(value, str) or not value.strip():
        raise ParseError("Missing or empty text output", field=field)
    return value


def parse_json_field(outputs: Mapping[str, Any], field: str, type_: Type[T]) -> T:
    """Decode ``outputs[field]`` as JSON and validate it against ``type_``.

    Already-decoded values (some backends return structured outputs as real
    JSON) are validated directly.
    """
    if not isinstance(outputs, Mapping) or field not in outputs:
        raise ParseError("Missing output", field=field)

    value = outputs[field]
    if isinstance(value, str):
        raw = strip_code_fence(value)
        if not raw:
            raise ParseError("Empty output (expected JSON)", field=field)
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON: {e.msg}", field=field, position=e.pos, snippet=_snippet(raw)) from e

    try:
        return TypeAdapter(type_).validate_python(value)
    except PydanticValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ())) or "<root>"
        raise ParseError(
            f"Unexpected structure at {where}: {first.get('msg', 'invalid value')}",
            field=field,
            snippet=_snippet(json.dumps(value, ensure_ascii=False, default=str)),
        ) from e
