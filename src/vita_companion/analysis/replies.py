# src/vita_companion/analysis/replies.py

"""Helpers for turning free-form model replies into JSON payloads."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from ..core.errors import ModelReplyError
from ..core.ports import LLMClient
from ..llm.client import complete_text

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[a-zA-Z]*\n?")
_NUMBER_RE = re.compile(r"\d+(?:[.,]\d+)?")


def strip_code_fences(raw: str) -> str:
    return _FENCE_RE.sub("", raw or "").strip()


def extract_json_object(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("{") and raw.endswith("}"):
        return raw
    first = raw.find("{")
    last = raw.rfind("}")
    if first != -1 and last != -1 and last > first:
        return raw[first : last + 1]
    return raw


def parse_json_reply(raw: str) -> dict[str, Any]:
    """Parse a model reply that should contain one JSON object."""
    cleaned = extract_json_object(strip_code_fences(raw))
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ModelReplyError("model reply is not valid JSON", raw=raw) from e
    if not isinstance(data, dict):
        raise ModelReplyError("model reply is not a JSON object", raw=raw)
    return data


def ask_json(llm: LLMClient, prompt: str, system_prompt: str = "") -> dict[str, Any]:
    raw = complete_text(llm, prompt, system_prompt)
    if not raw:
        raise ModelReplyError("model returned an empty reply")
    try:
        return parse_json_reply(raw)
    except ModelReplyError:
        logger.warning("Model JSON parse failed. Raw=%r", raw[:2000])
        raise


def to_int(value: Any) -> int | None:
    """
    Normalise a model-provided quantity.

    "350" -> 350, "30 minutes" -> 30, "300-400" -> 350, "unknown" -> None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(round(value))
    nums = [float(n.replace(",", ".")) for n in _NUMBER_RE.findall(str(value))]
    if not nums:
        return None
    if len(nums) >= 2 and "-" in str(value):
        return int(round((nums[0] + nums[1]) / 2))
    return int(round(nums[0]))


def clean_str(value: Any) -> str:
    if value is None:
        return ""
    s = str(value).strip()
    return "" if s.lower() in {"unknown", "null", "none"} else s
