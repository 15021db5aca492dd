"""Extract JSON payloads from model replies."""

from __future__ import annotations

import json
import re

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)\n?```", re.DOTALL)


def extract_json(text: str) -> dict | list:
    """Parse the JSON object or array carried by a model reply.

    Tries, in order: the whole text, the first fenced code block, the span
    from the first opening bracket to its last closing counterpart, and
    finally a truncated suggestion array cut back to its last complete item.
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("Could not extract JSON from empty text")

    candidates = [text]
    fence = _FENCE_RE.search(text)
    if fence:
        candidates.append(fence.group(1).strip())

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            pass
        result = _outermost(candidate)
        if result is not None:
            return result

    result = _salvage_truncated(candidates[-1])
    if result is not None:
        return result

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")


def _outermost(text: str) -> dict | list | None:
    """Parse from the first '{' or '[' to the last matching closer."""
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)
    closer = "}" if text[start] == "{" else "]"
    end = text.rfind(closer)
    if end <= start:
        return None
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return None


def _salvage_truncated(text: str) -> dict | list | None:
    """Recover the complete items of an array cut off mid-item.

    Cuts after the last '}' and closes any brackets still open, which turns
    ``{"suggestions": [{...}, {...}, {"orig`` into a valid document holding
    the first two items.
    """
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    body = text[min(starts):]

    cut = body.rfind("}")
    while cut > 0:
        head = body[:cut + 1]
        stack: list[str] = []
        in_string = False
        escaped = False
        for ch in head:
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch in "{[":
                stack.append("}" if ch == "{" else "]")
            elif ch in "}]" and stack:
                stack.pop()
        if not in_string:
            try:
                return json.loads(head + "".join(reversed(stack)))
            except json.JSONDecodeError:
                pass
        cut = body.rfind("}", 0, cut)
    return None
