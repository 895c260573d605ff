"""
Response Parser for AgentFit

Turns raw completion text into validated data. Models wrap JSON in
prose and code fences, leave trailing commas, put raw newlines inside
strings and get cut off at the token ceiling; each of those is handled
by an explicit extraction strategy, tried in order:

1. fenced ```json block
2. any fenced block
3. first balanced {...} object (string-aware), sanitized
4. text trimmed to the outermost braces, sanitized
5. truncated-reply repair
"""

import json
import logging
import re
from typing import Any, Iterator

from pydantic import BaseModel, ValidationError

from agentfit.core.errors import ResponseValidationError
from agentfit.prompts.base import ResponseShape

logger = logging.getLogger(__name__)

FENCED_JSON_PATTERN = re.compile(r"```json\s*(.*?)\s*```", re.IGNORECASE | re.DOTALL)
ANY_FENCE_PATTERN = re.compile(r"```\s*(.*?)\s*```", re.DOTALL)
TRAILING_COMMA_PATTERN = re.compile(r",\s*([}\]])")

UPDATED_DOCUMENT_PATTERN = re.compile(r"UPDATED_RESUME:\s*(.*?)\s*CHANGE_SUMMARY:", re.IGNORECASE | re.DOTALL)
CHANGE_SUMMARY_PATTERN = re.compile(r"CHANGE_SUMMARY:\s*(.*)$", re.IGNORECASE | re.DOTALL)


# ============================================================================
# JSON EXTRACTION
# ============================================================================

def parse_json_response(content: str) -> dict[str, Any]:
    """
    Extract a JSON object from a model reply.

    Raises:
        ResponseValidationError: If no strategy yields a JSON object
    """
    if not content or not content.strip():
        raise ResponseValidationError("Empty reply")

    for candidate in _json_candidates(content):
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    repaired = repair_truncated_json(content)
    if repaired is not None:
        logger.info("Repaired truncated JSON reply")
        return repaired

    raise ResponseValidationError(f"Reply is not a JSON object: {content[:120]!r}")


def _json_candidates(content: str) -> Iterator[str]:
    fenced = FENCED_JSON_PATTERN.search(content)
    if fenced:
        yield fenced.group(1).strip()

    any_fence = ANY_FENCE_PATTERN.search(content)
    if any_fence:
        yield any_fence.group(1).strip()

    balanced = extract_balanced_json(content)
    if balanced:
        yield sanitize_json_string(balanced)

    first, last = content.find("{"), content.rfind("}")
    if first != -1 and last > first:
        yield sanitize_json_string(content[first:last + 1])


def extract_balanced_json(text: str) -> str | None:
    """
    Return the first balanced {...} object, ignoring braces inside strings.

    When the object never closes, the text up to the last nested closing
    brace is returned with the missing outer braces appended.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape = False
    last_valid_end = -1

    for i in range(start, len(text)):
        ch = text[i]
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
            if depth > 0:
                last_valid_end = i

    if depth > 0 and last_valid_end > start:
        return text[start:last_valid_end + 1] + "}" * (depth - 1)

    return None


def sanitize_json_string(json_like: str) -> str:
    """
    Fix common model JSON defects.

    - trailing commas before } or ]
    - raw newlines inside string literals
    - a string left open at the end of the text
    """
    s = TRAILING_COMMA_PATTERN.sub(r"\1", json_like)

    out: list[str] = []
    in_string = False
    escape = False
    for ch in s:
        if escape:
            out.append(ch)
            escape = False
            continue
        if ch == "\\":
            out.append(ch)
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            out.append(ch)
            continue
        if in_string and ch in "\r\n":
            out.append("\\n")
            continue
        out.append(ch)

    if in_string:
        out.append('"')

    return "".join(out)


def repair_truncated_json(content: str) -> dict[str, Any] | None:
    """
    Recover a reply cut off at the token ceiling.

    First drops the incomplete trailing property (cut back to the last
    comma), then falls back to closing whatever is still open.
    """
    start = content.find("{")
    if start == -1:
        return None

    fragment = content[start:].rstrip()
    if fragment.endswith("}"):
        candidates = [fragment]
    else:
        candidates = []
        last_comma = fragment.rfind(",")
        if last_comma > 0:
            candidates.append(fragment[:last_comma])
        candidates.append(fragment.rstrip(","))

    for candidate in candidates:
        try:
            data = json.loads(_close_open_structures(sanitize_json_string(candidate)))
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    return None


def _close_open_structures(s: str) -> str:
    stack: list[str] = []
    in_string = False
    escape = False
    for ch in s:
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch in "{[":
            stack.append("}" if ch == "{" else "]")
        elif ch in "}]" and stack:
            stack.pop()

    if in_string:
        s += '"'
    s = s.rstrip().rstrip(",")
    if s.endswith(":"):
        s += " null"
    return s + "".join(reversed(stack))


# ============================================================================
# TEXT AND SECTIONED REPLIES
# ============================================================================

def clean_text_response(content: str) -> str:
    """Strip code fence markers and collapse runs of blank lines."""
    cleaned = re.sub(r"```\w*\n?", "", content)
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    return cleaned.strip()


def parse_sectioned_response(content: str) -> dict[str, str]:
    """
    Split an UPDATED_RESUME / CHANGE_SUMMARY reply.

    Returns only the sections that were found.
    """
    sections: dict[str, str] = {}

    document = UPDATED_DOCUMENT_PATTERN.search(content)
    if document and document.group(1).strip():
        updated = document.group(1).strip()
        if updated.startswith("**"):
            updated = updated[2:]
        if updated.endswith("**"):
            updated = updated[:-2]
        sections["updated_document"] = updated.strip()

    summary = CHANGE_SUMMARY_PATTERN.search(content)
    if summary:
        sections["change_summary"] = summary.group(1).strip().strip("*").strip()

    return sections


# ============================================================================
# VALIDATION
# ============================================================================

def validate_reply(data: Any, response_model: type[BaseModel]) -> BaseModel:
    """
    Validate parsed data against a reply schema.

    Raises:
        ResponseValidationError: If the data does not conform
    """
    try:
        return response_model.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()[:5]
        )
        raise ResponseValidationError(f"{response_model.__name__} validation failed: {errors}") from e


def parse_reply(
    content: str,
    shape: ResponseShape,
    response_model: type[BaseModel] | None = None,
) -> Any:
    """
    Parse a reply according to its declared shape.

    Returns:
        Cleaned text for TEXT replies without a schema, otherwise a dict
        (snake_case keys once validated against the schema)
    """
    if shape == ResponseShape.JSON:
        data: Any = parse_json_response(content)
    elif shape == ResponseShape.SECTIONED:
        data = parse_sectioned_response(content)
    else:
        data = clean_text_response(content)
        if not data:
            raise ResponseValidationError("Empty reply")
        if response_model is None:
            return data

    if response_model is None:
        return data
    return validate_reply(data, response_model).model_dump()
