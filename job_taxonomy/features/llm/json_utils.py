"""Shared JSON parsing utilities for LLM response handling.

Provides robust decoding of JSON payloads from LLM output, handling
common issues like markdown fences, invalid escape sequences, and
extra text after the JSON payload.
"""

from __future__ import annotations

import json
import re


_BRACKET_PAIRS = {"{": "}", "[": "]"}
_INVALID_ESCAPE = re.compile(r'(?<!\\)\\(?!["\\/bfnrtu])')
_FENCED_BLOCK = re.compile(r"^```[\w-]*[ \t]*\n(.*?)\n?```$", re.DOTALL)


def fix_escape_sequences(text: str) -> str:
    """Double every backslash that does not start a valid JSON escape.

    Models echo Windows paths and regexes such as ``C:\\_data`` verbatim,
    which ``json.loads`` refuses.
    """
    return _INVALID_ESCAPE.sub(r"\\\\", text)


def try_parse_json(text: str) -> tuple[bool, object]:
    """Try to decode text as JSON, with escape-sequence fallback.

    Args:
        text: Raw JSON text from LLM response.

    Returns:
        Tuple of (decoded, value). ``value`` is None when not decoded.
    """
    for candidate in (text, fix_escape_sequences(text)):
        try:
            return True, json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return False, None


def extract_first_json_block(text: str) -> str | None:
    """Extract the first balanced ``{...}`` or ``[...]`` block from text.

    Handles the common "Extra data" error where the LLM wraps the payload
    in prose. Brackets inside JSON strings are skipped.

    Args:
        text: Raw text potentially containing a JSON object or array.

    Returns:
        Extracted block, or None if no balanced pair found.
    """
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None

    start = min(starts)
    opener = text[start]
    closer = _BRACKET_PAIRS[opener]
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def json_candidates(text: str) -> list[str]:
    """Generate candidate JSON strings to try parsing.

    Returns the full text first, then the first extracted block if it
    differs from the full text.

    Args:
        text: Raw text from LLM response.

    Returns:
        List of candidate strings to attempt parsing.
    """
    candidates = [text]
    extracted = extract_first_json_block(text)
    if extracted and extracted != text:
        candidates.append(extracted)
    return candidates


def strip_markdown_fences(text: str) -> str:
    """Unwrap a response enclosed in a markdown code fence.

    Unfenced or unterminated text comes back with only surrounding
    whitespace removed; block extraction handles the rest.
    """
    stripped = text.strip()
    match = _FENCED_BLOCK.match(stripped)
    return match.group(1).strip() if match else stripped


def decode_llm_json(text: str) -> tuple[bool, object]:
    """Decode an LLM response with all fallbacks applied.

    Args:
        text: Raw response text.

    Returns:
        Tuple of (decoded, value).
    """
    cleaned = strip_markdown_fences(text)
    for candidate in json_candidates(cleaned):
        decoded, value = try_parse_json(candidate)
        if decoded:
            return True, value
    return False, None
