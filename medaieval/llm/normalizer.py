"""
Response normalization for LLM replies.

Providers are asked for a single JSON document but do not always comply:
replies arrive wrapped in prose, fenced as markdown, or not structured at
all. ``normalize`` runs a fixed, ordered list of recovery strategies and
returns one of three variants:

- ``StructuredDocument`` - a JSON object was recovered
- ``ListDocument`` - a JSON array was recovered
- ``Unparsed`` - nothing parseable; the raw text is carried verbatim so the
  caller can attempt its own domain-specific extraction
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")
_ARRAY_SPAN = re.compile(r"\[[\s\S]*\]")


class StructuredDocument(BaseModel):
    value: dict[str, Any]


class ListDocument(BaseModel):
    values: list[Any]


class Unparsed(BaseModel):
    raw_text: str


Normalized = Union[StructuredDocument, ListDocument, Unparsed]


def _as_document(parsed: Any) -> Optional[Normalized]:
    if isinstance(parsed, dict):
        return StructuredDocument(value=parsed)
    if isinstance(parsed, list):
        return ListDocument(values=parsed)
    # Bare scalars ("42", "null") are not documents
    return None


def parse_document(text: str) -> Optional[Normalized]:
    """Strict JSON parse; None when ``text`` is not a JSON object or array."""
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return _as_document(parsed)


def _strict(raw: str) -> Optional[Normalized]:
    return parse_document(raw.strip())


def _fenced(raw: str) -> Optional[Normalized]:
    for match in _FENCED_BLOCK.finditer(raw):
        doc = parse_document(match.group(1))
        if doc is not None:
            return doc
    return None


def _outermost_span(raw: str) -> Optional[Normalized]:
    spans = [m for m in (_OBJECT_SPAN.search(raw), _ARRAY_SPAN.search(raw)) if m]
    for match in sorted(spans, key=lambda m: m.start()):
        doc = parse_document(match.group(0))
        if doc is not None:
            return doc
    return None


STRATEGIES: tuple[tuple[str, Callable[[str], Optional[Normalized]]], ...] = (
    ("strict", _strict),
    ("fenced", _fenced),
    ("outermost_span", _outermost_span),
)


def normalize(raw: str) -> Normalized:
    for name, strategy in STRATEGIES:
        doc = strategy(raw)
        if doc is not None:
            if name != "strict":
                logger.debug(f"Recovered JSON document using '{name}' strategy")
            return doc

    logger.warning(f"No JSON document found in reply ({len(raw)} chars); returning raw text")
    return Unparsed(raw_text=raw)
