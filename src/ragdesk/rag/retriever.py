"""Grounding ladder and bounded context assembly.

Ladder (first rung that applies wins):
  NO_MATCHES   → the index returned nothing; answer with the fallback template
  CONFIDENT    → matches with similarity >= threshold
  BEST_EFFORT  → nothing passes the threshold; use every returned match

Context blocks keep index order (best first):
  [Source: {document_name or 'Document'}]
  {text}

A block that would push the context past the character budget stops
assembly; later blocks are not considered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ragdesk.db.models import SearchResult

DEFAULT_SOURCE_NAME = "Document"


class GroundingRung(str, Enum):
    NO_MATCHES = "no_matches"
    CONFIDENT = "confident"
    BEST_EFFORT = "best_effort"


@dataclass
class Grounding:
    rung: GroundingRung
    matches: list[SearchResult] = field(default_factory=list)


@dataclass
class AssembledContext:
    text: str = ""
    included: list[SearchResult] = field(default_factory=list)


def select_grounding(matches: list[SearchResult], threshold: float) -> Grounding:
    """Pick the ladder rung for *matches* and the matches it grounds on."""
    if not matches:
        return Grounding(GroundingRung.NO_MATCHES)
    confident = [m for m in matches if m.similarity >= threshold]
    if confident:
        return Grounding(GroundingRung.CONFIDENT, confident)
    return Grounding(GroundingRung.BEST_EFFORT, list(matches))


def format_block(result: SearchResult) -> str:
    name = result.document_name or DEFAULT_SOURCE_NAME
    return f"[Source: {name}]\n{result.text}\n\n"


def assemble_context(matches: list[SearchResult], budget: int) -> AssembledContext:
    """Concatenate attributed blocks up to *budget* characters.

    Args:
        matches: Grounding matches, in ranking order.
        budget: Maximum context length in characters.

    Returns:
        AssembledContext with the trimmed text and the matches that made it in.
    """
    parts: list[str] = []
    included: list[SearchResult] = []
    length = 0
    for match in matches:
        block = format_block(match)
        if length + len(block) > budget:
            break
        parts.append(block)
        included.append(match)
        length += len(block)
    return AssembledContext(text="".join(parts).strip(), included=included)


def extract_sources(results: list[SearchResult]) -> list[str]:
    """Distinct non-empty document names, in first-seen order."""
    seen: dict[str, None] = {}
    for result in results:
        name = result.document_name
        if name:
            seen.setdefault(name, None)
    return list(seen)
