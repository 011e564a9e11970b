"""Locate a JSON object inside free-form LLM output."""
import re
from typing import Callable, Optional

_FENCED_JSON = re.compile(r"```json\s*\n(.*?)\n\s*```", re.DOTALL)
_FENCED_ANY = re.compile(r"```\s*\n(.*?)\n\s*```", re.DOTALL)
_BRACE_SPAN = re.compile(r"\{.*\}", re.DOTALL)


def from_fenced_json(text: str) -> Optional[str]:
    match = _FENCED_JSON.search(text)
    return match.group(1) if match else None


def from_fenced_block(text: str) -> Optional[str]:
    match = _FENCED_ANY.search(text)
    return match.group(1) if match else None


def from_brace_span(text: str) -> Optional[str]:
    # Greedy: first "{" to last "}"
    match = _BRACE_SPAN.search(text)
    return match.group(0) if match else None


EXTRACTION_STRATEGIES: list[Callable[[str], Optional[str]]] = [
    from_fenced_json,
    from_fenced_block,
    from_brace_span,
]


def extract_json_text(text: str) -> Optional[str]:
    """
    Return the first candidate JSON span found by the extraction strategies.

    Strategies are tried in order: ```json fence, bare ``` fence, then the
    widest {...} span. Returns None when none of them matches.
    """
    if not text:
        return None
    for strategy in EXTRACTION_STRATEGIES:
        candidate = strategy(text)
        if candidate is not None:
            return candidate.strip()
    return None
