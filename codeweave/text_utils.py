"""Text helpers: keyword extraction, id generation and truncation."""

import random
import re
import string
import time
from typing import List, Optional

MAX_KEYWORDS = 20
MIN_KEYWORD_LENGTH = 3

STOP_WORDS = frozenset({
    "the", "and", "for", "with", "this", "that", "from", "have",
    "are", "was", "were", "been", "has", "had", "will", "would",
    "could", "should", "can", "may", "might", "must", "shall",
})

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_BASE36 = string.digits + string.ascii_lowercase


def extract_keywords(text: Optional[str]) -> List[str]:
    """Return up to 20 unique lowercase keywords in first-occurrence order."""
    if not text:
        return []

    words = _NON_ALNUM.sub(" ", text.lower()).split()

    keywords: List[str] = []
    seen = set()
    for word in words:
        if len(word) < MIN_KEYWORD_LENGTH or word in STOP_WORDS or word in seen:
            continue
        seen.add(word)
        keywords.append(word)
        if len(keywords) == MAX_KEYWORDS:
            break
    return keywords


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id(prefix: str = "") -> str:
    """Build a sortable id like ``conv_lx3k9a2b_4f8q1zt``."""
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36, k=7))
    return f"{prefix}_{timestamp}_{suffix}" if prefix else f"{timestamp}_{suffix}"


def truncate_text(text: Optional[str], max_length: int = 1000) -> Optional[str]:
    if not text or len(text) <= max_length:
        return text
    return text[:max_length] + "..."
