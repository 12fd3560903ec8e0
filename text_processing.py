# text_processing.py (standard library only)
from __future__ import annotations
import re
from typing import List, Optional

_WORD_RE = re.compile(r"[a-z]{2,}")

STOP_WORDS = frozenset([
    "a", "an", "the", "is", "are", "was", "were", "be", "been", "being", "have", "has", "had",
    "do", "does", "did", "will", "would", "could", "should", "may", "might", "shall", "can",
    "and", "but", "or", "nor", "not", "no", "so", "if", "then", "than", "that", "this", "these",
    "those", "it", "its", "of", "in", "on", "at", "to", "for", "with", "by", "from", "about",
    "what", "which", "who", "how", "when", "where", "why", "i", "me", "my", "you", "your", "we",
])

# (suffix, minimum word length, characters stripped), checked in order
_SUFFIX_RULES = (
    ("ing", 7, 3),
    ("tion", 8, 4),
    ("ness", 8, 4),
    ("ment", 8, 4),
    ("ers", 7, 3),
    ("er", 6, 2),
    ("ed", 6, 2),
    ("ly", 6, 2),
    ("es", 6, 2),
    ("s", 5, 1),
)


def tokenize(text: Optional[str]) -> List[str]:
    """Lowercase, keep runs of two or more ASCII letters, drop stopwords."""
    if not text:
        return []
    return [w for w in _WORD_RE.findall(text.lower()) if w not in STOP_WORDS]


def stem_word(w: str) -> str:
    """Tiny heuristic suffix stripper. "charging", "charger" and "charged" all become "charg"."""
    if len(w) <= 4:
        return w
    for suffix, min_len, strip in _SUFFIX_RULES:
        if len(w) >= min_len and w.endswith(suffix):
            return w[:-strip]
    return w
