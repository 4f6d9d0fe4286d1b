"""Pick the sentences of a document that are worth turning into questions."""
from __future__ import annotations

import re
from collections.abc import Iterable

# Sentence-ending punctuation stays attached to its sentence
SENTENCE_END_RE = re.compile(r"(?<=[.!?])\s+")


def split_sentences(content: str) -> list[str]:
    return [s.strip() for s in SENTENCE_END_RE.split(content) if s.strip()]


def matched_keywords(sentence: str, keywords: Iterable[str]) -> list[str]:
    """Keywords contained in *sentence*, case-insensitively, without repeats."""
    lower = sentence.lower()
    found: list[str] = []
    seen: set[str] = set()
    for kw in keywords:
        kw_lower = kw.lower()
        if kw_lower and kw_lower not in seen and kw_lower in lower:
            seen.add(kw_lower)
            found.append(kw)
    return found


def select_sentences(
    content: str | None,
    keywords: Iterable[str] | None,
    *,
    min_length: int = 20,
) -> list[str]:
    """Return sentences containing at least one keyword, most keywords first.

    Sentences of *min_length* characters or fewer are dropped.  Ties keep
    their order in the text.
    """
    if not isinstance(content, str) or not content.strip() or not keywords:
        return []
    keyword_list = [k for k in keywords if k]
    if not keyword_list:
        return []

    scored: list[tuple[int, str]] = []
    for sentence in split_sentences(content):
        if len(sentence) <= min_length:
            continue
        count = len(matched_keywords(sentence, keyword_list))
        if count:
            scored.append((count, sentence))

    scored.sort(key=lambda item: item[0], reverse=True)
    return [sentence for _, sentence in scored]
