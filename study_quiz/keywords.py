"""Frequency-based keyword extraction.

A keyword is a lower-cased token that survives the stop-word, length,
numeral and frequency filters.  Keywords are ranked by
``frequency * min(len(word) / length_divisor, length_cap)`` so that longer,
more domain-specific terms outrank short common ones at equal frequency.
"""
from __future__ import annotations

import logging
import re
from collections import Counter

from study_quiz.models import Keyword

_log = logging.getLogger("study_quiz.keywords")

# Letters and digits, with hyphens only between them ("cell-wall", not "-cell")
TOKEN_RE = re.compile(r"[^\W_]+(?:-[^\W_]+)*")

STOP_WORDS = frozenset("""
    the be to of and a in that have i it for not on with he as you do at
    this but his by from they we say her she or an will my one all would
    there their what so up out if about who get which go me when make can
    like time no just him know take people into year your good some could
    them see other than then now look only come its over think also back
    after use two how our work first well way even new want because any
    these give day most us is was are been has had were said did having
    may should does being
""".split())


def tokenize(content: str) -> list[str]:
    """Lower-case *content* and split it into word tokens."""
    return TOKEN_RE.findall(content.lower())


def _is_numeral(token: str) -> bool:
    return token.replace("-", "").isdigit()


def extract_keywords(
    content: str | None,
    *,
    min_length: int = 4,
    max_keywords: int = 20,
    min_frequency: int = 2,
    length_divisor: float = 10.0,
    length_cap: float = 1.5,
) -> list[Keyword]:
    """Return the top *max_keywords* keywords of *content*, best first.

    Empty, whitespace-only or non-string input gives an empty list.
    """
    if not isinstance(content, str) or not content.strip():
        return []

    counts = Counter(
        tok for tok in tokenize(content)
        if len(tok) >= min_length
        and tok not in STOP_WORDS
        and not _is_numeral(tok)
    )

    keywords = [
        Keyword(
            word=word,
            frequency=freq,
            score=freq * min(len(word) / length_divisor, length_cap),
        )
        for word, freq in counts.items()
        if freq >= min_frequency
    ]
    # sorted() is stable, so equal scores keep first-appearance order
    keywords = sorted(keywords, key=lambda k: k.score, reverse=True)[:max_keywords]
    _log.debug("Extracted %d keywords from %d distinct tokens", len(keywords), len(counts))
    return keywords
