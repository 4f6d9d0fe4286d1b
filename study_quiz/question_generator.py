"""Turn keyword-bearing sentences into fill-in-the-blank multiple-choice questions."""
from __future__ import annotations

import logging
import random
import re
import uuid
from collections.abc import Sequence

from study_quiz.concepts import process_documents
from study_quiz.config import Settings
from study_quiz.keywords import STOP_WORDS
from study_quiz.models import (
    DocumentContent,
    GenerationResult,
    Question,
    SourceSentence,
)

_log = logging.getLogger("study_quiz.qgen")

BLANK = "______"

QUESTION_WORD_RE = re.compile(r"(?:what|which|who|where|when|why|how)\b", re.IGNORECASE)

# Sentence-final punctuation, also when it sits inside a closing quote or bracket
TRAILING_PUNCTUATION_RE = re.compile(r"""[.!?;:,\s]*(["'\u201d\u2019)\]]*)[.!?;:,\s]*$""")


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def _whole_word_pattern(keyword: str) -> re.Pattern:
    """Case-insensitive match of *keyword* not embedded in a longer word."""
    return re.compile(rf"(?<![^\W_]){re.escape(keyword)}(?![^\W_])", re.IGNORECASE)


def _lower_leading_function_word(text: str) -> str:
    """'The cell ...' -> 'the cell ...' so that 'What' can precede it.

    Only stop words are lowered; names and acronyms keep their case.
    """
    m = re.match(r"[^\W\d_]+", text)
    if m is None:
        return text
    word = m.group(0)
    if word != "I" and word.lower() in STOP_WORDS:
        return word.lower() + text[m.end():]
    return text


def _to_question(stem: str) -> str:
    text = TRAILING_PUNCTUATION_RE.sub(r"\1", stem.strip(), count=1)
    if not QUESTION_WORD_RE.match(text):
        text = f"What {_lower_leading_function_word(text)}"
    return _capitalize(text) + "?"


def synthesize_question(sentence: str | None, keywords: Sequence[str] | None) -> tuple[str, str] | None:
    """Blank out the longest keyword of *sentence*.

    Returns ``(question_text, correct_answer)`` or ``None`` when the sentence
    has no usable keyword.  Only the first whole-word occurrence is blanked,
    so the same inputs always give the same question.
    """
    if not sentence or not keywords:
        return None

    lower = sentence.lower()
    present = [kw for kw in keywords if kw and kw.strip() and kw.strip().lower() in lower]
    if not present:
        return None

    # max() keeps the first of several equally long keywords
    target = max(present, key=lambda kw: len(kw.strip())).strip()
    match = _whole_word_pattern(target).search(sentence)
    if match is None:
        return None

    stem = sentence[: match.start()] + BLANK + sentence[match.end():]
    return _to_question(stem), _capitalize(target)


def generate_distractors(
    correct_answer: str | None,
    keyword_pool: Sequence[str] | None,
    count: int = 3,
    *,
    min_length: int = 4,
    rng: random.Random | None = None,
) -> list[str]:
    """Sample up to *count* wrong answers from *keyword_pool*.

    The correct answer, short words and case-insensitive duplicates are
    excluded; every distractor starts with a capital letter.
    """
    if not correct_answer or not keyword_pool or count <= 0:
        return []
    rng = rng if rng is not None else random

    correct_lower = correct_answer.strip().lower()
    candidates: list[str] = []
    seen: set[str] = set()
    for kw in keyword_pool:
        if not isinstance(kw, str):
            continue
        word = kw.strip()
        lower = word.lower()
        if len(word) < min_length or lower == correct_lower or lower in seen:
            continue
        seen.add(lower)
        candidates.append(_capitalize(word))

    return rng.sample(candidates, min(count, len(candidates)))


def build_question(
    source: SourceSentence | None,
    keyword_pool: Sequence[str] | None,
    *,
    distractor_count: int = 3,
    min_distractors: int = 2,
    min_length: int = 4,
    rng: random.Random | None = None,
) -> Question | None:
    """Assemble a multiple-choice Question from one source sentence.

    Returns ``None`` when no stem can be synthesized or fewer than
    *min_distractors* wrong answers are available.
    """
    if source is None or not source.sentence or not source.keywords:
        return None
    rng = rng if rng is not None else random

    synthesized = synthesize_question(source.sentence, source.keywords)
    if synthesized is None:
        _log.debug("  No blankable keyword in: %.80s", source.sentence)
        return None
    text, answer = synthesized

    distractors = generate_distractors(
        answer, keyword_pool, distractor_count, min_length=min_length, rng=rng,
    )
    if len(distractors) < min_distractors:
        _log.debug("  Only %d distractors for '%s', skipping", len(distractors), answer)
        return None

    # Shuffle positions, not texts, so the answer index follows the answer
    options = [answer, *distractors]
    order = list(range(len(options)))
    rng.shuffle(order)

    return Question(
        id=str(uuid.uuid4()),
        text=text,
        options=[options[i] for i in order],
        correct_answer=order.index(0),
        explanation=f'The correct answer is "{answer}" based on the source material.',
        source_document=source.source_document,
    )


def generate_questions(
    documents: Sequence[DocumentContent | None] | None,
    settings: Settings | None = None,
    max_questions: int | None = None,
    *,
    rng: random.Random | None = None,
) -> GenerationResult:
    """Generate up to *max_questions* questions from a document corpus.

    Candidate sentences from all documents are tried most keyword-dense
    first.  Distractors come from one keyword pool shared by the whole
    corpus, built before any question is assembled.  Sentences that cannot
    be turned into a question are skipped.
    """
    result = GenerationResult()
    if not documents:
        return result

    s = settings or Settings()
    limit = s.max_questions if max_questions is None else max_questions
    if limit <= 0:
        return result

    processed = process_documents(documents, s)
    result.failures = processed.failures
    concepts = processed.concepts

    keyword_pool = tuple(k.word for c in concepts for k in c.keywords)
    candidates = [src for c in concepts for src in c.source_sentences]
    candidates.sort(key=lambda src: len(src.keywords), reverse=True)

    skipped = 0
    for source in candidates:
        if len(result.questions) >= limit:
            break
        try:
            q = build_question(
                source,
                keyword_pool,
                distractor_count=s.distractor_count,
                min_distractors=s.min_distractors,
                min_length=s.min_keyword_length,
                rng=rng,
            )
        except Exception as e:
            _log.warning("Error generating question from %s: %s", source.source_document, e)
            q = None
        if q:
            result.questions.append(q)
        else:
            skipped += 1

    _log.info(
        "Generated %d/%d questions (%d candidate sentences, %d skipped)",
        len(result.questions), limit, len(candidates), skipped,
    )
    return result
