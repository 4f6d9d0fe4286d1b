"""JSON file cache for generated questions, with fallback on failed generation."""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from study_quiz.models import DocumentContent, Question
from study_quiz.pool import QuestionPool

_log = logging.getLogger("study_quiz.cache")

NO_QUESTIONS_ERROR = (
    "No questions could be generated and no cached questions are available. "
    "Please check your document configuration."
)


@dataclass
class CacheData:
    questions: list[Question] = field(default_factory=list)
    used_in_session: list[str] = field(default_factory=list)
    generated_at: str | None = None
    document_paths: list[str] = field(default_factory=list)


@dataclass
class GenerationOutcome:
    questions: list[Question]
    used_cache: bool
    error: str | None = None


class QuestionCache:
    def __init__(self, path: Path | str, max_cached_questions: int = 100):
        self.path = Path(path)
        self.max_cached_questions = max_cached_questions

    def load(self) -> CacheData:
        """Read the cache file.  A missing or unreadable file gives empty data."""
        if not self.path.exists():
            return CacheData()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("cache root is not an object")
            questions = [Question.from_dict(q) for q in raw.get("questions") or []]
        except (OSError, ValueError, KeyError, TypeError) as e:
            _log.warning("Ignoring unreadable question cache %s: %s", self.path, e)
            return CacheData()

        if len(questions) > self.max_cached_questions:
            _log.info("Limiting cached questions from %d to %d", len(questions), self.max_cached_questions)
            questions = questions[: self.max_cached_questions]

        return CacheData(
            questions=questions,
            used_in_session=list(raw.get("used_in_session") or []),
            generated_at=raw.get("generated_at"),
            document_paths=list(raw.get("document_paths") or []),
        )

    def save(
        self,
        questions: Sequence[Question],
        document_paths: Iterable[str] = (),
        used_ids: Iterable[str] = (),
    ) -> CacheData:
        data = CacheData(
            questions=list(questions)[: self.max_cached_questions],
            used_in_session=sorted(used_ids),
            generated_at=datetime.now(timezone.utc).isoformat(),
            document_paths=list(document_paths),
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "generated_at": data.generated_at,
            "document_paths": data.document_paths,
            "questions": [q.to_dict() for q in data.questions],
            "used_in_session": data.used_in_session,
        }
        self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        _log.info("Saved %d questions to %s", len(data.questions), self.path)
        return data


def save_pool(pool: QuestionPool, cache: QuestionCache) -> CacheData:
    return cache.save(pool.questions, pool.document_paths, pool.used_ids)


def restore_pool(pool: QuestionPool, cache: QuestionCache) -> bool:
    """Load *cache* into *pool*.  Returns True if any questions were restored."""
    data = cache.load()
    if not data.questions:
        return False
    pool.restore(data.questions, data.used_in_session, data.document_paths, data.generated_at)
    return True


def generate_with_fallback(
    pool: QuestionPool,
    cache: QuestionCache,
    documents: Sequence[DocumentContent | None] | None,
    max_questions: int | None = None,
    document_paths: Iterable[str] | None = None,
) -> GenerationOutcome:
    """Generate fresh questions; fall back to the cache when none come out."""
    questions = pool.generate_questions(documents, max_questions, document_paths)
    if questions:
        save_pool(pool, cache)
        return GenerationOutcome(questions=questions, used_cache=False)

    _log.warning("Question generation produced nothing, trying cached questions")
    if restore_pool(pool, cache):
        cached = pool.questions
        _log.info("Using %d cached questions from a previous session", len(cached))
        return GenerationOutcome(questions=cached, used_cache=True)
    return GenerationOutcome(questions=[], used_cache=False, error=NO_QUESTIONS_ERROR)
