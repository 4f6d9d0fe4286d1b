"""Session-scoped question pool with used/unused tracking."""
from __future__ import annotations

import logging
import random
import threading
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from study_quiz.config import Settings
from study_quiz.models import DocumentContent, DocumentFailure, PoolStats, Question
from study_quiz.question_generator import generate_questions

_log = logging.getLogger("study_quiz.pool")


class QuestionPool:
    """Cached questions for one session, served without repetition.

    The pool owns the set of used question ids.  Every public method takes
    the same lock, and ``claim_next_question`` does the read-then-mark
    sequence under it so two consumers never receive the same question.
    The pool never regenerates on its own; callers decide when to call
    ``generate_questions`` again.
    """

    def __init__(self, settings: Settings | None = None, rng: random.Random | None = None):
        self.settings = settings or Settings()
        self._rng = rng
        self._lock = threading.Lock()
        self._questions: list[Question] = []
        self._used_ids: set[str] = set()
        self._document_paths: list[str] = []
        self._generated_at: str | None = None
        self.failures: list[DocumentFailure] = []

    # ── Generation ────────────────────────────────────────────────────────

    def generate_questions(
        self,
        documents: Sequence[DocumentContent | None] | None,
        max_questions: int | None = None,
        document_paths: Iterable[str] | None = None,
    ) -> list[Question]:
        """Replace the pool with freshly generated questions.

        The used set is cleared.  Per-document failures from this batch are
        kept in ``self.failures``.  *document_paths* is the document set the
        pool is recorded as built from, the paths of *documents* by default.
        """
        result = generate_questions(documents, self.settings, max_questions, rng=self._rng)
        if document_paths is None:
            paths = [d.file_path for d in documents or [] if d is not None]
        else:
            paths = list(document_paths)
        with self._lock:
            self._questions = list(result.questions)
            self._used_ids.clear()
            self._document_paths = paths
            self._generated_at = datetime.now(timezone.utc).isoformat()
            self.failures = list(result.failures)
        _log.info("Pool regenerated: %d questions from %d documents", len(result.questions), len(paths))
        return list(result.questions)

    def restore(
        self,
        questions: Iterable[Question],
        used_ids: Iterable[str] = (),
        document_paths: Iterable[str] = (),
        generated_at: str | None = None,
    ) -> None:
        """Load previously generated state, e.g. from a cache file."""
        kept = list(questions)[: self.settings.max_cached_questions]
        known = {q.id for q in kept}
        with self._lock:
            self._questions = kept
            self._used_ids = {qid for qid in used_ids if qid in known}
            self._document_paths = list(document_paths)
            self._generated_at = generated_at

    # ── Serving ───────────────────────────────────────────────────────────

    def _next_unused(self) -> Question | None:
        for q in self._questions:
            if q.id not in self._used_ids:
                return q
        return None

    def _mark(self, question_id: str) -> bool:
        if not question_id or not any(q.id == question_id for q in self._questions):
            return False
        self._used_ids.add(question_id)
        return True

    def get_next_question(self) -> Question | None:
        """First question not yet marked used, or ``None``.  Does not mark it."""
        with self._lock:
            return self._next_unused()

    def mark_question_used(self, question_id: str) -> bool:
        """Mark *question_id* used.  Idempotent; ``False`` for unknown ids."""
        with self._lock:
            return self._mark(question_id)

    def claim_next_question(self) -> Question | None:
        """Get the next unused question and mark it used in one step."""
        with self._lock:
            q = self._next_unused()
            if q is not None:
                self._mark(q.id)
            return q

    def get_question(self, question_id: str) -> Question | None:
        with self._lock:
            return next((q for q in self._questions if q.id == question_id), None)

    def reset_session(self) -> None:
        with self._lock:
            self._used_ids.clear()

    # ── Introspection ─────────────────────────────────────────────────────

    @property
    def questions(self) -> list[Question]:
        with self._lock:
            return list(self._questions)

    @property
    def used_ids(self) -> set[str]:
        with self._lock:
            return set(self._used_ids)

    @property
    def document_paths(self) -> list[str]:
        with self._lock:
            return list(self._document_paths)

    @property
    def generated_at(self) -> str | None:
        return self._generated_at

    def has_questions(self) -> bool:
        with self._lock:
            return bool(self._questions)

    def has_unused_questions(self) -> bool:
        with self._lock:
            return self._next_unused() is not None

    def stats(self) -> PoolStats:
        with self._lock:
            total = len(self._questions)
            used = len(self._used_ids)
            return PoolStats(
                total_questions=total,
                used_questions=used,
                remaining_questions=total - used,
                generated_at=self._generated_at,
                document_count=len(self._document_paths),
            )

    def needs_regeneration(self, document_paths: Iterable[str]) -> bool:
        """True if nothing was generated yet or the document set changed."""
        with self._lock:
            if self._generated_at is None:
                return True
            return set(document_paths) != set(self._document_paths)
