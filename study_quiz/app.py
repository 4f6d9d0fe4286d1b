"""FastAPI application exposing the question pool to a presentation layer."""
from __future__ import annotations

import asyncio
import logging
import os

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request

from study_quiz.answers import check_answer
from study_quiz.cache import QuestionCache, generate_with_fallback, restore_pool, save_pool
from study_quiz.concepts import keyword_statistics
from study_quiz.config import Settings, load_settings, save_settings
from study_quiz.documents import load_documents
from study_quiz.models import DocumentContent, DocumentFailure, DocumentMetadata
from study_quiz.pool import QuestionPool

app = FastAPI(title="Study Quiz")

_log = logging.getLogger("study_quiz.app")

# Global state (initialized in startup)
_settings: Settings | None = None
_pool: QuestionPool | None = None
_cache: QuestionCache | None = None


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def get_pool() -> QuestionPool:
    assert _pool is not None
    return _pool


def get_cache() -> QuestionCache:
    assert _cache is not None
    return _cache


def _parse_document(raw: dict | None) -> DocumentContent | None:
    if not isinstance(raw, dict):
        return None
    meta = raw.get("metadata") or {}
    return DocumentContent(
        file_path=raw.get("file_path") or "unknown",
        content=raw.get("content"),
        metadata=DocumentMetadata(
            title=meta.get("title") or "Unknown",
            word_count=meta.get("word_count", 0),
            format=meta.get("format", ""),
            headings=list(meta.get("headings") or []),
        ),
    )


def _configured_paths() -> list[str]:
    return [str(p) for p in get_settings().resolved_documents()]


def _configured_documents() -> tuple[list[DocumentContent], list[DocumentFailure]]:
    s = get_settings()
    return load_documents(s.resolved_documents(), s.max_document_mb)


async def _json_body(request: Request) -> dict:
    """Request body as a dict; an empty body is an empty dict."""
    if not await request.body():
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(400, "Request body must be JSON")
    if not isinstance(body, dict):
        raise HTTPException(400, "Request body must be a JSON object")
    return body


def _body_documents(body: dict) -> list[DocumentContent | None]:
    raw = body["documents"] or []
    if not isinstance(raw, list):
        raise HTTPException(400, "documents must be a list")
    return [_parse_document(d) for d in raw]


def _failures_json(failures: list[DocumentFailure]) -> list[dict]:
    return [{"document_path": f.document_path, "error": f.error} for f in failures]


@app.on_event("startup")
async def startup():
    global _settings, _pool, _cache
    if _pool is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    _pool = QuestionPool(_settings)
    _cache = QuestionCache(_settings.cache_full_path, _settings.max_cached_questions)
    restore_pool(_pool, _cache)

    if os.environ.get("STUDY_QUIZ_NO_AUTO_GENERATE") or not _settings.documents:
        return
    paths = _configured_paths()
    if _pool.needs_regeneration(paths):
        _log.info("Document set changed, regenerating questions")
        documents, failures = _configured_documents()
        for f in failures:
            _log.warning("  %s: %s", f.document_path, f.error)
        outcome = await asyncio.to_thread(generate_with_fallback, _pool, _cache, documents, None, paths)
        if outcome.error:
            _log.warning(outcome.error)


@app.on_event("shutdown")
async def shutdown():
    if _pool is not None and _cache is not None and _pool.has_questions():
        save_pool(_pool, _cache)


# ── API: Generate questions ───────────────────────────────────────────────

@app.post("/api/generate")
async def api_generate(request: Request):
    body = await _json_body(request)
    max_questions = body.get("max_questions", get_settings().max_questions)
    if isinstance(max_questions, bool) or not isinstance(max_questions, int) or max_questions < 0:
        raise HTTPException(400, f"max_questions must be a non-negative integer (got {max_questions!r})")

    if "documents" in body:
        documents = _body_documents(body)
        load_failures: list[DocumentFailure] = []
        paths = None
    else:
        documents, load_failures = _configured_documents()
        paths = _configured_paths()

    pool = get_pool()
    outcome = await asyncio.to_thread(
        generate_with_fallback, pool, get_cache(), documents, max_questions, paths,
    )
    return {
        "generated": len(outcome.questions),
        "used_cache": outcome.used_cache,
        "error": outcome.error,
        "failures": _failures_json(load_failures + pool.failures),
        "stats": pool.stats().to_dict(),
    }


# ── API: Questions ────────────────────────────────────────────────────────

@app.get("/api/question/next")
async def api_question_next():
    pool = get_pool()
    q = pool.get_next_question()
    stats = pool.stats().to_dict()
    if q is None:
        return {"question": None, "exhausted": True, "stats": stats}
    return {"question": q.to_dict(), "exhausted": False, "stats": stats}


@app.post("/api/question/{question_id}/answer")
async def api_question_answer(question_id: str, request: Request):
    body = await _json_body(request)
    pool = get_pool()
    q = pool.get_question(question_id)
    if q is None:
        raise HTTPException(404, "Question not found")

    try:
        result = check_answer(q, body.get("selected_index"))
    except ValueError as e:
        raise HTTPException(400, str(e))

    pool.mark_question_used(question_id)
    save_pool(pool, get_cache())
    return {
        "correct": result.is_correct,
        "correct_index": q.correct_answer,
        "correct_answer": result.correct_answer,
        "user_answer": result.user_answer,
        "feedback": result.feedback,
        "explanation": result.explanation,
        "stats": pool.stats().to_dict(),
    }


@app.post("/api/question/{question_id}/used")
async def api_question_used(question_id: str):
    if not get_pool().mark_question_used(question_id):
        raise HTTPException(404, "Question not found")
    return {"question_id": question_id, "used": True}


# ── API: Session ──────────────────────────────────────────────────────────

@app.get("/api/session/stats")
async def api_session_stats():
    pool = get_pool()
    stats = pool.stats().to_dict()
    stats["has_unused"] = pool.has_unused_questions()
    return stats


@app.post("/api/session/reset")
async def api_session_reset():
    pool = get_pool()
    pool.reset_session()
    return pool.stats().to_dict()


# ── API: Keyword statistics ──────────────────────────────────────────────

@app.post("/api/keywords/stats")
async def api_keyword_stats(request: Request):
    body = await _json_body(request)
    if "documents" in body:
        documents = _body_documents(body)
    else:
        documents, _ = _configured_documents()
    return keyword_statistics(documents, get_settings())


# ── API: Settings ─────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_update_settings(request: Request):
    global _settings
    body = await _json_body(request)
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    merged = get_settings().to_dict()
    merged.update({k: v for k, v in body.items() if k in known})
    try:
        new_settings = Settings(**merged)
    except (TypeError, ValueError) as e:
        raise HTTPException(400, str(e))
    _settings = new_settings
    get_pool().settings = new_settings
    save_settings(new_settings)
    return new_settings.to_dict()
