"""CLI entry point for study-quiz.

Usage:
  python -m study_quiz serve [--port PORT] [--host HOST] [--no-auto-generate]
  python -m study_quiz stop
  python -m study_quiz status
  python -m study_quiz generate [--count N] [FILE ...]
  python -m study_quiz keywords [FILE ...]
  python -m study_quiz quiz [--count N] [FILE ...]
  python -m study_quiz stats

Without FILE arguments the documents listed in config.json are used.
"""
from __future__ import annotations

import os
import signal
import sys
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"

# Flags that take a value; everything else not starting with "--" is a file
VALUE_FLAGS = {"--count", "--port", "--host"}


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "stop":
        _stop()
    elif command == "status":
        _status()
    elif command == "generate":
        _generate(args[1:])
    elif command == "keywords":
        _keywords(args[1:])
    elif command == "quiz":
        _quiz(args[1:])
    elif command == "stats":
        _stats()
    else:
        print(f"Unknown command: {command}")
        print("Commands: serve, stop, status, generate, keywords, quiz, stats")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _positional(args: list[str]) -> list[str]:
    out: list[str] = []
    skip = False
    for a in args:
        if skip:
            skip = False
            continue
        if a in VALUE_FLAGS:
            skip = True
            continue
        if not a.startswith("--"):
            out.append(a)
    return out


def _read_pid() -> int | None:
    """Read PID from file, return None if stale or missing."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None


def _stop() -> bool:
    """Stop a running server. Returns True if a server was stopped."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return False
    try:
        os.kill(pid, signal.SIGTERM)
        print(f"Stopped server (PID {pid}).")
        return True
    except ProcessLookupError:
        print("Server was not running (stale PID file removed).")
        return False
    finally:
        PID_FILE.unlink(missing_ok=True)


def _status():
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
    else:
        print(f"Server is running (PID {pid}).")


def _serve(args: list[str]):
    import uvicorn

    existing = _read_pid()
    if existing is not None:
        print(f"Server already running (PID {existing}). Use 'stop' first.")
        sys.exit(1)

    if "--no-auto-generate" in args:
        os.environ["STUDY_QUIZ_NO_AUTO_GENERATE"] = "1"

    port = int(_parse_flag(args, "--port", "8766"))
    host = _parse_flag(args, "--host", "127.0.0.1")
    PID_FILE.write_text(str(os.getpid()))

    print(f"Starting Study Quiz on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")
    try:
        uvicorn.run(
            "study_quiz.app:app",
            host=host,
            port=port,
            reload=False,
            timeout_graceful_shutdown=5,
        )
    finally:
        PID_FILE.unlink(missing_ok=True)
        os.environ.pop("STUDY_QUIZ_NO_AUTO_GENERATE", None)


def _load(args: list[str]):
    """Load documents named on the command line, or the configured ones."""
    from study_quiz.config import load_settings
    from study_quiz.documents import load_documents

    settings = load_settings()
    files = _positional(args)
    paths = [Path(f) for f in files] if files else settings.resolved_documents()
    if not paths:
        print("No documents given and none configured in config.json.")
        sys.exit(1)

    documents, failures = load_documents(paths, settings.max_document_mb)
    for f in failures:
        print(f"  Skipping {f.document_path}: {f.error}")
    for d in documents:
        print(f"  Loaded: {d.metadata.title} ({d.metadata.word_count} words)")
    return settings, documents, [str(p) for p in paths]


def _generate(args: list[str]):
    from study_quiz.cache import QuestionCache, generate_with_fallback
    from study_quiz.pool import QuestionPool

    settings, documents, paths = _load(args)
    count = int(_parse_flag(args, "--count", str(settings.max_questions)))

    pool = QuestionPool(settings)
    cache = QuestionCache(settings.cache_full_path, settings.max_cached_questions)
    outcome = generate_with_fallback(pool, cache, documents, count, paths)
    if outcome.error:
        print(outcome.error)
        sys.exit(1)

    source = "from cache" if outcome.used_cache else "fresh"
    print(f"\n{len(outcome.questions)} questions ({source}):\n")
    for i, q in enumerate(outcome.questions, 1):
        print(f"{i:3d}. {q.text}")
        for j, opt in enumerate(q.options):
            marker = "*" if j == q.correct_answer else " "
            print(f"      {marker} {chr(ord('A') + j)}) {opt}")


def _keywords(args: list[str]):
    from study_quiz.concepts import identify_concepts, keyword_statistics

    settings, documents, _ = _load(args)
    for d in documents:
        concept = identify_concepts(d, settings)
        print(f"\n{concept.document_title}  ({concept.document_path})")
        print("-" * 40)
        for k in concept.keywords:
            print(f"  {k.word:24s} freq={k.frequency:<4d} score={k.score:.2f}")
        print(f"  {len(concept.source_sentences)} candidate sentences")

    stats = keyword_statistics(documents, settings)
    print(f"\nKeywords per document:  {stats['average_keywords_per_document']:.1f}")
    print(f"Sentences per document: {stats['average_sentences_per_document']:.1f}")


def _quiz(args: list[str]):
    from study_quiz.answers import check_answer
    from study_quiz.pool import QuestionPool

    settings, documents, _ = _load(args)
    count = int(_parse_flag(args, "--count", "10"))

    pool = QuestionPool(settings)
    pool.generate_questions(documents, count)
    if not pool.has_questions():
        print("Could not generate any questions from these documents.")
        sys.exit(1)

    answered = correct = 0
    quit_requested = False
    while not quit_requested:
        q = pool.claim_next_question()
        if q is None:
            break
        print(f"\n{q.text}")
        for j, opt in enumerate(q.options):
            print(f"  {j + 1}) {opt}")
        while True:
            try:
                raw = input("Answer (number, q to quit): ").strip()
            except EOFError:
                raw = "q"
            if raw.lower() == "q":
                quit_requested = True
                break
            try:
                result = check_answer(q, int(raw) - 1)
            except ValueError:
                print(f"  Please enter a number from 1 to {len(q.options)}.")
                continue
            answered += 1
            correct += result.is_correct
            print(result.feedback)
            break

    if answered:
        print(f"\nScore: {correct}/{answered} ({round(correct / answered * 100, 1)}%)")


def _stats():
    from study_quiz.cache import QuestionCache, restore_pool
    from study_quiz.config import load_settings
    from study_quiz.pool import QuestionPool

    settings = load_settings()
    pool = QuestionPool(settings)
    restore_pool(pool, QuestionCache(settings.cache_full_path, settings.max_cached_questions))
    stats = pool.stats()

    print("Study Quiz Stats")
    print("=" * 40)
    print(f"Cached questions:   {stats.total_questions}")
    print(f"Used this session:  {stats.used_questions}")
    print(f"Remaining:          {stats.remaining_questions}")
    print(f"Documents:          {stats.document_count}")
    print(f"Generated at:       {stats.generated_at or 'never'}")


if __name__ == "__main__":
    main()
