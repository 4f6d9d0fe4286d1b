"""Per-document keyword and source-sentence bundles."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from study_quiz.config import Settings
from study_quiz.keywords import extract_keywords
from study_quiz.models import (
    Concept,
    DocumentContent,
    DocumentFailure,
    ProcessingResult,
    SourceSentence,
)
from study_quiz.sentences import matched_keywords, select_sentences

_log = logging.getLogger("study_quiz.concepts")

UNKNOWN_PATH = "unknown"


def identify_concepts(document: DocumentContent | None, settings: Settings | None = None) -> Concept:
    """Extract keywords and keyword-bearing sentences from one document.

    A missing document or one without content gives an empty Concept.
    Content that is not text raises ``TypeError``.
    """
    s = settings or Settings()
    if document is None:
        return Concept(keywords=[], source_sentences=[], document_path=UNKNOWN_PATH)

    path = document.file_path or UNKNOWN_PATH
    metadata = document.metadata
    title = (metadata.title if metadata is not None else "") or "Unknown"

    content = document.content
    if content is not None and not isinstance(content, str):
        raise TypeError(f"document content must be text, got {type(content).__name__}")
    if not content:
        return Concept(keywords=[], source_sentences=[], document_path=path, document_title=title)

    keywords = extract_keywords(
        content,
        min_length=s.min_keyword_length,
        max_keywords=s.max_keywords,
        min_frequency=s.min_keyword_frequency,
        length_divisor=s.length_weight_divisor,
        length_cap=s.length_weight_cap,
    )
    words = [k.word for k in keywords]
    sentences = select_sentences(content, words, min_length=s.min_sentence_length)

    sources = [
        SourceSentence(
            sentence=sentence,
            keywords=matched_keywords(sentence, words),
            source_document=path,
        )
        for sentence in sentences[: s.max_source_sentences]
    ]
    return Concept(
        keywords=keywords,
        source_sentences=sources,
        document_path=path,
        document_title=title,
    )


def _identify_safely(
    document: DocumentContent | None, settings: Settings,
) -> tuple[Concept | None, DocumentFailure | None]:
    if document is None:
        return None, DocumentFailure(UNKNOWN_PATH, "document is missing")
    try:
        return identify_concepts(document, settings), None
    except Exception as e:
        path = getattr(document, "file_path", None) or UNKNOWN_PATH
        _log.warning("Error processing document %s: %s", path, e)
        return None, DocumentFailure(path, str(e))


def process_documents(
    documents: Sequence[DocumentContent | None] | None,
    settings: Settings | None = None,
    *,
    workers: int | None = None,
) -> ProcessingResult:
    """Build a Concept for every document, in input order.

    One document failing never stops the rest; each failure is reported in
    ``ProcessingResult.failures``.  With *workers* > 1 documents are
    processed on a thread pool; results keep input order either way.
    """
    result = ProcessingResult()
    if not documents:
        return result

    s = settings or Settings()
    workers = workers if workers is not None else s.generation_workers

    if workers > 1 and len(documents) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(documents))) as pool:
            outcomes = list(pool.map(lambda d: _identify_safely(d, s), documents))
    else:
        outcomes = [_identify_safely(d, s) for d in documents]

    for concept, failure in outcomes:
        if failure is not None:
            result.failures.append(failure)
        else:
            result.concepts.append(concept)

    _log.info(
        "Processed %d documents: %d concepts, %d failures",
        len(documents), len(result.concepts), len(result.failures),
    )
    return result


def keyword_statistics(
    documents: Sequence[DocumentContent | None] | None,
    settings: Settings | None = None,
) -> dict:
    """Summarize keyword and sentence extraction across *documents*."""
    if not documents:
        return {
            "total_documents": 0,
            "total_keywords": 0,
            "total_source_sentences": 0,
            "average_keywords_per_document": 0,
            "average_sentences_per_document": 0,
        }

    concepts = process_documents(documents, settings).concepts
    total_keywords = sum(len(c.keywords) for c in concepts)
    total_sentences = sum(len(c.source_sentences) for c in concepts)
    return {
        "total_documents": len(documents),
        "total_keywords": total_keywords,
        "total_source_sentences": total_sentences,
        "average_keywords_per_document": total_keywords / len(documents),
        "average_sentences_per_document": total_sentences / len(documents),
    }
