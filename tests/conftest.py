"""Shared test fixtures."""
from __future__ import annotations

import random

import pytest

from study_quiz.config import Settings
from study_quiz.models import DocumentContent, DocumentMetadata, Question

BIOLOGY_TEXT = (
    "Mitochondria are the powerhouse of the cell. "
    "Mitochondria produce energy through cellular respiration. "
    "Photosynthesis happens inside chloroplasts in plant cells. "
    "Chloroplasts capture sunlight for photosynthesis. "
    "Ribosomes assemble proteins from amino acids. "
    "Ribosomes read messenger molecules to build proteins."
)

HISTORY_TEXT = (
    "The Renaissance began in Florence during the fourteenth century. "
    "Florence became wealthy through banking and trade. "
    "Renaissance artists studied anatomy to paint realistic figures. "
    "Artists in Florence competed for wealthy patrons."
)

MITOCHONDRIA_TEXT = (
    "Mitochondria are the powerhouse of the cell. "
    "Mitochondria produce energy through cellular respiration."
)


def make_document(path: str, content, title: str = "Notes") -> DocumentContent:
    return DocumentContent(
        file_path=path,
        content=content,
        metadata=DocumentMetadata(title=title, word_count=len(str(content).split())),
    )


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def rng():
    """Seeded random source so shuffles and samples are repeatable."""
    return random.Random(1234)


@pytest.fixture
def biology_doc():
    return make_document("notes/biology.md", BIOLOGY_TEXT, title="Cell Biology")


@pytest.fixture
def history_doc():
    return make_document("notes/history.txt", HISTORY_TEXT, title="Renaissance")


@pytest.fixture
def mitochondria_doc():
    return make_document("notes/mitochondria.txt", MITOCHONDRIA_TEXT, title="Mitochondria")


@pytest.fixture
def sample_question():
    """A valid Question object."""
    return Question(
        id="test-q-001",
        text="What ______ are the powerhouse of the cell?",
        options=["Ribosomes", "Mitochondria", "Chloroplasts", "Proteins"],
        correct_answer=1,
        explanation='The correct answer is "Mitochondria" based on the source material.',
        source_document="notes/biology.md",
    )


@pytest.fixture
def questions_factory():
    """Build n distinct, valid questions."""
    def _make(n: int) -> list[Question]:
        return [
            Question(
                id=f"q-{i}",
                text=f"What ______ is item {i}?",
                options=["Alpha", "Bravo", "Charlie"],
                correct_answer=i % 3,
                explanation="",
                source_document="notes/items.txt",
            )
            for i in range(n)
        ]
    return _make
