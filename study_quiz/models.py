from __future__ import annotations

from dataclasses import dataclass, field

QUESTION_TYPE = "multiple-choice"


@dataclass
class DocumentMetadata:
    title: str = "Unknown"
    word_count: int = 0
    format: str = ""
    headings: list[str] = field(default_factory=list)


@dataclass
class DocumentContent:
    file_path: str
    content: str
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)


@dataclass
class Keyword:
    word: str
    frequency: int
    score: float


@dataclass
class SourceSentence:
    sentence: str
    keywords: list[str]
    source_document: str


@dataclass
class Concept:
    keywords: list[Keyword]
    source_sentences: list[SourceSentence]
    document_path: str
    document_title: str = "Unknown"


@dataclass
class Question:
    id: str
    text: str
    options: list[str]
    correct_answer: int  # index into options
    explanation: str
    source_document: str
    type: str = QUESTION_TYPE

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_answer]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "type": self.type,
            "options": list(self.options),
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "source_document": self.source_document,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Question:
        return cls(
            id=data["id"],
            text=data["text"],
            options=list(data["options"]),
            correct_answer=int(data["correct_answer"]),
            explanation=data.get("explanation", ""),
            source_document=data.get("source_document", ""),
            type=data.get("type", QUESTION_TYPE),
        )


@dataclass
class DocumentFailure:
    document_path: str
    error: str


@dataclass
class ProcessingResult:
    concepts: list[Concept] = field(default_factory=list)
    failures: list[DocumentFailure] = field(default_factory=list)


@dataclass
class GenerationResult:
    questions: list[Question] = field(default_factory=list)
    failures: list[DocumentFailure] = field(default_factory=list)


@dataclass
class PoolStats:
    total_questions: int
    used_questions: int
    remaining_questions: int
    generated_at: str | None
    document_count: int

    def to_dict(self) -> dict:
        return {
            "total_questions": self.total_questions,
            "used_questions": self.used_questions,
            "remaining_questions": self.remaining_questions,
            "generated_at": self.generated_at,
            "document_count": self.document_count,
        }


@dataclass
class AnswerResult:
    is_correct: bool
    feedback: str
    correct_answer: str
    user_answer: str
    explanation: str
