from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "min_keyword_length": 4,
    "max_keywords": 20,
    "min_keyword_frequency": 2,
    "length_weight_divisor": 10.0,
    "length_weight_cap": 1.5,
    "min_sentence_length": 20,
    "max_source_sentences": 50,
    "distractor_count": 3,
    "min_distractors": 2,
    "max_questions": 20,
    "max_cached_questions": 100,
    "generation_workers": 1,
    "cache_path": "questions.json",
    "documents": [],
    "max_document_mb": 50,
}


@dataclass
class Settings:
    min_keyword_length: int = DEFAULTS["min_keyword_length"]
    max_keywords: int = DEFAULTS["max_keywords"]
    min_keyword_frequency: int = DEFAULTS["min_keyword_frequency"]
    length_weight_divisor: float = DEFAULTS["length_weight_divisor"]
    length_weight_cap: float = DEFAULTS["length_weight_cap"]
    min_sentence_length: int = DEFAULTS["min_sentence_length"]
    max_source_sentences: int = DEFAULTS["max_source_sentences"]
    distractor_count: int = DEFAULTS["distractor_count"]
    min_distractors: int = DEFAULTS["min_distractors"]
    max_questions: int = DEFAULTS["max_questions"]
    max_cached_questions: int = DEFAULTS["max_cached_questions"]
    generation_workers: int = DEFAULTS["generation_workers"]
    cache_path: str = DEFAULTS["cache_path"]
    documents: list[str] = field(default_factory=lambda: list(DEFAULTS["documents"]))
    max_document_mb: int = DEFAULTS["max_document_mb"]

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ``ValueError`` for values the generator cannot work with."""
        positive = (
            "min_keyword_length",
            "max_keywords",
            "min_keyword_frequency",
            "max_source_sentences",
            "max_questions",
            "max_cached_questions",
            "generation_workers",
            "max_document_mb",
        )
        for name in positive:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer (got {value!r})")
        if isinstance(self.min_sentence_length, bool) or not isinstance(self.min_sentence_length, int) \
                or self.min_sentence_length < 0:
            raise ValueError(f"min_sentence_length must be >= 0 (got {self.min_sentence_length!r})")
        if not isinstance(self.length_weight_divisor, (int, float)) or self.length_weight_divisor <= 0:
            raise ValueError(f"length_weight_divisor must be > 0 (got {self.length_weight_divisor!r})")
        if not isinstance(self.length_weight_cap, (int, float)) or self.length_weight_cap <= 0:
            raise ValueError(f"length_weight_cap must be > 0 (got {self.length_weight_cap!r})")
        # A question needs the correct answer plus at least two wrong ones
        if isinstance(self.min_distractors, bool) or not isinstance(self.min_distractors, int) \
                or self.min_distractors < 2:
            raise ValueError(f"min_distractors must be at least 2 (got {self.min_distractors!r})")
        if isinstance(self.distractor_count, bool) or not isinstance(self.distractor_count, int) \
                or self.distractor_count < self.min_distractors:
            raise ValueError(
                f"distractor_count must be >= min_distractors ({self.min_distractors}), "
                f"got {self.distractor_count!r}"
            )
        if not isinstance(self.documents, list):
            raise ValueError("documents must be a list of file paths")

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def cache_full_path(self) -> Path:
        return self.project_root / self.cache_path

    def resolved_documents(self) -> list[Path]:
        root = self.project_root
        return [root / d for d in self.documents]

    def to_dict(self) -> dict:
        return {
            "min_keyword_length": self.min_keyword_length,
            "max_keywords": self.max_keywords,
            "min_keyword_frequency": self.min_keyword_frequency,
            "length_weight_divisor": self.length_weight_divisor,
            "length_weight_cap": self.length_weight_cap,
            "min_sentence_length": self.min_sentence_length,
            "max_source_sentences": self.max_source_sentences,
            "distractor_count": self.distractor_count,
            "min_distractors": self.min_distractors,
            "max_questions": self.max_questions,
            "max_cached_questions": self.max_cached_questions,
            "generation_workers": self.generation_workers,
            "cache_path": self.cache_path,
            "documents": self.documents,
            "max_document_mb": self.max_document_mb,
        }


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
