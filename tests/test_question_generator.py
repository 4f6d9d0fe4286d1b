"""Tests for question synthesis, distractors, assembly and corpus generation."""
from __future__ import annotations

import random

import pytest

from conftest import BIOLOGY_TEXT, HISTORY_TEXT, make_document
from study_quiz.config import Settings
from study_quiz.models import SourceSentence
from study_quiz.question_generator import (
    BLANK,
    build_question,
    generate_distractors,
    generate_questions,
    synthesize_question,
)

KEYWORD_POOL = ["photosynthesis", "mitochondria", "chloroplasts", "ribosomes", "proteins"]


def _assert_valid(q, answer=None):
    assert len(q.options) >= 3
    assert 0 <= q.correct_answer < len(q.options)
    lowered = [o.lower() for o in q.options]
    assert len(set(lowered)) == len(lowered)
    for opt in q.options:
        assert opt[0].isupper()
    if answer is not None:
        assert q.options[q.correct_answer].lower() == answer.lower()
        others = [o for i, o in enumerate(q.options) if i != q.correct_answer]
        assert answer.lower() not in [o.lower() for o in others]


class TestSynthesizeQuestion:
    def test_mitochondria_example(self):
        result = synthesize_question("Mitochondria are the powerhouse of the cell.", ["mitochondria"])
        assert result is not None
        text, answer = result
        assert text == "What ______ are the powerhouse of the cell?"
        assert BLANK in text
        assert text.endswith("?")
        assert answer == "Mitochondria"

    def test_deterministic(self):
        sentence = "Ribosomes assemble proteins from amino acids."
        results = {synthesize_question(sentence, ["proteins", "ribosomes"]) for _ in range(5)}
        assert len(results) == 1

    def test_longest_keyword_is_blanked(self):
        text, answer = synthesize_question(
            "Ribosomes assemble proteins from amino acids.", ["proteins", "ribosomes"],
        )
        assert answer == "Ribosomes"
        assert "proteins" in text

    def test_equal_length_keeps_first_listed(self):
        _, answer = synthesize_question("Lipids and sugars store energy for later.", ["sugars", "lipids"])
        assert answer == "Sugars"

    def test_only_first_occurrence_blanked(self):
        text, _ = synthesize_question("The enzyme binds another enzyme quickly.", ["enzyme"])
        assert text.count(BLANK) == 1
        assert "another enzyme" in text

    def test_keyword_only_inside_longer_word(self):
        assert synthesize_question("Cellular respiration releases energy.", ["cell"]) is None

    def test_keyword_not_in_sentence(self):
        assert synthesize_question("Plants need sunlight to grow.", ["enzyme"]) is None

    @pytest.mark.parametrize("sentence,keywords", [
        ("", ["enzyme"]),
        (None, ["enzyme"]),
        ("The enzyme binds quickly.", []),
        ("The enzyme binds quickly.", None),
    ])
    def test_empty_inputs(self, sentence, keywords):
        assert synthesize_question(sentence, keywords) is None

    def test_question_word_kept(self):
        text, answer = synthesize_question("How enzymes work depends on temperature.", ["temperature"])
        assert text == "How enzymes work depends on ______?"
        assert answer == "Temperature"

    def test_leading_article_lowered(self):
        text, _ = synthesize_question("The nucleus stores genetic information.", ["nucleus"])
        assert text == "What the ______ stores genetic information?"

    def test_leading_name_keeps_case(self):
        text, _ = synthesize_question("Darwin described natural selection.", ["selection"])
        assert text == "What Darwin described natural ______?"

    def test_exactly_one_question_mark(self):
        text, _ = synthesize_question("Is photosynthesis essential for plants?!", ["photosynthesis"])
        assert text.endswith("?")
        assert not text.endswith("??")
        assert text.startswith("What is ")

    def test_period_inside_closing_quote(self):
        text, _ = synthesize_question('Darwin wrote that "natural selection drives evolution."', ["selection"])
        assert text == 'What Darwin wrote that "natural ______ drives evolution"?'

    def test_period_inside_closing_bracket(self):
        text, _ = synthesize_question("Enzymes lower activation energy (mostly in cells.)", ["enzymes"])
        assert text == "What ______ lower activation energy (mostly in cells)?"

    def test_multibyte_text(self):
        text, answer = synthesize_question("Der Überträger wirkt schnell im Körper.", ["überträger"])
        assert answer == "Überträger"
        assert "Der ______ wirkt schnell im Körper?" in text

    def test_case_insensitive_match(self):
        text, answer = synthesize_question("PHOTOSYNTHESIS needs light energy.", ["photosynthesis"])
        assert answer == "Photosynthesis"
        assert text == "What ______ needs light energy?"


class TestGenerateDistractors:
    def test_thin_pool_example(self):
        result = generate_distractors("Mitochondria", ["mitochondria", "cell"], 3)
        assert len(result) <= 1
        assert result == ["Cell"]

    def test_excludes_correct_short_and_duplicates(self, rng):
        pool = ["Proteins", "proteins", "PROTEINS", "dna", "ribosomes", "mitochondria", "Mitochondria"]
        result = generate_distractors("Mitochondria", pool, 5, rng=rng)
        assert sorted(result) == ["Proteins", "Ribosomes"]

    def test_capitalized(self, rng):
        result = generate_distractors("Proteins", KEYWORD_POOL, 4, rng=rng)
        assert all(r[0].isupper() for r in result)

    def test_count_limits_result(self, rng):
        result = generate_distractors("Proteins", KEYWORD_POOL, 2, rng=rng)
        assert len(result) == 2
        assert len({r.lower() for r in result}) == 2

    def test_min_length_configurable(self, rng):
        result = generate_distractors("Proteins", ["lipid", "sugars", "enzymes"], 3, min_length=6, rng=rng)
        assert sorted(result) == ["Enzymes", "Sugars"]

    @pytest.mark.parametrize("answer,pool,count", [
        (None, KEYWORD_POOL, 3),
        ("", KEYWORD_POOL, 3),
        ("Proteins", None, 3),
        ("Proteins", [], 3),
        ("Proteins", KEYWORD_POOL, 0),
    ])
    def test_empty_cases(self, answer, pool, count):
        assert generate_distractors(answer, pool, count) == []

    def test_seeded_rng_is_repeatable(self):
        a = generate_distractors("Proteins", KEYWORD_POOL, 3, rng=random.Random(7))
        b = generate_distractors("Proteins", KEYWORD_POOL, 3, rng=random.Random(7))
        assert a == b


class TestBuildQuestion:
    def _source(self, sentence="Mitochondria are the powerhouse of the cell.", keywords=("mitochondria",)):
        return SourceSentence(sentence=sentence, keywords=list(keywords), source_document="notes/bio.md")

    def test_thin_pool_returns_none(self, rng):
        assert build_question(self._source(), ["mitochondria", "cell"], rng=rng) is None

    def test_valid_question(self, rng):
        q = build_question(self._source(), KEYWORD_POOL, rng=rng)
        assert q is not None
        assert q.type == "multiple-choice"
        assert q.text == "What ______ are the powerhouse of the cell?"
        assert len(q.options) == 4
        assert q.source_document == "notes/bio.md"
        _assert_valid(q, "Mitochondria")

    @pytest.mark.parametrize("seed", range(25))
    def test_index_follows_shuffle(self, seed):
        q = build_question(self._source(), KEYWORD_POOL, rng=random.Random(seed))
        _assert_valid(q, "Mitochondria")

    def test_two_distractors_is_enough(self, rng):
        q = build_question(self._source(), ["mitochondria", "ribosomes", "proteins"], rng=rng)
        assert q is not None
        assert len(q.options) == 3

    def test_min_distractors_configurable(self, rng):
        q = build_question(
            self._source(), ["ribosomes", "proteins"], min_distractors=3, distractor_count=3, rng=rng,
        )
        assert q is None

    def test_explanation_names_answer(self, rng):
        q = build_question(self._source(), KEYWORD_POOL, rng=rng)
        assert '"Mitochondria"' in q.explanation
        assert "is the correct answer" in q.explanation

    def test_same_seed_same_options(self):
        a = build_question(self._source(), KEYWORD_POOL, rng=random.Random(3))
        b = build_question(self._source(), KEYWORD_POOL, rng=random.Random(3))
        assert a.options == b.options
        assert a.correct_answer == b.correct_answer
        assert a.id != b.id

    @pytest.mark.parametrize("source", [
        None,
        SourceSentence(sentence="", keywords=["mitochondria"], source_document="x"),
        SourceSentence(sentence="Mitochondria are the powerhouse of the cell.", keywords=[], source_document="x"),
    ])
    def test_incomplete_source(self, source):
        assert build_question(source, KEYWORD_POOL) is None


class TestGenerateQuestions:
    def test_empty_corpus(self):
        assert generate_questions([], max_questions=10).questions == []
        assert generate_questions(None, max_questions=10).questions == []

    def test_biology_corpus(self, biology_doc, rng):
        result = generate_questions([biology_doc], rng=rng)
        assert len(result.questions) == 6
        assert result.failures == []
        # Two-keyword sentences come first
        assert result.questions[0].text == "What ______ happens inside chloroplasts in plant cells?"
        for q in result.questions:
            _assert_valid(q)
            assert q.source_document == "notes/biology.md"

    def test_max_questions_cap(self, biology_doc, rng):
        assert len(generate_questions([biology_doc], max_questions=2, rng=rng).questions) == 2
        assert generate_questions([biology_doc], max_questions=0, rng=rng).questions == []

    def test_settings_max_questions_default(self, biology_doc, rng):
        result = generate_questions([biology_doc], Settings(max_questions=4), rng=rng)
        assert len(result.questions) == 4

    def test_thin_document_alone_yields_nothing(self, mitochondria_doc, rng):
        assert generate_questions([mitochondria_doc], rng=rng).questions == []

    def test_distractors_drawn_from_whole_corpus(self, mitochondria_doc, history_doc, rng):
        result = generate_questions([mitochondria_doc, history_doc], rng=rng)
        thin = [q for q in result.questions if q.source_document == "notes/mitochondria.txt"]
        assert thin
        history_words = {"Florence", "Renaissance", "Wealthy", "Artists"}
        for q in thin:
            _assert_valid(q, "Mitochondria")
            assert set(q.options) - {"Mitochondria"} <= history_words

    def test_failures_reported(self, biology_doc, rng):
        broken = make_document("notes/broken.bin", 12345)
        result = generate_questions([broken, biology_doc], rng=rng)
        assert len(result.questions) == 6
        assert [f.document_path for f in result.failures] == ["notes/broken.bin"]

    def test_documents_sharing_a_path(self, rng):
        docs = [make_document("unknown", BIOLOGY_TEXT), make_document("unknown", HISTORY_TEXT)]
        result = generate_questions(docs, rng=rng)
        assert result.failures == []
        biology_answers = {"Photosynthesis", "Mitochondria", "Chloroplasts", "Ribosomes", "Proteins"}
        answers = [q.correct_option for q in result.questions]
        assert sum(a in biology_answers for a in answers) == 6
        assert len(answers) == 10

    def test_unique_ids(self, biology_doc, history_doc, rng):
        questions = generate_questions([biology_doc, history_doc], rng=rng).questions
        ids = [q.id for q in questions]
        assert len(ids) == len(set(ids))
