# =============================================================================
# Shared fixtures: sample bank, fake clock, controller and API client
# =============================================================================

import copy
import json
import random

import pytest

from studyquiz.models import question_adapter
from studyquiz.services.bank import QuestionBank
from studyquiz.state import QuizController


SAMPLE_QUESTIONS = [
    {
        "id": "m1-sort",
        "module": "M1",
        "topic": "Sorting",
        "type": "multiple_choice",
        "prompt": "Which sort is stable?",
        "options": [
            {"id": "a", "label": "Quick sort"},
            {"id": "b", "label": "Merge sort"},
            {"id": "c", "label": "Heap sort"},
        ],
        "answer": "b",
        "difficulty": "easy",
    },
    {
        "id": "m1-hash",
        "module": "M1",
        "topic": "Hashing",
        "type": "true_false",
        "prompt": "Hash lookups are O(1) on average.",
        "answer": True,
    },
    {
        "id": "m1-capital",
        "module": "M1",
        "topic": "Geography",
        "type": "short_answer",
        "prompt": "Capital of France?",
        "answer": "Paris",
    },
    {
        "id": "m2-primes",
        "module": "M2",
        "topic": "Numbers",
        "type": "multi_select",
        "prompt": "Pick the primes",
        "options": [
            {"id": "a", "label": "2"},
            {"id": "b", "label": "3"},
            {"id": "c", "label": "4"},
        ],
        "answer": ["a", "b"],
        "generated": True,
    },
    {
        "id": "m2-print",
        "module": "M2",
        "topic": "Python",
        "type": "code_dropdown",
        "prompt": "What does this print?",
        "code": "print(len('abc'))",
        "options": [
            {"id": "x", "label": "2"},
            {"id": "y", "label": "3"},
        ],
        "answer": "y",
    },
]


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: int = 1_000):
        self.ms = start

    def __call__(self) -> int:
        return self.ms

    def advance(self, ms: int) -> None:
        self.ms += ms


@pytest.fixture
def raw_questions():
    return copy.deepcopy(SAMPLE_QUESTIONS)


@pytest.fixture
def questions(raw_questions):
    return [question_adapter.validate_python(q) for q in raw_questions]


@pytest.fixture
def by_id(questions):
    return {q.id: q for q in questions}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def controller(questions, clock):
    return QuizController(lambda: questions, clock=clock, rng=random.Random(7))


@pytest.fixture
def bank_file(tmp_path, raw_questions):
    path = tmp_path / "questions.json"
    path.write_text(json.dumps({"questions": raw_questions}), encoding="utf-8")
    return path


@pytest.fixture
def client(monkeypatch, bank_file, clock):
    """FastAPI client wired to a temporary bank and a fresh controller."""
    from fastapi.testclient import TestClient

    from studyquiz import main

    bank = QuestionBank(str(bank_file))
    monkeypatch.setattr(main, "bank", bank)
    monkeypatch.setattr(main, "controller", QuizController(bank.load, clock=clock))
    return TestClient(main.app)
