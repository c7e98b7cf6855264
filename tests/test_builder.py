# =============================================================================
# Quiz builder: filtering, truncation and shuffling
# =============================================================================

import random

import pytest

from studyquiz.errors import EmptyBank, NoMatchingQuestions
from studyquiz.models import QuestionType, QuizCriteria
from studyquiz.services.builder import build_session, matches


class TestBuildSessionFiltering:
    """Filtering by module, type and provenance."""

    @pytest.mark.parametrize("requested", [1, 2, 3, 10])
    @pytest.mark.parametrize("modules", [[], ["M1"], ["M2"], ["M1", "M2"]])
    @pytest.mark.parametrize(
        "types",
        [[], [QuestionType.MULTIPLE_CHOICE], [QuestionType.SHORT_ANSWER, QuestionType.CODE_DROPDOWN]],
    )
    @pytest.mark.parametrize("include_generated", [False, True])
    def test_size_and_predicate(self, questions, requested, modules, types, include_generated):
        """Session size is min(requested, filtered) and every pick matches."""
        criteria = QuizCriteria(
            requested_count=requested,
            modules=modules,
            types=types,
            include_generated=include_generated,
        )
        filtered = [q for q in questions if matches(q, criteria)]
        if not filtered:
            with pytest.raises(NoMatchingQuestions):
                build_session(questions, criteria)
            return

        session = build_session(questions, criteria)

        assert len(session) == min(requested, len(filtered))
        assert all(matches(q, criteria) for q in session.questions)

    def test_generated_excluded_by_default(self, questions):
        session = build_session(questions, QuizCriteria(requested_count=10))

        assert "m2-primes" not in [q.id for q in session.questions]
        assert len(session) == 4

    def test_generated_included_on_request(self, questions):
        session = build_session(questions, QuizCriteria(requested_count=10, include_generated=True))

        assert "m2-primes" in [q.id for q in session.questions]

    def test_empty_bank(self):
        with pytest.raises(EmptyBank):
            build_session([], QuizCriteria(requested_count=3))

    def test_no_matching_questions(self, questions):
        with pytest.raises(NoMatchingQuestions):
            build_session(questions, QuizCriteria(requested_count=3, modules=["M9"]))

    def test_requested_count_must_be_positive(self):
        with pytest.raises(ValueError):
            QuizCriteria(requested_count=0)


class TestBuildSessionOrdering:
    """Bank order versus shuffled order."""

    def test_preserves_bank_order_without_shuffle(self, questions):
        session = build_session(questions, QuizCriteria(requested_count=2))

        assert [q.id for q in session.questions] == ["m1-sort", "m1-hash"]

    def test_shuffle_is_permutation(self, questions):
        criteria = QuizCriteria(requested_count=10, shuffle=True, include_generated=True)

        session = build_session(questions, criteria, rng=random.Random(3))

        assert sorted(q.id for q in session.questions) == sorted(q.id for q in questions)

    def test_shuffle_changes_order_for_some_seed(self, questions):
        criteria = QuizCriteria(requested_count=10, shuffle=True, include_generated=True)
        bank_order = [q.id for q in questions]

        orders = [
            [q.id for q in build_session(questions, criteria, rng=random.Random(seed)).questions]
            for seed in range(20)
        ]

        assert any(order != bank_order for order in orders)

    def test_shuffle_truncates_after_permuting(self, questions):
        criteria = QuizCriteria(requested_count=2, shuffle=True, include_generated=True)
        ids = {q.id for q in questions}

        session = build_session(questions, criteria, rng=random.Random(11))

        assert len(session) == 2
        assert {q.id for q in session.questions} <= ids


class TestFreshSession:
    """State of a newly built session."""

    def test_responses_are_zeroed(self, questions):
        session = build_session(questions, QuizCriteria(requested_count=10, include_generated=True))

        assert session.current_index == 0
        assert len(session.responses) == len(session.questions)
        assert all(r.active_time_ms == 0 for r in session.responses)
        answers = {q.id: r.answer for q, r in zip(session.questions, session.responses)}
        assert answers["m1-capital"] == ""
        assert answers["m1-sort"] is None
        assert answers["m2-primes"] is None

    def test_hide_module_flag_carried(self, questions):
        session = build_session(questions, QuizCriteria(requested_count=1, hide_module_info=True))

        assert session.hide_module_info is True
