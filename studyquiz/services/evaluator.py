from typing import Any, Callable, Dict
from ..models import Question, QuestionType
from .codec import is_unanswered

def _norm(text: str) -> str:
	return (text or '').strip().lower()

def _short_answer(question: Question, user_answer: Any) -> bool:
	return isinstance(user_answer, str) and _norm(user_answer) == _norm(question.answer)

def _true_false(question: Question, user_answer: Any) -> bool:
	return isinstance(user_answer, bool) and user_answer == question.answer

def _multi_select(question: Question, user_answer: Any) -> bool:
	if not isinstance(user_answer, (set, frozenset)):
		return False
	expected = frozenset(question.answer)
	if len(user_answer) != len(expected):
		return False
	return all(value in expected for value in user_answer)

def _exact_choice(question: Question, user_answer: Any) -> bool:
	return isinstance(user_answer, str) and user_answer == question.answer

_RULES: Dict[QuestionType, Callable[[Question, Any], bool]] = {
	QuestionType.MULTIPLE_CHOICE: _exact_choice,
	QuestionType.TRUE_FALSE: _true_false,
	QuestionType.SHORT_ANSWER: _short_answer,
	QuestionType.MULTI_SELECT: _multi_select,
	QuestionType.CODE_DROPDOWN: _exact_choice,
}

def is_correct(question: Question, user_answer: Any) -> bool:
	"""All-or-nothing grading; unanswered is always wrong."""
	if is_unanswered(user_answer):
		return False
	return _RULES[question.kind](question, user_answer)
