"""Conversion between raw answer input and canonical stored answers.

The raw form is whatever the answer input surface currently shows: a
selected option id, a ``"true"``/``"false"`` radio value, typed text, a list
of checked ids, or a dropdown value. ``decode`` turns it into the canonical
answer kept on a response and ``encode`` turns a stored answer back into the
raw form for re-display.
"""

from typing import Any, Callable, Dict, FrozenSet, List, Optional
from ..models import Question, QuestionType

def _decode_choice(question: Question, raw: Any) -> Optional[str]:
	if isinstance(raw, str) and question.option(raw) is not None:
		return raw
	return None

def _decode_boolean(question: Question, raw: Any) -> Optional[bool]:
	if isinstance(raw, bool):
		return raw
	if not isinstance(raw, str):
		return None
	option = question.option(raw)
	if option is not None:
		return question.option_value(option)
	if raw in ("true", "false"):
		return raw == "true"
	return None

def _decode_text(question: Question, raw: Any) -> str:
	return raw.strip() if isinstance(raw, str) else ""

def _decode_multi(question: Question, raw: Any) -> Optional[FrozenSet[str]]:
	if isinstance(raw, str):
		raw = [raw]
	if not isinstance(raw, (list, tuple, set, frozenset)):
		return None
	known = set(question.option_ids())
	checked = frozenset(v for v in raw if v in known)
	return checked or None

def _decode_dropdown(question: Question, raw: Any) -> Optional[str]:
	if not raw:
		return None
	return _decode_choice(question, raw)

def _encode_choice(question: Question, answer: Any) -> Optional[str]:
	return answer

def _encode_boolean(question: Question, answer: Any) -> Optional[str]:
	if answer is None:
		return None
	return "true" if answer else "false"

def _encode_text(question: Question, answer: Any) -> str:
	return answer or ""

def _encode_multi(question: Question, answer: Any) -> List[str]:
	chosen = set(answer or ())
	return [oid for oid in question.option_ids() if oid in chosen]

def _encode_dropdown(question: Question, answer: Any) -> str:
	return answer or ""

_DECODERS: Dict[QuestionType, Callable[[Question, Any], Any]] = {
	QuestionType.MULTIPLE_CHOICE: _decode_choice,
	QuestionType.TRUE_FALSE: _decode_boolean,
	QuestionType.SHORT_ANSWER: _decode_text,
	QuestionType.MULTI_SELECT: _decode_multi,
	QuestionType.CODE_DROPDOWN: _decode_dropdown,
}

_ENCODERS: Dict[QuestionType, Callable[[Question, Any], Any]] = {
	QuestionType.MULTIPLE_CHOICE: _encode_choice,
	QuestionType.TRUE_FALSE: _encode_boolean,
	QuestionType.SHORT_ANSWER: _encode_text,
	QuestionType.MULTI_SELECT: _encode_multi,
	QuestionType.CODE_DROPDOWN: _encode_dropdown,
}

def decode(question: Question, raw: Any) -> Any:
	return _DECODERS[question.kind](question, raw)

def encode(question: Question, answer: Any) -> Any:
	return _ENCODERS[question.kind](question, answer)

def unanswered(question: Question) -> Any:
	"""Sentinel stored on a fresh response: ``""`` for short answers, else None."""
	return "" if question.kind is QuestionType.SHORT_ANSWER else None

def is_unanswered(answer: Any) -> bool:
	if answer is None:
		return True
	if isinstance(answer, (str, list, tuple, set, frozenset)):
		return len(answer) == 0
	return False
