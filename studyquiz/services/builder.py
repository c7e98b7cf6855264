import random
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence
from ..errors import EmptyBank, NoMatchingQuestions
from ..models import Question, QuizCriteria
from .codec import unanswered

logger = logging.getLogger("study_quiz")

@dataclass
class Response:
	answer: Any = None
	active_time_ms: int = 0

@dataclass
class Session:
	questions: List[Question]
	responses: List[Response]
	started_at: datetime
	hide_module_info: bool = False
	current_index: int = 0

	def __len__(self) -> int:
		return len(self.questions)

	@property
	def current_question(self) -> Question:
		return self.questions[self.current_index]

	@property
	def current_response(self) -> Response:
		return self.responses[self.current_index]

def matches(question: Question, criteria: QuizCriteria) -> bool:
	if criteria.modules and question.module not in criteria.modules:
		return False
	if criteria.types and question.kind not in criteria.types:
		return False
	return criteria.include_generated or not question.generated

def build_session(bank: Sequence[Question], criteria: QuizCriteria, *, rng: Optional[random.Random] = None, now: Optional[datetime] = None) -> Session:
	if not bank:
		raise EmptyBank()
	filtered = [q for q in bank if matches(q, criteria)]
	if not filtered:
		logger.debug({"event": "no_matching_questions", "modules": criteria.modules, "types": [t.value for t in criteria.types]})
		raise NoMatchingQuestions()
	selection = list(filtered)
	if criteria.shuffle:
		(rng or random).shuffle(selection)
	chosen = selection[:min(criteria.requested_count, len(filtered))]
	return Session(
		questions=chosen,
		responses=[Response(answer=unanswered(q)) for q in chosen],
		started_at=now or datetime.now(timezone.utc),
		hide_module_info=criteria.hide_module_info,
	)
