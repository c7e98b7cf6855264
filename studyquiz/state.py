import random
import logging
from enum import Enum
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Sequence
from .errors import SessionInProgress, SessionNotActive
from .models import Question, QuizCriteria, SummaryTotals
from .services import codec
from .services.builder import Response, Session, build_session
from .services.summary import SummaryEntry, build_summary, summarize_totals
from .services.timer import Clock, TimerAccumulator

logger = logging.getLogger("study_quiz")

BankProvider = Callable[[], Sequence[Question]]

class QuizPhase(str, Enum):
	BUILDING = "building"
	IN_PROGRESS = "in_progress"
	FINISHED = "finished"

class QuizController:
	"""Owns the single quiz session and every transition that mutates it."""

	def __init__(self, bank_provider: BankProvider, clock: Optional[Clock] = None, rng: Optional[random.Random] = None, now: Optional[Callable[[], datetime]] = None) -> None:
		self.bank_provider = bank_provider
		self.timer = TimerAccumulator(clock)
		self.rng = rng or random.Random()
		self.now = now or (lambda: datetime.now(timezone.utc))
		self.phase = QuizPhase.BUILDING
		self.session: Optional[Session] = None
		self.summary: List[SummaryEntry] = []

	def start(self, criteria: QuizCriteria) -> Session:
		if self.phase is QuizPhase.IN_PROGRESS:
			raise SessionInProgress()
		bank = list(self.bank_provider())
		session = build_session(bank, criteria, rng=self.rng, now=self.now())
		self.session = session
		self.summary = []
		self.phase = QuizPhase.IN_PROGRESS
		self.timer.begin(session.current_response)
		logger.debug({
			"event": "quiz_started",
			"bank_size": len(bank),
			"requested": criteria.requested_count,
			"selected": len(session),
			"shuffle": criteria.shuffle,
		})
		return session

	def _require_session(self, action: str) -> Session:
		if self.phase is not QuizPhase.IN_PROGRESS or self.session is None:
			raise SessionNotActive(action)
		return self.session

	def _persist_current(self, raw: Any) -> None:
		session = self.session
		question = session.current_question
		response = session.current_response
		answer = codec.decode(question, raw)
		delta = self.timer.stop()
		response.answer = answer
		logger.debug({
			"event": "response_persisted",
			"index": session.current_index,
			"question_id": question.id,
			"delta_ms": delta,
			"active_time_ms": response.active_time_ms,
		})

	def move_to(self, target_index: int, raw: Any = None) -> bool:
		session = self._require_session("navigate")
		if target_index < 0 or target_index >= len(session):
			return False
		self._persist_current(raw)
		session.current_index = target_index
		self.timer.begin(session.current_response)
		return True

	def advance(self, raw: Any = None) -> bool:
		session = self._require_session("advance")
		return self.move_to(session.current_index + 1, raw)

	def retreat(self, raw: Any = None) -> bool:
		session = self._require_session("retreat")
		return self.move_to(session.current_index - 1, raw)

	def finish(self, raw: Any = None) -> List[SummaryEntry]:
		session = self._require_session("finish")
		self._persist_current(raw)
		self.summary = build_summary(session)
		self.phase = QuizPhase.FINISHED
		totals = self.totals()
		logger.info({
			"event": "quiz_finished",
			"count": totals.count,
			"correct": totals.correct_count,
			"total_time_ms": totals.total_time_ms,
		})
		return self.summary

	def reset(self) -> None:
		self.timer.discard()
		self.session = None
		self.summary = []
		self.phase = QuizPhase.BUILDING
		logger.debug({"event": "quiz_reset"})

	@property
	def current_question(self) -> Question:
		return self._require_session("read question").current_question

	@property
	def current_response(self) -> Response:
		return self._require_session("read response").current_response

	def display_answer(self) -> Any:
		session = self._require_session("read answer")
		return codec.encode(session.current_question, session.current_response.answer)

	def answered_count(self) -> int:
		session = self._require_session("read progress")
		return sum(1 for r in session.responses if not codec.is_unanswered(r.answer))

	def progress(self) -> str:
		total = len(self._require_session("read progress"))
		return f"{self.answered_count()}/{total} question{'' if total == 1 else 's'} answered"

	def live_elapsed_ms(self) -> int:
		self._require_session("read timer")
		return self.timer.live_estimate_ms()

	def totals(self) -> SummaryTotals:
		return summarize_totals(self.summary)
