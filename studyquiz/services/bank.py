import os
import re
import logging
import orjson
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List
from pydantic import ValidationError
from ..errors import InvalidQuestionPayload
from ..models import (
	BankOverview,
	ModuleCount,
	Question,
	QuestionType,
	TypeChoice,
	TYPE_LABELS,
	question_adapter,
)

logger = logging.getLogger("study_quiz")

REQUIRED_FIELDS = ("module", "topic", "prompt", "type", "answer")
TEXT_FIELDS = ("module", "topic", "prompt")
SUPPORTED_TYPES = [t.value for t in QuestionType]

def _is_blank(value: Any) -> bool:
	return value is None or value == ""

def _to_base36(number: int) -> str:
	digits = "0123456789abcdefghijklmnopqrstuvwxyz"
	if number == 0:
		return "0"
	out = []
	while number:
		number, rem = divmod(number, 36)
		out.append(digits[rem])
	return "".join(reversed(out))

def _describe_error(err: Dict[str, Any]) -> str:
	location = ".".join(str(part) for part in err.get("loc", ()))
	return f"Invalid field {location}: {err.get('msg')}" if location else str(err.get("msg"))

def validate_question_payload(candidate: Dict[str, Any]) -> List[str]:
	errors: List[str] = []
	for field in REQUIRED_FIELDS:
		if _is_blank(candidate.get(field)):
			errors.append(f"Missing field: {field}")
	for field in TEXT_FIELDS:
		value = candidate.get(field)
		if not _is_blank(value) and not isinstance(value, str):
			errors.append(f"Field {field} must be text")

	qtype = candidate.get("type")
	if qtype not in SUPPORTED_TYPES:
		errors.append(f"Unsupported type: {qtype}")

	options = candidate.get("options")
	answer = candidate.get("answer")
	if qtype in ("multiple_choice", "multi_select", "code_dropdown"):
		if not isinstance(options, list) or len(options) < 2:
			errors.append("Options array with at least two entries is required")

	if qtype in ("multiple_choice", "code_dropdown") and not isinstance(answer, str):
		errors.append("Choice questions expect a string answer matching an option id")
	if qtype == "true_false" and not isinstance(answer, bool):
		errors.append("True/false questions must store a boolean answer")
	if qtype == "short_answer" and (not isinstance(answer, str) or not answer.strip()):
		errors.append("Short answer questions store the reference answer as text")
	if qtype == "multi_select" and (not isinstance(answer, list) or not answer):
		errors.append("Multi-select questions require an array of correct option ids")

	if isinstance(options, list):
		seen = set()
		for idx, opt in enumerate(options, start=1):
			opt_id = opt.get("id") if isinstance(opt, dict) else None
			if not isinstance(opt_id, str) or not opt_id.strip():
				errors.append(f"Option {idx} is missing an id")
			elif opt_id in seen:
				errors.append(f"Duplicate option id detected: {opt_id}")
			label = opt.get("label") if isinstance(opt, dict) else None
			if not label or not isinstance(label, str):
				errors.append(f"Option {idx} needs a label")
			seen.add(opt_id)
	elif options is not None:
		errors.append("Options must be an array")
	return errors

def build_question_id(candidate: Dict[str, Any], now: datetime | None = None) -> str:
	existing = candidate.get("id")
	if existing and isinstance(existing, str):
		return existing
	base = f"{candidate.get('module') or 'module'}-{candidate.get('topic') or 'topic'}"
	slug = re.sub(r"[^a-z0-9]+", "-", base.lower())
	moment = now or datetime.now(timezone.utc)
	return f"{slug}-{_to_base36(int(moment.timestamp() * 1000))}"

class QuestionBank:
	"""JSON file store holding ``{"questions": [...]}``."""

	def __init__(self, path: str) -> None:
		self.path = path

	def ensure_file(self) -> None:
		if os.path.exists(self.path):
			return
		directory = os.path.dirname(self.path)
		if directory:
			os.makedirs(directory, exist_ok=True)
		self._write([])
		logger.info({"event": "bank_created", "path": self.path})

	def load_raw(self) -> List[Dict[str, Any]]:
		try:
			with open(self.path, "rb") as f:
				parsed = orjson.loads(f.read())
		except FileNotFoundError:
			logger.warning({"event": "bank_missing", "path": self.path})
			return []
		except orjson.JSONDecodeError:
			logger.warning({"event": "bank_malformed", "path": self.path})
			return []
		questions = parsed.get("questions") if isinstance(parsed, dict) else None
		if not isinstance(questions, list):
			logger.warning({"event": "bank_malformed", "path": self.path, "reason": "questions_not_list"})
			return []
		return [q for q in questions if isinstance(q, dict)]

	def load(self) -> List[Question]:
		questions: List[Question] = []
		for record in self.load_raw():
			try:
				questions.append(question_adapter.validate_python(record))
			except ValidationError as e:
				logger.warning({"event": "bank_record_skipped", "id": record.get("id"), "errors": e.error_count()})
		logger.debug({"event": "bank_loaded", "path": self.path, "count": len(questions)})
		return questions

	def add_question(self, candidate: Dict[str, Any], now: datetime | None = None) -> Dict[str, Any]:
		errors = validate_question_payload(candidate)
		if errors:
			raise InvalidQuestionPayload(errors)
		stored = {**candidate, "id": build_question_id(candidate, now)}
		if stored.get("options") is None:
			stored.pop("options", None)
		try:
			question_adapter.validate_python(stored)
		except ValidationError as e:
			raise InvalidQuestionPayload([_describe_error(err) for err in e.errors()]) from e
		questions = self.load_raw()
		questions.append(stored)
		self._write(questions)
		logger.info({"event": "question_added", "id": stored["id"], "module": stored.get("module")})
		return stored

	def overview(self) -> BankOverview:
		return summarize_bank(self.load())

	def _write(self, questions: List[Dict[str, Any]]) -> None:
		with open(self.path, "wb") as f:
			f.write(orjson.dumps({"questions": questions}, option=orjson.OPT_INDENT_2))

def summarize_bank(questions: List[Question]) -> BankOverview:
	count = len(questions)
	if not count:
		count_label = "No questions yet"
	else:
		count_label = f"{count} question{'' if count == 1 else 's'} ready"
	modules = sorted({q.module for q in questions if q.module})
	present_types = {q.kind for q in questions}
	types = [TypeChoice(value=t, label=TYPE_LABELS[t]) for t in QuestionType if t in present_types]
	generated = Counter(q.module for q in questions if q.generated)
	totals = Counter(q.module for q in questions)
	breakdown = [
		ModuleCount(module=m, official=totals[m] - generated[m], generated=generated[m])
		for m in modules
	]
	return BankOverview(count=count, count_label=count_label, modules=modules, types=types, breakdown=breakdown)
