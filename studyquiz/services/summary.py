import re
import html
import json
from dataclasses import dataclass
from typing import Any, Iterable, List
from ..models import Question, SummaryResponse, SummaryRow, SummaryTotals
from .builder import Session
from .codec import is_unanswered
from .evaluator import is_correct

UNANSWERED_HTML = '<span class="meta">Unanswered</span>'

_BREAK_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")

@dataclass(frozen=True)
class SummaryEntry:
	ordinal: int
	question: Question
	user_answer: Any
	time_spent_ms: int
	correct: bool

def build_summary(session: Session) -> List[SummaryEntry]:
	entries: List[SummaryEntry] = []
	for idx, (question, response) in enumerate(zip(session.questions, session.responses)):
		entries.append(SummaryEntry(
			ordinal=idx + 1,
			question=question,
			user_answer=response.answer,
			time_spent_ms=response.active_time_ms,
			correct=is_correct(question, response.answer),
		))
	return entries

def summarize_totals(entries: Iterable[SummaryEntry]) -> SummaryTotals:
	entries = list(entries)
	return SummaryTotals(
		count=len(entries),
		correct_count=sum(1 for e in entries if e.correct),
		total_time_ms=sum(e.time_spent_ms for e in entries),
	)

def option_label(question: Question, value: Any) -> str:
	if not question.options:
		return value if isinstance(value, str) else json.dumps(value)
	match = question.option(value)
	return match.label if match else str(value)

def _ordered(question: Question, values: Iterable[str]) -> List[str]:
	chosen = set(values)
	known = [oid for oid in question.option_ids() if oid in chosen]
	return known + sorted(chosen.difference(known))

def format_user_answer(question: Question, answer: Any) -> str:
	if is_unanswered(answer):
		return UNANSWERED_HTML
	if isinstance(answer, (set, frozenset, list, tuple)):
		return "<br />".join(option_label(question, v) for v in _ordered(question, answer))
	if isinstance(answer, bool):
		return "True" if answer else "False"
	return option_label(question, answer)

def format_correct_answer(question: Question) -> str:
	answer = question.answer
	if isinstance(answer, list):
		return "<br />".join(option_label(question, v) for v in answer)
	if isinstance(answer, bool):
		return "True" if answer else "False"
	return option_label(question, answer)

def source_label(question: Question) -> str:
	return "Generated" if question.generated else "Official"

def format_duration(ms: int) -> str:
	seconds = ms // 1000
	mins, secs = divmod(seconds, 60)
	if mins:
		return f"{mins}m {secs}s"
	return f"{secs}s"

def format_seconds(ms: int) -> str:
	return f"{ms / 1000:.1f}"

def summary_meta(totals: SummaryTotals) -> str:
	plural = "" if totals.count == 1 else "s"
	return f"{totals.count} question{plural} · {totals.correct_count} correct · {format_duration(totals.total_time_ms)}"

def result_label(entry: SummaryEntry) -> str:
	return "Correct" if entry.correct else "Incorrect"

def strip_markup(value: str) -> str:
	"""Turn a formatted answer into plain text: line breaks become ", "."""
	return html.unescape(_TAG.sub("", _BREAK_TAG.sub(", ", value)))

def entry_lines(entry: SummaryEntry, plain: bool = False) -> List[str]:
	"""Report lines for one entry.

	Formatted answers carry display markup unless ``plain`` is set. Prompt,
	module and topic are question text and are never rewritten.
	"""
	q = entry.question
	user_answer = format_user_answer(q, entry.user_answer)
	correct_answer = format_correct_answer(q)
	if plain:
		user_answer = strip_markup(user_answer)
		correct_answer = strip_markup(correct_answer)
	return [
		f"Q{entry.ordinal}: {q.prompt}",
		f"Module: {q.module} | Topic: {q.topic} | Source: {source_label(q)}",
		f"Answer: {user_answer} | Correct: {correct_answer} | Time: {format_seconds(entry.time_spent_ms)}s",
		f"Result: {result_label(entry)}",
		"",
	]

def summary_response(entries: List[SummaryEntry]) -> SummaryResponse:
	totals = summarize_totals(entries)
	rows = [
		SummaryRow(
			index=e.ordinal,
			module=e.question.module,
			source=source_label(e.question),
			topic=e.question.topic,
			prompt=e.question.prompt,
			user_answer=format_user_answer(e.question, e.user_answer),
			correct_answer=format_correct_answer(e.question),
			correct=e.correct,
			result=result_label(e),
			time_seconds=format_seconds(e.time_spent_ms),
		)
		for e in entries
	]
	return SummaryResponse(meta=summary_meta(totals), totals=totals, rows=rows)
