from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
import logging
from time import perf_counter
from datetime import datetime, timezone
from .config import settings
from .errors import EmptyBank, InvalidQuestionPayload, NoMatchingQuestions, QuizError, SessionInProgress
from .models import (
	AddQuestionRequest,
	BankOverview,
	NavigateRequest,
	PhaseResponse,
	QuestionView,
	QuestionsPayload,
	QuizCriteria,
	SummaryResponse,
	TimerView,
	TYPE_LABELS,
)
from .services.bank import QuestionBank
from .services.report import MEDIA_TYPE, report_filename, synthesize_report
from .services.summary import summary_response
from .services.timer import format_clock
from .state import QuizController, QuizPhase

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger("study_quiz")

app = FastAPI(default_response_class=ORJSONResponse)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

bank = QuestionBank(settings.question_bank_path)
controller = QuizController(lambda: bank.load())

def _conflict(error: QuizError) -> HTTPException:
	return HTTPException(status_code=409, detail=error.code)

def build_question_view(quiz: QuizController) -> QuestionView:
	session = quiz.session
	question = quiz.current_question
	type_label = TYPE_LABELS[question.kind]
	meta_parts = []
	if not session.hide_module_info:
		meta_parts.append(question.module)
	meta_parts.extend([question.topic, type_label])
	meta = " • ".join(meta_parts)
	if question.difficulty:
		meta += f" • Difficulty: {question.difficulty[:1].upper()}{question.difficulty[1:]}"
	total = len(session)
	return QuestionView(
		index=session.current_index,
		total=total,
		title=f"Question {session.current_index + 1} of {total}",
		meta=meta,
		type=question.kind,
		type_label=type_label,
		prompt=question.prompt,
		code=question.code if question.code else None,
		options=question.options,
		input=quiz.display_answer(),
		has_previous=session.current_index > 0,
		is_last=session.current_index == total - 1,
		progress=quiz.progress(),
		tick_interval_ms=settings.timer_tick_ms,
	)

@app.on_event("startup")
def on_startup() -> None:
	bank.ensure_file()
	logger.info({
		"event": "api_startup",
		"utc_time": datetime.now(timezone.utc).isoformat(),
		"bank_path": settings.question_bank_path,
		"timer_tick_ms": settings.timer_tick_ms,
	})

@app.middleware("http")
async def timing_middleware(request: Request, call_next):
	start = perf_counter()
	response = await call_next(request)
	duration_ms = int((perf_counter() - start) * 1000)
	logger.debug({
		"event": "request_timing",
		"method": request.method,
		"path": request.url.path,
		"status_code": response.status_code,
		"duration_ms": duration_ms,
	})
	return response

@app.get("/api/questions", response_model=QuestionsPayload)
def list_questions():
	return QuestionsPayload(questions=bank.load_raw())

@app.post("/api/questions", status_code=201)
async def add_question(request: Request):
	body = await request.body()
	if len(body) > settings.max_request_size:
		return ORJSONResponse(status_code=413, content={"error": "Payload too large"})
	try:
		payload = AddQuestionRequest.model_validate_json(body or b"{}")
	except ValueError:
		return ORJSONResponse(status_code=400, content={"error": "Invalid JSON payload"})
	if not isinstance(payload.question, dict):
		return ORJSONResponse(status_code=400, content={"error": "Body must contain a question object"})
	try:
		stored = bank.add_question(payload.question)
	except InvalidQuestionPayload as e:
		logger.debug({"event": "question_rejected", "errors": e.errors})
		return ORJSONResponse(status_code=422, content={"error": str(e), "details": e.errors})
	return {"question": stored}

@app.get("/api/bank/overview", response_model=BankOverview)
def bank_overview():
	return bank.overview()

@app.post("/api/quiz/start", response_model=QuestionView)
def start_quiz(criteria: QuizCriteria):
	try:
		controller.start(criteria)
	except (EmptyBank, NoMatchingQuestions, SessionInProgress) as e:
		logger.debug({"event": "start_rejected", "reason": e.code})
		raise _conflict(e)
	return build_question_view(controller)

@app.get("/api/quiz/current", response_model=QuestionView)
def current_question():
	try:
		return build_question_view(controller)
	except QuizError as e:
		raise _conflict(e)

@app.post("/api/quiz/next", response_model=QuestionView)
def next_question(payload: NavigateRequest | None = None):
	try:
		controller.advance(payload.input if payload else None)
		return build_question_view(controller)
	except QuizError as e:
		raise _conflict(e)

@app.post("/api/quiz/prev", response_model=QuestionView)
def previous_question(payload: NavigateRequest | None = None):
	try:
		controller.retreat(payload.input if payload else None)
		return build_question_view(controller)
	except QuizError as e:
		raise _conflict(e)

@app.post("/api/quiz/finish", response_model=SummaryResponse)
def finish_quiz(payload: NavigateRequest | None = None):
	try:
		entries = controller.finish(payload.input if payload else None)
	except QuizError as e:
		raise _conflict(e)
	return summary_response(entries)

@app.get("/api/quiz/timer", response_model=TimerView)
def quiz_timer():
	try:
		elapsed = controller.live_elapsed_ms()
	except QuizError as e:
		raise _conflict(e)
	return TimerView(index=controller.session.current_index, elapsed_ms=elapsed, display=format_clock(elapsed))

@app.get("/api/quiz/summary", response_model=SummaryResponse)
def quiz_summary():
	if controller.phase is not QuizPhase.FINISHED:
		raise HTTPException(status_code=409, detail="summary_not_ready")
	return summary_response(controller.summary)

@app.get("/api/quiz/report")
def download_report():
	if controller.phase is not QuizPhase.FINISHED or not controller.summary:
		raise HTTPException(status_code=409, detail="summary_not_ready")
	now = datetime.now(timezone.utc)
	pdf_bytes = synthesize_report(controller.summary, title=settings.report_title, generated_at=now)
	filename = report_filename(now)
	logger.info({"event": "report_generated", "filename": filename, "bytes": len(pdf_bytes)})
	return Response(
		content=pdf_bytes,
		media_type=MEDIA_TYPE,
		headers={"Content-Disposition": f'attachment; filename="{filename}"'},
	)

@app.post("/api/quiz/reset", response_model=PhaseResponse)
def reset_quiz():
	controller.reset()
	return PhaseResponse(phase=controller.phase.value)

def run() -> None:
	import uvicorn
	uvicorn.run(app, host=settings.host, port=settings.port)

if __name__ == "__main__":
	run()
