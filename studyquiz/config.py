import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    question_bank_path: str = os.getenv("QUESTION_BANK_PATH", os.path.join("data", "questions.json"))
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "4173"))
    max_request_size: int = int(os.getenv("MAX_REQUEST_SIZE", "1000000"))
    timer_tick_ms: int = int(os.getenv("TIMER_TICK_MS", "250"))
    report_title: str = os.getenv("REPORT_TITLE", "Quiz Summary")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()
