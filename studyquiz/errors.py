from typing import List


class QuizError(Exception):
    """Base class for recoverable, user-facing quiz failures."""

    code = "quiz_error"


class EmptyBank(QuizError):
    code = "empty_bank"

    def __init__(self) -> None:
        super().__init__("No questions available yet. Upload the question bank to begin.")


class NoMatchingQuestions(QuizError):
    code = "no_matching_questions"

    def __init__(self) -> None:
        super().__init__("No questions match the selected modules/types.")


class SessionInProgress(QuizError):
    code = "session_in_progress"

    def __init__(self) -> None:
        super().__init__("A quiz is already running. Finish or reset it first.")


class SessionNotActive(QuizError):
    code = "session_not_active"

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Cannot {action}: no quiz in progress")


class InvalidQuestionPayload(QuizError):
    code = "invalid_question_payload"

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid question payload")
