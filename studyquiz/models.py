from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    MULTI_SELECT = "multi_select"
    CODE_DROPDOWN = "code_dropdown"

TYPE_LABELS = {
    QuestionType.MULTIPLE_CHOICE: "Multiple choice",
    QuestionType.TRUE_FALSE: "True / False",
    QuestionType.SHORT_ANSWER: "Short answer",
    QuestionType.MULTI_SELECT: "Select many",
    QuestionType.CODE_DROPDOWN: "Code practice",
}

CHOICE_TYPES = (QuestionType.MULTIPLE_CHOICE, QuestionType.MULTI_SELECT, QuestionType.CODE_DROPDOWN)

class Option(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    value: Optional[bool] = None

class QuestionBase(BaseModel):
    """Fields shared by every question type. Instances never change after loading."""

    model_config = ConfigDict(frozen=True)

    id: str
    module: str
    topic: str
    prompt: str
    code: Optional[str] = None
    options: List[Option] = Field(default_factory=list)
    difficulty: Optional[str] = None
    generated: bool = False

    @model_validator(mode="after")
    def _unique_option_ids(self):
        ids = [o.id for o in self.options]
        if len(ids) != len(set(ids)):
            raise ValueError("option ids must be unique")
        return self

    @property
    def kind(self) -> QuestionType:
        return QuestionType(self.type)

    def option(self, option_id: Any) -> Optional[Option]:
        return next((o for o in self.options if o.id == option_id), None)

    def option_ids(self) -> List[str]:
        return [o.id for o in self.options]

class SingleChoiceQuestion(QuestionBase):
    type: Literal["multiple_choice"] = "multiple_choice"
    answer: str

class TrueFalseQuestion(QuestionBase):
    type: Literal["true_false"] = "true_false"
    answer: bool
    options: List[Option] = Field(default_factory=lambda: [
        Option(id="true", label="True", value=True),
        Option(id="false", label="False", value=False),
    ])

    def option_value(self, option: Option) -> bool:
        if isinstance(option.value, bool):
            return option.value
        return option.id == "true"

class FreeTextQuestion(QuestionBase):
    type: Literal["short_answer"] = "short_answer"
    answer: str

class MultiSelectQuestion(QuestionBase):
    type: Literal["multi_select"] = "multi_select"
    answer: List[str] = Field(min_length=1)

class CodeChoiceQuestion(QuestionBase):
    type: Literal["code_dropdown"] = "code_dropdown"
    answer: str

Question = Annotated[
    Union[SingleChoiceQuestion, TrueFalseQuestion, FreeTextQuestion, MultiSelectQuestion, CodeChoiceQuestion],
    Field(discriminator="type"),
]

question_adapter = TypeAdapter(Question)

class QuizCriteria(BaseModel):
    requested_count: int = Field(default=10, ge=1)
    modules: List[str] = Field(default_factory=list)
    types: List[QuestionType] = Field(default_factory=list)
    include_generated: bool = False
    shuffle: bool = False
    hide_module_info: bool = False

RawInput = Union[bool, str, List[str], None]

class NavigateRequest(BaseModel):
    input: RawInput = None

class AddQuestionRequest(BaseModel):
    question: Any = None

class QuestionView(BaseModel):
    index: int
    total: int
    title: str
    meta: str
    type: QuestionType
    type_label: str
    prompt: str
    code: Optional[str] = None
    options: List[Option]
    input: RawInput = None
    has_previous: bool
    is_last: bool
    progress: str
    tick_interval_ms: int

class TimerView(BaseModel):
    index: int
    elapsed_ms: int
    display: str

class SummaryRow(BaseModel):
    index: int
    module: str
    source: str
    topic: str
    prompt: str
    user_answer: str
    correct_answer: str
    correct: bool
    result: str
    time_seconds: str

class SummaryTotals(BaseModel):
    count: int
    correct_count: int
    total_time_ms: int

class SummaryResponse(BaseModel):
    meta: str
    totals: SummaryTotals
    rows: List[SummaryRow]

class TypeChoice(BaseModel):
    value: QuestionType
    label: str

class ModuleCount(BaseModel):
    module: str
    official: int
    generated: int

class BankOverview(BaseModel):
    count: int
    count_label: str
    modules: List[str]
    types: List[TypeChoice]
    breakdown: List[ModuleCount]

class PhaseResponse(BaseModel):
    phase: str

class QuestionsPayload(BaseModel):
    questions: List[Dict[str, Any]]
