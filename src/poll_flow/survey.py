"""Survey aggregate and the per-attempt response aggregate."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Optional, Sequence

from .errors import (
    DuplicateQuestionId,
    EmptySurveyTitle,
    NoQuestions,
    ResponseValidationError,
    SurveyValidationError,
)
from .graph import Branches, NavigationGraph, QuestionNode, Responses, check_branches
from .ids import QuestionId, ResponseId, SurveyId
from .questions import Question
from .responses import QuestionResponse, utc_now
from .result import Err, Ok, Result


class ValidationStrategy(Enum):
    """When answers are checked against their questions."""
    IMMEDIATE = "immediate"
    ON_SUBMIT = "on_submit"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class SurveySettings:
    """Behaviour switches attached to a survey."""
    allow_back_navigation: bool = True
    show_progress_indicator: bool = True
    randomize_questions: bool = False
    submit_on_complete: bool = True
    save_progress_locally: bool = True
    validation_strategy: ValidationStrategy = ValidationStrategy.IMMEDIATE


@dataclass(frozen=True, eq=False)
class Survey:
    """A validated set of questions plus the graph that orders them.

    Build surveys with ``Survey.create``; it reports every structural problem at
    once: blank id or title, no questions, duplicated question ids and invalid
    branches.
    """
    id: SurveyId
    title: str
    graph: NavigationGraph
    questions: tuple[Question, ...]
    description: Optional[str] = None
    version: str = "1.0"
    settings: SurveySettings = field(default_factory=SurveySettings)
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        id: str,
        title: str,
        questions: Sequence[Question] = (),
        description: Optional[str] = None,
        version: str = "1.0",
        settings: Optional[SurveySettings] = None,
        metadata: Optional[dict[str, Any]] = None,
        branches: Optional[Branches] = None,
    ) -> Result:
        errors: list[SurveyValidationError] = []

        match SurveyId.create(id):
            case Ok(value):
                survey_id = value
            case Err(error):
                errors.extend(error)
                survey_id = SurveyId.unsafe("invalid-id")

        if not title or not title.strip():
            errors.append(EmptySurveyTitle())
        if not questions:
            errors.append(NoQuestions())

        seen: set[QuestionId] = set()
        reported: set[QuestionId] = set()
        for question in questions:
            if question.id in seen and question.id not in reported:
                errors.append(DuplicateQuestionId(question.id))
                reported.add(question.id)
            seen.add(question.id)

        errors.extend(check_branches(questions, branches))

        if errors:
            return Err(errors)

        questions = tuple(questions)
        return Ok(cls(
            id=survey_id,
            title=title,
            graph=NavigationGraph.build(questions, branches),
            questions=questions,
            description=description,
            version=version,
            settings=settings or SurveySettings(),
            metadata=dict(metadata or {}),
        ))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Survey):
            return NotImplemented
        return (
            self.id == other.id
            and self.title == other.title
            and self.description == other.description
            and self.version == other.version
            and self.graph == other.graph
            and self.settings == other.settings
            and self.metadata == other.metadata
        )

    __hash__ = None  # type: ignore[assignment]

    @property
    def entry(self) -> Optional[QuestionNode]:
        return self.graph.entry

    def find_question(self, question_id: QuestionId) -> Optional[Question]:
        node = self.graph.find(question_id)
        return node.question if node else None

    def visible_questions(self, responses: Responses) -> Iterator[Question]:
        """Questions on the path taken for the given answers."""
        for node in self.graph.walk(responses):
            yield node.question


@dataclass(frozen=True)
class SurveyResponse:
    """Answers collected during one attempt at a survey.

    Every update returns a new value, so earlier snapshots stay valid.
    """
    survey_id: SurveyId
    response_id: ResponseId
    started_at: datetime
    ended_at: Optional[datetime] = None
    is_complete: bool = False
    responses: dict[QuestionId, QuestionResponse] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, survey_id: SurveyId, now: Optional[datetime] = None) -> "SurveyResponse":
        return cls(
            survey_id=survey_id,
            response_id=ResponseId.generate(),
            started_at=now or utc_now(),
        )

    def add_response(self, response: QuestionResponse) -> "SurveyResponse":
        return replace(self, responses={**self.responses, response.question_id: response})

    def remove_response(self, question_id: QuestionId) -> "SurveyResponse":
        responses = {k: v for k, v in self.responses.items() if k != question_id}
        return replace(self, responses=responses)

    def get_response(self, question_id: QuestionId) -> Optional[QuestionResponse]:
        return self.responses.get(question_id)

    def with_metadata(self, **metadata: Any) -> "SurveyResponse":
        return replace(self, metadata={**self.metadata, **metadata})

    def mark_complete(self, now: Optional[datetime] = None) -> "SurveyResponse":
        """Stamp the end time. Completing twice keeps the first stamp."""
        if self.is_complete:
            return self
        ended_at = max(now or utc_now(), self.started_at)
        return replace(self, is_complete=True, ended_at=ended_at)

    def validate_with(self, survey: Survey) -> Result:
        """Check every answer against the survey.

        Required questions only count as missing when they lie on the path the
        answers lead through; a question skipped by a branch may stay unanswered.
        """
        errors: list[ResponseValidationError] = []
        on_path = {question.id for question in survey.visible_questions(self.responses)}
        for question in survey.questions:
            response = self.responses.get(question.id)
            if response is None and (not question.required or question.id not in on_path):
                continue
            match question.validate(response):
                case Err(error):
                    errors.extend(error)
        if errors:
            return Err(errors)
        return Ok(self)
