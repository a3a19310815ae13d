"""Error taxonomy.

Errors are plain values grouped by concern. Construction and validation
errors travel as non-empty lists; navigation and data-access errors travel
one at a time, except CompositeError which nests every individual failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .ids import QuestionId, ResponseId, SurveyId


class SurveyError:
    """Root of every error value produced by the package."""

    @property
    def message(self) -> str:
        return type(self).__name__


# Survey construction

class SurveyValidationError(SurveyError):
    """A survey could not be built."""


@dataclass(frozen=True)
class EmptySurveyTitle(SurveyValidationError):
    @property
    def message(self) -> str:
        return "Survey title must not be blank."


@dataclass(frozen=True)
class EmptySurveyId(SurveyValidationError):
    @property
    def message(self) -> str:
        return "Survey id must not be blank."


@dataclass(frozen=True)
class NoQuestions(SurveyValidationError):
    @property
    def message(self) -> str:
        return "Survey must contain at least one question."


@dataclass(frozen=True)
class DuplicateQuestionId(SurveyValidationError):
    question_id: QuestionId

    @property
    def message(self) -> str:
        return f"Question id '{self.question_id}' is used more than once."


@dataclass(frozen=True)
class UnknownBranchSource(SurveyValidationError):
    question_id: QuestionId

    @property
    def message(self) -> str:
        return f"Branch declared for unknown question '{self.question_id}'."


@dataclass(frozen=True)
class InvalidBranchTarget(SurveyValidationError):
    question_id: QuestionId
    target: str
    reason: str

    @property
    def message(self) -> str:
        return f"Branch from '{self.question_id}' to '{self.target}': {self.reason}"


# Question construction

class QuestionValidationError(SurveyError):
    """A question could not be built."""


@dataclass(frozen=True)
class EmptyQuestionText(QuestionValidationError):
    question_id: QuestionId

    @property
    def message(self) -> str:
        return f"Question '{self.question_id}' has no text."


@dataclass(frozen=True)
class EmptyQuestionId(QuestionValidationError):
    question_index: int

    @property
    def message(self) -> str:
        return f"Question at position {self.question_index} has a blank id."


@dataclass(frozen=True)
class InvalidQuestionConfig(QuestionValidationError):
    question_id: QuestionId
    reason: str

    @property
    def message(self) -> str:
        return f"Question '{self.question_id}' is misconfigured: {self.reason}"


# Response validation

class ResponseValidationError(SurveyError):
    """A response was rejected by its question."""


@dataclass(frozen=True)
class RequiredFieldMissing(ResponseValidationError):
    question_id: QuestionId

    @property
    def message(self) -> str:
        return f"Question '{self.question_id}' requires an answer."


@dataclass(frozen=True)
class InvalidResponseType(ResponseValidationError):
    question_id: QuestionId
    expected: str
    actual: str

    @property
    def message(self) -> str:
        return (
            f"Question '{self.question_id}' expected {self.expected}, "
            f"got {self.actual}."
        )


@dataclass(frozen=True)
class ValueOutOfRange(ResponseValidationError):
    question_id: QuestionId
    value: Any
    range: str

    @property
    def message(self) -> str:
        return f"Value {self.value!r} for '{self.question_id}' is outside {self.range}."


@dataclass(frozen=True)
class TextTooLong(ResponseValidationError):
    question_id: QuestionId
    length: int
    max_length: int

    @property
    def message(self) -> str:
        return (
            f"Answer to '{self.question_id}' is {self.length} characters, "
            f"the limit is {self.max_length}."
        )


@dataclass(frozen=True)
class InvalidSelection(ResponseValidationError):
    question_id: QuestionId
    reason: str

    @property
    def message(self) -> str:
        return f"Invalid selection for '{self.question_id}': {self.reason}"


@dataclass(frozen=True)
class InvalidFileType(ResponseValidationError):
    question_id: QuestionId
    file_type: str
    allowed: frozenset[str] = field(default_factory=frozenset)

    @property
    def message(self) -> str:
        allowed = ", ".join(sorted(self.allowed))
        return f"File type '{self.file_type}' is not allowed (allowed: {allowed})."


@dataclass(frozen=True)
class QuestionMismatch(ResponseValidationError):
    question_id: QuestionId
    expected: QuestionId

    @property
    def message(self) -> str:
        return (
            f"Response for '{self.question_id}' does not answer the current "
            f"question '{self.expected}'."
        )


@dataclass(frozen=True)
class NoCurrentQuestion(ResponseValidationError):
    question_id: QuestionId

    @property
    def message(self) -> str:
        return f"Response for '{self.question_id}' arrived with no question on screen."


# Navigation

class NavigationError(SurveyError):
    """A flow could not move."""


@dataclass(frozen=True)
class NoNextQuestion(NavigationError):
    @property
    def message(self) -> str:
        return "There is no next question."


@dataclass(frozen=True)
class NoPreviousQuestion(NavigationError):
    @property
    def message(self) -> str:
        return "There is no previous question."


@dataclass(frozen=True)
class NavigationBlocked(NavigationError):
    reason: str

    @property
    def message(self) -> str:
        return self.reason


# Data access

class SurveyDataError(SurveyError):
    """Loading, saving or submitting failed."""


@dataclass(frozen=True)
class SurveyNotFound(SurveyDataError):
    survey_id: SurveyId

    @property
    def message(self) -> str:
        return f"Survey '{self.survey_id}' not found."


@dataclass(frozen=True)
class ResponseNotFound(SurveyDataError):
    response_id: ResponseId

    @property
    def message(self) -> str:
        return f"Response '{self.response_id}' not found."


@dataclass(frozen=True)
class InvalidSurveyData(SurveyDataError):
    reason: str

    @property
    def message(self) -> str:
        return f"Invalid survey data: {self.reason}"


@dataclass(frozen=True)
class PersistenceError(SurveyDataError):
    cause: BaseException

    @property
    def message(self) -> str:
        return f"Persistence failed: {self.cause}"


@dataclass(frozen=True)
class NetworkError(SurveyDataError):
    cause: BaseException

    @property
    def message(self) -> str:
        return f"Network failure: {self.cause}"


@dataclass(frozen=True)
class CompositeError(SurveyDataError):
    """Every failure of a composite call; `primary` is the one to show first."""
    primary: SurveyDataError
    all: tuple[SurveyDataError, ...]

    @property
    def message(self) -> str:
        return f"{len(self.all)} backend(s) failed; first reported: {self.primary.message}"
