"""Typed identifiers for surveys, questions and responses."""

import uuid
from dataclasses import dataclass

from .errors import EmptyQuestionId, EmptySurveyId
from .result import Err, Ok, Result


@dataclass(frozen=True)
class SurveyId:
    """Identifier of a survey. Never blank when built through create()."""
    value: str

    @classmethod
    def create(cls, value: str) -> Result:
        if not value or not value.strip():
            return Err([EmptySurveyId()])
        return Ok(cls(value))

    @classmethod
    def unsafe(cls, value: str) -> "SurveyId":
        """Build without validation, for trusted reconstruction only."""
        return cls(value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class QuestionId:
    """Identifier of a question, unique within its survey."""
    value: str

    @classmethod
    def create(cls, value: str, index: int = 0) -> Result:
        """Validate a raw id; `index` is the question position used in errors."""
        if not value or not value.strip():
            return Err([EmptyQuestionId(question_index=index)])
        return Ok(cls(value))

    @classmethod
    def unsafe(cls, value: str) -> "QuestionId":
        return cls(value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ResponseId:
    """Identifier of one survey attempt. Generated, never user-supplied."""
    value: str

    @classmethod
    def generate(cls) -> "ResponseId":
        return cls(str(uuid.uuid4()))

    @classmethod
    def unsafe(cls, value: str) -> "ResponseId":
        return cls(value)

    def __str__(self) -> str:
        return self.value
