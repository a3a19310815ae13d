"""Answers given to individual questions."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Iterable, Optional

from .errors import InvalidSelection
from .ids import QuestionId
from .result import Err, Ok, Result


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuestionResponse:
    """Base for every response variant. Responses are replaced, never mutated."""

    kind: ClassVar[str]

    question_id: QuestionId
    timestamp: datetime
    metadata: dict[str, Any]


@dataclass(frozen=True)
class BooleanResponse(QuestionResponse):
    """Yes/no answer."""
    kind: ClassVar[str] = "boolean"

    question_id: QuestionId
    value: bool
    timestamp: datetime = field(default_factory=utc_now)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TextResponse(QuestionResponse):
    """Free-text answer."""
    kind: ClassVar[str] = "text"

    question_id: QuestionId
    value: str
    timestamp: datetime = field(default_factory=utc_now)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MultipleChoiceResponse(QuestionResponse):
    """Non-empty selection of option ids, in the order they were picked.

    Build it through create(), which rejects an empty selection. Duplicate ids
    are dropped however the response is built.
    """
    kind: ClassVar[str] = "multiple_choice"

    question_id: QuestionId
    selected_option_ids: tuple[str, ...]
    timestamp: datetime = field(default_factory=utc_now)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "selected_option_ids", tuple(dict.fromkeys(self.selected_option_ids)))

    @classmethod
    def create(
        cls,
        question_id: QuestionId,
        selected_option_ids: Iterable[str],
        timestamp: Optional[datetime] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Result:
        selections = tuple(dict.fromkeys(selected_option_ids))
        if not selections:
            return Err([InvalidSelection(question_id, "Must select at least one option")])
        return Ok(cls(
            question_id=question_id,
            selected_option_ids=selections,
            timestamp=timestamp or utc_now(),
            metadata=dict(metadata or {}),
        ))
