"""Question variants and their response rules."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional

from .errors import (
    EmptyQuestionText,
    InvalidQuestionConfig,
    InvalidResponseType,
    InvalidSelection,
    QuestionMismatch,
    QuestionValidationError,
    RequiredFieldMissing,
    ResponseValidationError,
    TextTooLong,
)
from .ids import QuestionId
from .responses import BooleanResponse, MultipleChoiceResponse, QuestionResponse, TextResponse
from .result import Err, Ok, Result


def _check_identity(
    id: str, text: str, index: int
) -> tuple[QuestionId, list[QuestionValidationError]]:
    """Validate id and text together; a placeholder id stands in on failure."""
    errors: list[QuestionValidationError] = []
    match QuestionId.create(id, index):
        case Ok(value):
            question_id = value
        case Err(error):
            errors.extend(error)
            question_id = QuestionId.unsafe(f"question-{index}")
    if not text or not text.strip():
        errors.append(EmptyQuestionText(question_id))
    return question_id, errors


class Question(ABC):
    """Base for every question variant.

    Subclasses are frozen dataclasses built through their ``create`` factory and
    declare which response variant they accept in ``response_type``.
    """

    kind: ClassVar[str]
    response_type: ClassVar[type]

    id: QuestionId
    text: str
    description: Optional[str]
    required: bool
    metadata: dict[str, Any]

    def validate(self, response: Optional[QuestionResponse]) -> Result:
        """Check a response against this question.

        Returns Ok(response) unchanged, Ok(None) for an acceptable absent answer,
        or Err with every problem found.
        """
        if response is None:
            if self.required:
                return Err([RequiredFieldMissing(self.id)])
            return Ok(None)
        if response.question_id != self.id:
            return Err([QuestionMismatch(response.question_id, self.id)])
        if not isinstance(response, self.response_type):
            return Err([
                InvalidResponseType(
                    self.id, self.response_type.__name__, type(response).__name__
                )
            ])
        errors = self._check(response)
        if errors:
            return Err(errors)
        return Ok(response)

    @abstractmethod
    def _check(self, response: QuestionResponse) -> list[ResponseValidationError]:
        """Variant-specific rules for a response of the right type."""


@dataclass(frozen=True)
class BooleanQuestion(Question):
    """Yes/no question."""
    kind: ClassVar[str] = "boolean"
    response_type: ClassVar[type] = BooleanResponse

    id: QuestionId
    text: str
    description: Optional[str] = None
    required: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    true_label: str = "Yes"
    false_label: str = "No"

    @classmethod
    def create(
        cls,
        id: str,
        text: str,
        description: Optional[str] = None,
        required: bool = False,
        metadata: Optional[dict[str, Any]] = None,
        true_label: str = "Yes",
        false_label: str = "No",
        index: int = 0,
    ) -> Result:
        question_id, errors = _check_identity(id, text, index)
        if errors:
            return Err(errors)
        return Ok(cls(
            id=question_id,
            text=text,
            description=description,
            required=required,
            metadata=dict(metadata or {}),
            true_label=true_label,
            false_label=false_label,
        ))

    def _check(self, response: QuestionResponse) -> list[ResponseValidationError]:
        return []


@dataclass(frozen=True)
class QuestionOption:
    """One choice offered by a multiple-choice question."""
    id: str
    text: str
    value: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MultipleChoiceQuestion(Question):
    """Question answered by selecting between min_selections and max_selections options."""
    kind: ClassVar[str] = "multiple_choice"
    response_type: ClassVar[type] = MultipleChoiceResponse

    id: QuestionId
    text: str
    options: tuple[QuestionOption, ...]
    min_selections: int
    max_selections: int
    description: Optional[str] = None
    required: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        id: str,
        text: str,
        options: list[QuestionOption],
        description: Optional[str] = None,
        required: bool = False,
        metadata: Optional[dict[str, Any]] = None,
        min_selections: int = 1,
        max_selections: Optional[int] = None,
        index: int = 0,
    ) -> Result:
        question_id, errors = _check_identity(id, text, index)
        options = tuple(options)

        if not options:
            errors.append(InvalidQuestionConfig(question_id, "Must have at least one option"))
        option_ids = [option.id for option in options]
        if any(not option_id or not option_id.strip() for option_id in option_ids):
            errors.append(InvalidQuestionConfig(question_id, "Option ids must not be blank"))
        duplicates = sorted({o for o in option_ids if option_ids.count(o) > 1})
        if duplicates:
            errors.append(InvalidQuestionConfig(
                question_id, f"Duplicate option ids: {', '.join(duplicates)}"
            ))

        max_sel = len(options) if max_selections is None else max_selections
        if min_selections < 1:
            errors.append(InvalidQuestionConfig(question_id, "min_selections must be at least 1"))
        if options:
            if min_selections > max_sel:
                errors.append(InvalidQuestionConfig(
                    question_id, "min_selections cannot be greater than max_selections"
                ))
            if max_sel > len(options):
                errors.append(InvalidQuestionConfig(
                    question_id, "max_selections cannot exceed the number of options"
                ))

        if errors:
            return Err(errors)
        return Ok(cls(
            id=question_id,
            text=text,
            options=options,
            min_selections=min_selections,
            max_selections=max_sel,
            description=description,
            required=required,
            metadata=dict(metadata or {}),
        ))

    @property
    def selection_range(self) -> range:
        return range(self.min_selections, self.max_selections + 1)

    def option(self, option_id: str) -> Optional[QuestionOption]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def _range_message(self) -> str:
        if self.min_selections == self.max_selections:
            count = self.min_selections
            return f"Must select exactly {count} option" + ("" if count == 1 else "s")
        return f"Must select between {self.min_selections} and {self.max_selections} options"

    def _check(self, response: QuestionResponse) -> list[ResponseValidationError]:
        errors: list[ResponseValidationError] = []
        selected = tuple(dict.fromkeys(response.selected_option_ids))
        if len(selected) not in self.selection_range:
            errors.append(InvalidSelection(self.id, self._range_message()))
        unknown = [option_id for option_id in selected if self.option(option_id) is None]
        if unknown:
            errors.append(InvalidSelection(self.id, f"Unknown options: {', '.join(unknown)}"))
        return errors


class TextInputType(Enum):
    """Syntax expected from a free-text answer."""
    PLAIN = "plain"
    EMAIL = "email"
    URL = "url"
    PHONE = "phone"


@dataclass(frozen=True)
class TextConfig:
    """Constraints and hints for free-text input."""
    placeholder: Optional[str] = None
    max_length: Optional[int] = None
    multiline: bool = False
    input_type: TextInputType = TextInputType.PLAIN


@dataclass(frozen=True)
class FreeTextQuestion(Question):
    """Open-ended text question."""
    kind: ClassVar[str] = "free_text"
    response_type: ClassVar[type] = TextResponse

    EMAIL_REGEX: ClassVar[re.Pattern] = re.compile(
        r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    )
    URL_REGEX: ClassVar[re.Pattern] = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)
    PHONE_REGEX: ClassVar[re.Pattern] = re.compile(r"^\+?[0-9][0-9 ()\-.]{5,18}[0-9]$")

    id: QuestionId
    text: str
    description: Optional[str] = None
    required: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    config: TextConfig = field(default_factory=TextConfig)

    @classmethod
    def create(
        cls,
        id: str,
        text: str,
        description: Optional[str] = None,
        required: bool = False,
        metadata: Optional[dict[str, Any]] = None,
        config: Optional[TextConfig] = None,
        index: int = 0,
    ) -> Result:
        question_id, errors = _check_identity(id, text, index)
        config = config or TextConfig()
        if config.max_length is not None and config.max_length < 1:
            errors.append(InvalidQuestionConfig(question_id, "max_length must be positive"))
        if errors:
            return Err(errors)
        return Ok(cls(
            id=question_id,
            text=text,
            description=description,
            required=required,
            metadata=dict(metadata or {}),
            config=config,
        ))

    def _check(self, response: QuestionResponse) -> list[ResponseValidationError]:
        errors: list[ResponseValidationError] = []
        value = response.value
        if self.config.max_length is not None and len(value) > self.config.max_length:
            errors.append(TextTooLong(self.id, len(value), self.config.max_length))

        match self.config.input_type:
            case TextInputType.EMAIL if not self.EMAIL_REGEX.match(value):
                errors.append(InvalidResponseType(self.id, "valid email address", value))
            case TextInputType.URL if not self.URL_REGEX.match(value):
                errors.append(InvalidResponseType(self.id, "valid URL", value))
            case TextInputType.PHONE if not self.PHONE_REGEX.match(value):
                errors.append(InvalidResponseType(self.id, "valid phone number", value))
        return errors
