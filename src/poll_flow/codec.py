"""Dict conversion for surveys and responses.

Encoding produces JSON-safe dicts. Decoding rebuilds entities through their
validating constructors, so a stored document can never yield an invalid
survey; any problem surfaces as Err(InvalidSurveyData).
"""

from datetime import datetime
from typing import Any

from .errors import InvalidSurveyData
from .graph import (
    AllOf,
    AnyOf,
    BooleanIs,
    Condition,
    Conditional,
    End,
    GoToIndex,
    GoToQuestion,
    IsAnswered,
    Linear,
    Not,
    OptionSelected,
    Resolver,
    TextEquals,
)
from .ids import QuestionId, ResponseId, SurveyId
from .questions import (
    BooleanQuestion,
    FreeTextQuestion,
    MultipleChoiceQuestion,
    Question,
    QuestionOption,
    TextConfig,
    TextInputType,
)
from .responses import BooleanResponse, MultipleChoiceResponse, QuestionResponse, TextResponse
from .result import Err, Ok, Result
from .survey import Survey, SurveyResponse, SurveySettings, ValidationStrategy

DECODE_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


def _parse_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _messages(errors: list) -> str:
    return "; ".join(error.message for error in errors)


# Conditions and resolvers

def condition_to_dict(condition: Condition) -> dict[str, Any]:
    if isinstance(condition, IsAnswered):
        return {"type": "answered", "question_id": condition.question_id.value}
    if isinstance(condition, BooleanIs):
        return {"type": "boolean", "question_id": condition.question_id.value, "value": condition.value}
    if isinstance(condition, OptionSelected):
        return {
            "type": "option",
            "question_id": condition.question_id.value,
            "option_id": condition.option_id,
        }
    if isinstance(condition, TextEquals):
        return {
            "type": "text",
            "question_id": condition.question_id.value,
            "value": condition.value,
            "case_sensitive": condition.case_sensitive,
        }
    if isinstance(condition, Not):
        return {"type": "not", "condition": condition_to_dict(condition.condition)}
    if isinstance(condition, AllOf):
        return {"type": "all", "conditions": [condition_to_dict(c) for c in condition.conditions]}
    if isinstance(condition, AnyOf):
        return {"type": "any", "conditions": [condition_to_dict(c) for c in condition.conditions]}
    raise TypeError(f"Unsupported condition type: {type(condition)}")


def condition_from_dict(d: dict[str, Any]) -> Condition:
    t = d["type"]
    if t == "answered":
        return IsAnswered(QuestionId.unsafe(d["question_id"]))
    if t == "boolean":
        return BooleanIs(QuestionId.unsafe(d["question_id"]), bool(d["value"]))
    if t == "option":
        return OptionSelected(QuestionId.unsafe(d["question_id"]), d["option_id"])
    if t == "text":
        return TextEquals(
            QuestionId.unsafe(d["question_id"]), d["value"], d.get("case_sensitive", False)
        )
    if t == "not":
        return Not(condition_from_dict(d["condition"]))
    if t == "all":
        return AllOf(tuple(condition_from_dict(c) for c in d["conditions"]))
    if t == "any":
        return AnyOf(tuple(condition_from_dict(c) for c in d["conditions"]))
    raise ValueError(f"Unsupported condition dict type: {t}")


def resolver_to_dict(resolver: Resolver) -> dict[str, Any]:
    if isinstance(resolver, Linear):
        return {"type": "linear"}
    if isinstance(resolver, End):
        return {"type": "end"}
    if isinstance(resolver, GoToQuestion):
        return {"type": "goto_question", "question_id": resolver.question_id.value}
    if isinstance(resolver, GoToIndex):
        return {"type": "goto_index", "index": resolver.index}
    if isinstance(resolver, Conditional):
        return {
            "type": "conditional",
            "condition": condition_to_dict(resolver.condition),
            "then": resolver_to_dict(resolver.then),
            "otherwise": resolver_to_dict(resolver.otherwise),
        }
    raise TypeError(f"Unsupported resolver type: {type(resolver)}")


def resolver_from_dict(d: dict[str, Any]) -> Resolver:
    t = d["type"]
    if t == "linear":
        return Linear()
    if t == "end":
        return End()
    if t == "goto_question":
        return GoToQuestion(QuestionId.unsafe(d["question_id"]))
    if t == "goto_index":
        return GoToIndex(int(d["index"]))
    if t == "conditional":
        return Conditional(
            condition=condition_from_dict(d["condition"]),
            then=resolver_from_dict(d.get("then", {"type": "linear"})),
            otherwise=resolver_from_dict(d.get("otherwise", {"type": "linear"})),
        )
    raise ValueError(f"Unsupported resolver dict type: {t}")


# Questions

def question_to_dict(q: Question) -> dict[str, Any]:
    d = {
        "kind": q.kind,
        "id": q.id.value,
        "text": q.text,
        "description": q.description,
        "required": q.required,
        "metadata": q.metadata,
    }
    if isinstance(q, BooleanQuestion):
        d.update(true_label=q.true_label, false_label=q.false_label)
    elif isinstance(q, MultipleChoiceQuestion):
        d.update(
            options=[
                {"id": o.id, "text": o.text, "value": o.value, "metadata": o.metadata}
                for o in q.options
            ],
            min_selections=q.min_selections,
            max_selections=q.max_selections,
        )
    elif isinstance(q, FreeTextQuestion):
        d["config"] = {
            "placeholder": q.config.placeholder,
            "max_length": q.config.max_length,
            "multiline": q.config.multiline,
            "input_type": q.config.input_type.value,
        }
    else:
        raise TypeError(f"Unsupported question type: {type(q)}")
    return d


def _question_from_dict(d: dict[str, Any], index: int) -> Result:
    common = dict(
        id=d["id"],
        text=d["text"],
        description=d.get("description"),
        required=d.get("required", False),
        metadata=d.get("metadata", {}),
        index=index,
    )
    kind = d["kind"]
    if kind == BooleanQuestion.kind:
        return BooleanQuestion.create(
            true_label=d.get("true_label", "Yes"),
            false_label=d.get("false_label", "No"),
            **common,
        )
    if kind == MultipleChoiceQuestion.kind:
        options = [
            QuestionOption(
                id=o["id"], text=o["text"], value=o.get("value"), metadata=o.get("metadata", {})
            )
            for o in d["options"]
        ]
        return MultipleChoiceQuestion.create(
            options=options,
            min_selections=d.get("min_selections", 1),
            max_selections=d.get("max_selections"),
            **common,
        )
    if kind == FreeTextQuestion.kind:
        c = d.get("config") or {}
        config = TextConfig(
            placeholder=c.get("placeholder"),
            max_length=c.get("max_length"),
            multiline=c.get("multiline", False),
            input_type=TextInputType(c.get("input_type", "plain")),
        )
        return FreeTextQuestion.create(config=config, **common)
    raise ValueError(f"Unsupported question kind: {kind}")


def question_from_dict(d: dict[str, Any], index: int = 0) -> Result:
    try:
        result = _question_from_dict(d, index)
    except DECODE_ERRORS as e:
        return Err(InvalidSurveyData(f"question {index}: {e!r}"))
    if result.is_err():
        return Err(InvalidSurveyData(_messages(result.error)))
    return result


# Surveys

def settings_to_dict(s: SurveySettings) -> dict[str, Any]:
    return {
        "allow_back_navigation": s.allow_back_navigation,
        "show_progress_indicator": s.show_progress_indicator,
        "randomize_questions": s.randomize_questions,
        "submit_on_complete": s.submit_on_complete,
        "save_progress_locally": s.save_progress_locally,
        "validation_strategy": s.validation_strategy.value,
    }


def settings_from_dict(d: dict[str, Any]) -> SurveySettings:
    defaults = SurveySettings()
    return SurveySettings(
        allow_back_navigation=d.get("allow_back_navigation", defaults.allow_back_navigation),
        show_progress_indicator=d.get("show_progress_indicator", defaults.show_progress_indicator),
        randomize_questions=d.get("randomize_questions", defaults.randomize_questions),
        submit_on_complete=d.get("submit_on_complete", defaults.submit_on_complete),
        save_progress_locally=d.get("save_progress_locally", defaults.save_progress_locally),
        validation_strategy=ValidationStrategy(
            d.get("validation_strategy", defaults.validation_strategy.value)
        ),
    )


def survey_to_dict(s: Survey) -> dict[str, Any]:
    return {
        "id": s.id.value,
        "title": s.title,
        "description": s.description,
        "version": s.version,
        "settings": settings_to_dict(s.settings),
        "metadata": s.metadata,
        "questions": [question_to_dict(q) for q in s.questions],
        "branches": {
            node.question.id.value: resolver_to_dict(node.resolver)
            for node in s.graph
            if not isinstance(node.resolver, Linear)
        },
    }


def survey_from_dict(d: dict[str, Any]) -> Result:
    """Rebuild a survey, reporting every invalid question at once."""
    try:
        questions: list[Question] = []
        problems: list[str] = []
        for index, item in enumerate(d.get("questions", [])):
            match question_from_dict(item, index):
                case Ok(question):
                    questions.append(question)
                case Err(error):
                    problems.append(error.reason)
        if problems:
            return Err(InvalidSurveyData("; ".join(problems)))

        branches = {
            QuestionId.unsafe(key): resolver_from_dict(value)
            for key, value in (d.get("branches") or {}).items()
        }
        result = Survey.create(
            id=d.get("id", ""),
            title=d.get("title", ""),
            questions=questions,
            description=d.get("description"),
            version=d.get("version", "1.0"),
            settings=settings_from_dict(d.get("settings") or {}),
            metadata=d.get("metadata", {}),
            branches=branches,
        )
    except DECODE_ERRORS as e:
        return Err(InvalidSurveyData(repr(e)))
    if result.is_err():
        return Err(InvalidSurveyData(_messages(result.error)))
    return result


# Responses

def response_to_dict(r: QuestionResponse) -> dict[str, Any]:
    d = {
        "kind": r.kind,
        "question_id": r.question_id.value,
        "timestamp": r.timestamp.isoformat(),
        "metadata": r.metadata,
    }
    if isinstance(r, MultipleChoiceResponse):
        d["selected_option_ids"] = list(r.selected_option_ids)
    elif isinstance(r, (BooleanResponse, TextResponse)):
        d["value"] = r.value
    else:
        raise TypeError(f"Unsupported response type: {type(r)}")
    return d


def response_from_dict(d: dict[str, Any]) -> QuestionResponse:
    question_id = QuestionId.unsafe(d["question_id"])
    timestamp = _parse_time(d["timestamp"])
    metadata = d.get("metadata", {})
    kind = d["kind"]
    if kind == BooleanResponse.kind:
        return BooleanResponse(question_id, bool(d["value"]), timestamp, metadata)
    if kind == TextResponse.kind:
        return TextResponse(question_id, str(d["value"]), timestamp, metadata)
    if kind == MultipleChoiceResponse.kind:
        match MultipleChoiceResponse.create(question_id, d["selected_option_ids"], timestamp, metadata):
            case Ok(response):
                return response
            case Err(errors):
                raise ValueError(_messages(errors))
    raise ValueError(f"Unsupported response kind: {kind}")


def survey_response_to_dict(r: SurveyResponse) -> dict[str, Any]:
    return {
        "survey_id": r.survey_id.value,
        "response_id": r.response_id.value,
        "started_at": r.started_at.isoformat(),
        "ended_at": r.ended_at.isoformat() if r.ended_at else None,
        "is_complete": r.is_complete,
        "responses": [response_to_dict(item) for item in r.responses.values()],
        "metadata": r.metadata,
    }


def survey_response_from_dict(d: dict[str, Any]) -> Result:
    try:
        answers = [response_from_dict(item) for item in d.get("responses", [])]
        ended_at = d.get("ended_at")
        return Ok(SurveyResponse(
            survey_id=SurveyId.unsafe(d["survey_id"]),
            response_id=ResponseId.unsafe(d["response_id"]),
            started_at=_parse_time(d["started_at"]),
            ended_at=_parse_time(ended_at) if ended_at else None,
            is_complete=d.get("is_complete", False),
            responses={answer.question_id: answer for answer in answers},
            metadata=d.get("metadata", {}),
        ))
    except DECODE_ERRORS as e:
        return Err(InvalidSurveyData(repr(e)))
