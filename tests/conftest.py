"""Shared fixtures."""

from datetime import datetime, timezone

import pytest

from poll_flow.questions import (
    BooleanQuestion,
    FreeTextQuestion,
    MultipleChoiceQuestion,
    QuestionOption,
)
from poll_flow.repository.memory import InMemorySurveySink
from poll_flow.sample import build_example_survey
from poll_flow.survey import Survey, SurveySettings


@pytest.fixture
def q1() -> BooleanQuestion:
    return BooleanQuestion.create(id="q1", text="Do you agree?", required=True).unwrap()


@pytest.fixture
def q2() -> FreeTextQuestion:
    return FreeTextQuestion.create(id="q2", text="Why?", index=1).unwrap()


@pytest.fixture
def q3() -> MultipleChoiceQuestion:
    return MultipleChoiceQuestion.create(
        id="q3",
        text="Pick colours",
        options=[
            QuestionOption("red", "Red"),
            QuestionOption("green", "Green"),
            QuestionOption("blue", "Blue"),
        ],
        min_selections=1,
        max_selections=2,
        index=2,
    ).unwrap()


@pytest.fixture
def three_questions(q1, q2, q3) -> list:
    return [q1, q2, q3]


@pytest.fixture
def make_survey():
    """Build a valid survey from questions, unwrapping the result."""
    def build(questions, settings=None, branches=None, id="survey-1", title="Test Survey") -> Survey:
        return Survey.create(
            id=id,
            title=title,
            questions=questions,
            settings=settings,
            branches=branches,
        ).unwrap()

    return build


@pytest.fixture
def linear_survey(make_survey, three_questions) -> Survey:
    return make_survey(three_questions)


@pytest.fixture
def example_survey() -> Survey:
    return build_example_survey()


@pytest.fixture
def no_back_settings() -> SurveySettings:
    return SurveySettings(allow_back_navigation=False)


@pytest.fixture
def sink() -> InMemorySurveySink:
    return InMemorySurveySink()


@pytest.fixture
def fixed_time() -> datetime:
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
