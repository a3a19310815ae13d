"""Example survey used by the demo entry point and the tests."""

from .graph import BooleanIs, Conditional, GoToQuestion
from .ids import QuestionId
from .questions import (
    BooleanQuestion,
    FreeTextQuestion,
    MultipleChoiceQuestion,
    QuestionOption,
    TextConfig,
    TextInputType,
)
from .survey import Survey, SurveySettings


def build_example_survey(settings: SurveySettings = SurveySettings()) -> Survey:
    """Feedback survey that skips the improvement question for satisfied users."""
    questions = [
        FreeTextQuestion.create(
            id="name",
            text="What is your name?",
            required=True,
            config=TextConfig(max_length=100),
            index=0,
        ).unwrap(),
        FreeTextQuestion.create(
            id="email",
            text="Where can we reach you?",
            description="Optional, only used for follow-up.",
            config=TextConfig(input_type=TextInputType.EMAIL),
            index=1,
        ).unwrap(),
        BooleanQuestion.create(
            id="satisfied",
            text="Are you satisfied with the service?",
            required=True,
            index=2,
        ).unwrap(),
        MultipleChoiceQuestion.create(
            id="improvements",
            text="What should we improve?",
            options=[
                QuestionOption("speed", "Speed"),
                QuestionOption("design", "Design"),
                QuestionOption("support", "Support"),
                QuestionOption("pricing", "Pricing"),
            ],
            required=True,
            max_selections=2,
            index=3,
        ).unwrap(),
        FreeTextQuestion.create(
            id="comments",
            text="Anything else?",
            config=TextConfig(max_length=500, multiline=True),
            index=4,
        ).unwrap(),
    ]
    branches = {
        QuestionId("satisfied"): Conditional(
            condition=BooleanIs(QuestionId("satisfied"), True),
            then=GoToQuestion(QuestionId("comments")),
        ),
    }
    return Survey.create(
        id="customer-feedback",
        title="Customer Feedback",
        description="Help us improve our service",
        questions=questions,
        settings=settings,
        branches=branches,
    ).unwrap()
