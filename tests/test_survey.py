"""Tests for the survey and survey response aggregates."""

from datetime import timedelta

import pytest

from poll_flow.errors import (
    DuplicateQuestionId,
    EmptySurveyId,
    EmptySurveyTitle,
    InvalidBranchTarget,
    InvalidSelection,
    NoQuestions,
    RequiredFieldMissing,
)
from poll_flow.graph import BooleanIs, Conditional, GoToQuestion
from poll_flow.ids import QuestionId, SurveyId
from poll_flow.questions import BooleanQuestion, FreeTextQuestion
from poll_flow.responses import BooleanResponse, MultipleChoiceResponse, TextResponse
from poll_flow.survey import Survey, SurveyResponse, SurveySettings, ValidationStrategy


def boolean(id: str, required: bool = False) -> BooleanQuestion:
    return BooleanQuestion.create(id=id, text=f"Question {id}?", required=required).unwrap()


class TestSurveyCreate:
    def test_entry_is_first_question(self, linear_survey, three_questions) -> None:
        assert linear_survey.entry.question == three_questions[0]
        assert linear_survey.questions == tuple(three_questions)
        assert linear_survey.settings == SurveySettings()
        assert linear_survey.version == "1.0"

    def test_all_structural_errors_reported(self) -> None:
        result = Survey.create(id="", title=" ", questions=[])

        assert result.is_err()
        assert result.error == [EmptySurveyId(), EmptySurveyTitle(), NoQuestions()]

    def test_one_error_per_duplicated_id(self) -> None:
        questions = [boolean("a"), boolean("b"), boolean("a"), boolean("a"), boolean("b"), boolean("c")]

        result = Survey.create(id="s", title="Dupes", questions=questions)

        assert result.error == [
            DuplicateQuestionId(QuestionId("a")),
            DuplicateQuestionId(QuestionId("b")),
        ]

    def test_branch_errors_reported(self) -> None:
        questions = [boolean("a"), boolean("b")]

        result = Survey.create(
            id="s", title="Branches", questions=questions,
            branches={"b": GoToQuestion(QuestionId("a"))},
        )

        assert result.error == [
            InvalidBranchTarget(QuestionId("b"), "a", "branches must point forward"),
        ]

    def test_equality_is_structural(self, make_survey, three_questions) -> None:
        assert make_survey(three_questions) == make_survey(three_questions)
        assert make_survey(three_questions) != make_survey(three_questions, title="Other")

    def test_surveys_are_unhashable(self, linear_survey) -> None:
        with pytest.raises(TypeError):
            hash(linear_survey)

    def test_find_question(self, linear_survey, q2) -> None:
        assert linear_survey.find_question(q2.id) == q2
        assert linear_survey.find_question(QuestionId("missing")) is None

    def test_visible_questions_follow_branches(self, example_survey) -> None:
        satisfied = QuestionId("satisfied")
        happy = {satisfied: BooleanResponse(satisfied, True)}

        visible = [q.id.value for q in example_survey.visible_questions(happy)]

        assert visible == ["name", "email", "satisfied", "comments"]


class TestSurveyResponse:
    def test_fresh_response(self, fixed_time) -> None:
        response = SurveyResponse.create(SurveyId("s"), now=fixed_time)

        assert response.responses == {}
        assert not response.is_complete
        assert response.ended_at is None
        assert response.started_at == fixed_time

    def test_add_then_get(self, q1) -> None:
        answer = BooleanResponse(q1.id, True)
        original = SurveyResponse.create(SurveyId("s"))

        updated = original.add_response(answer)

        assert updated.get_response(q1.id) == answer
        assert original.get_response(q1.id) is None

    def test_add_overwrites(self, q1) -> None:
        response = (
            SurveyResponse.create(SurveyId("s"))
            .add_response(BooleanResponse(q1.id, True))
            .add_response(BooleanResponse(q1.id, False))
        )

        assert len(response.responses) == 1
        assert response.get_response(q1.id).value is False

    def test_remove_response(self, q1) -> None:
        response = SurveyResponse.create(SurveyId("s")).add_response(BooleanResponse(q1.id, True))

        assert response.remove_response(q1.id).responses == {}

    def test_mark_complete_is_monotonic(self, fixed_time) -> None:
        response = SurveyResponse.create(SurveyId("s"), now=fixed_time)

        completed = response.mark_complete(now=fixed_time - timedelta(hours=1))

        assert completed.is_complete
        assert completed.ended_at >= completed.started_at

    def test_mark_complete_keeps_first_stamp(self, fixed_time) -> None:
        completed = SurveyResponse.create(SurveyId("s"), now=fixed_time).mark_complete(
            now=fixed_time + timedelta(minutes=5)
        )

        again = completed.mark_complete(now=fixed_time + timedelta(days=1))

        assert again.ended_at == fixed_time + timedelta(minutes=5)

    def test_with_metadata_merges(self) -> None:
        response = SurveyResponse.create(SurveyId("s")).with_metadata(channel="web")

        assert response.with_metadata(lang="en").metadata == {"channel": "web", "lang": "en"}


class TestValidateWith:
    def test_missing_required_answer(self, linear_survey, q1) -> None:
        response = SurveyResponse.create(linear_survey.id)

        assert response.validate_with(linear_survey).error == [RequiredFieldMissing(q1.id)]

    def test_invalid_answers_accumulate(self, linear_survey, q1, q3) -> None:
        response = SurveyResponse.create(linear_survey.id).add_response(
            MultipleChoiceResponse.create(q3.id, ["red", "green", "blue"]).unwrap()
        )

        result = response.validate_with(linear_survey)

        assert result.error == [
            RequiredFieldMissing(q1.id),
            InvalidSelection(q3.id, "Must select between 1 and 2 options"),
        ]

    def test_skipped_required_question_is_not_missing(self, example_survey) -> None:
        response = SurveyResponse.create(example_survey.id)
        for answer in (
            TextResponse(QuestionId("name"), "Ada"),
            BooleanResponse(QuestionId("satisfied"), True),
        ):
            response = response.add_response(answer)

        assert response.validate_with(example_survey).is_ok()

    def test_branch_taken_requires_its_questions(self, example_survey) -> None:
        response = SurveyResponse.create(example_survey.id)
        for answer in (
            TextResponse(QuestionId("name"), "Ada"),
            BooleanResponse(QuestionId("satisfied"), False),
        ):
            response = response.add_response(answer)

        assert response.validate_with(example_survey).error == [
            RequiredFieldMissing(QuestionId("improvements")),
        ]


class TestSettings:
    def test_defaults(self) -> None:
        settings = SurveySettings()

        assert settings.allow_back_navigation
        assert settings.submit_on_complete
        assert settings.save_progress_locally
        assert not settings.randomize_questions
        assert settings.validation_strategy is ValidationStrategy.IMMEDIATE

    def test_branching_survey_builds(self) -> None:
        questions = [boolean("a"), FreeTextQuestion.create(id="b", text="Why?").unwrap(), boolean("c")]

        survey = Survey.create(
            id="s", title="T", questions=questions,
            branches={"a": Conditional(BooleanIs(QuestionId("a"), True), then=GoToQuestion(QuestionId("c")))},
        ).unwrap()

        assert survey.graph.entry.resolver != survey.graph.node(1).resolver
