"""Tests for composite sources and remotes."""

from unittest.mock import AsyncMock

import pytest

from poll_flow.errors import CompositeError, NetworkError, PersistenceError, SurveyNotFound
from poll_flow.ids import SurveyId
from poll_flow.repository.base import SurveyRemote
from poll_flow.repository.composite import CompositeSurveyRemote, CompositeSurveySource
from poll_flow.repository.memory import InMemorySurveySource
from poll_flow.result import Err, Ok
from poll_flow.survey import SurveyResponse


class RecordingRemote(SurveyRemote):
    """Remote that accepts or rejects everything and records what it saw."""

    def __init__(self, name: str, fail: bool = False):
        self.name = name
        self.fail = fail
        self.submitted = []
        self.batches = []

    @property
    def identifier(self) -> str:
        return self.name

    async def submit_response(self, response):
        if self.fail:
            return Err(NetworkError(ConnectionError(f"{self.name} down")))
        self.submitted.append(response)
        return Ok(None)

    async def submit_batch(self, responses):
        if self.fail:
            return Err(NetworkError(ConnectionError(f"{self.name} down")))
        self.batches.append(list(responses))
        return Ok(None)


@pytest.fixture
def survey_response(linear_survey) -> SurveyResponse:
    return SurveyResponse.create(linear_survey.id)


class TestCompositeSource:
    @pytest.mark.asyncio
    async def test_falls_back_to_lowest_priority(self, linear_survey) -> None:
        high = InMemorySurveySource(priority=10)
        middle = InMemorySurveySource(priority=5)
        low = InMemorySurveySource([linear_survey], priority=1)
        composite = CompositeSurveySource([low, high, middle])

        result = await composite.load_survey(linear_survey.id)

        assert result.unwrap() == linear_survey
        assert [source.priority for source in composite.sources] == [10, 5, 1]
        assert composite.priority == 10

    @pytest.mark.asyncio
    async def test_first_hit_wins(self, linear_survey, make_survey, three_questions) -> None:
        shadow = make_survey(three_questions, title="Shadow")
        composite = CompositeSurveySource([
            InMemorySurveySource([linear_survey], priority=1),
            InMemorySurveySource([shadow], priority=9),
        ])

        result = await composite.load_survey(linear_survey.id)

        assert result.unwrap().title == "Shadow"

    @pytest.mark.asyncio
    async def test_all_failures_kept(self) -> None:
        missing = SurveyId("missing")
        broken = AsyncMock()
        broken.priority = 3
        broken.load_survey.side_effect = OSError("unreadable")
        composite = CompositeSurveySource([InMemorySurveySource(priority=7), broken])

        result = await composite.load_survey(missing)

        error = result.error
        assert isinstance(error, CompositeError)
        assert error.all[0] == SurveyNotFound(missing)
        assert isinstance(error.all[1], PersistenceError)
        assert error.primary is error.all[1]

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError):
            CompositeSurveySource([])


class TestCompositeRemote:
    @pytest.mark.asyncio
    async def test_single_submit_needs_one_success(self, survey_response) -> None:
        failing, working = RecordingRemote("a", fail=True), RecordingRemote("b")
        composite = CompositeSurveyRemote([failing, working])

        assert await composite.submit_response(survey_response) == Ok(None)
        assert working.submitted == [survey_response]

    @pytest.mark.asyncio
    async def test_batch_fails_fast(self, survey_response) -> None:
        failing, working = RecordingRemote("a", fail=True), RecordingRemote("b")
        composite = CompositeSurveyRemote([failing, working])

        result = await composite.submit_batch([survey_response])

        assert isinstance(result.error, NetworkError)
        assert working.batches == []

    @pytest.mark.asyncio
    async def test_batch_reaches_every_remote(self, survey_response) -> None:
        first, second = RecordingRemote("a"), RecordingRemote("b")

        result = await CompositeSurveyRemote([first, second]).submit_batch([survey_response])

        assert result.is_ok()
        assert first.batches == second.batches == [[survey_response]]

    @pytest.mark.asyncio
    async def test_all_remotes_failing(self, survey_response) -> None:
        raising = AsyncMock()
        raising.identifier = "raising"
        raising.submit_response.side_effect = TimeoutError("slow")
        composite = CompositeSurveyRemote([RecordingRemote("a", fail=True), raising])

        result = await composite.submit_response(survey_response)

        error = result.error
        assert isinstance(error, CompositeError)
        assert len(error.all) == 2
        assert error.primary is error.all[0]
        assert "a down" in error.primary.message
        assert isinstance(error.all[1].cause, TimeoutError)

    @pytest.mark.asyncio
    async def test_fetch_survey_unsupported_by_default(self) -> None:
        result = await CompositeSurveyRemote([RecordingRemote("a")]).fetch_survey(SurveyId("s"))

        assert isinstance(result.error, CompositeError)
        assert isinstance(result.error.primary.cause, NotImplementedError)

    def test_identifier_lists_members(self) -> None:
        composite = CompositeSurveyRemote([RecordingRemote("a"), RecordingRemote("b")])

        assert composite.identifier == "composite[a,b]"

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError):
            CompositeSurveyRemote([])
