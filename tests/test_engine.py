"""Tests for the survey engine and the demo entry point."""

from unittest.mock import AsyncMock

import pytest

from poll_flow.config.settings import EngineSettings, Settings
from poll_flow.engine import SurveyEngine, SurveySystemConfig
from poll_flow.errors import (
    CompositeError,
    NavigationBlocked,
    NetworkError,
    PersistenceError,
    RequiredFieldMissing,
)
from poll_flow.ids import QuestionId
from poll_flow.main import run_demo
from poll_flow.repository.memory import InMemorySurveySink, InMemorySurveySource
from poll_flow.responses import BooleanResponse, TextResponse
from poll_flow.result import Err, Ok
from poll_flow.sample import build_example_survey
from poll_flow.survey import SurveyResponse, SurveySettings


@pytest.fixture
def remote() -> AsyncMock:
    remote = AsyncMock()
    remote.identifier = "mock"
    remote.submit_response.return_value = Ok(None)
    return remote


@pytest.fixture
def engine(example_survey, sink, remote) -> SurveyEngine:
    source = InMemorySurveySource([example_survey])
    return SurveyEngine(SurveySystemConfig(source=source, sink=sink, remotes=[remote]))


def happy_response(survey) -> SurveyResponse:
    return (
        SurveyResponse.create(survey.id)
        .add_response(TextResponse(QuestionId("name"), "Ada"))
        .add_response(BooleanResponse(QuestionId("satisfied"), True))
    )


class TestLoadSurvey:
    @pytest.mark.asyncio
    async def test_loaded_survey_cached_in_sink(self, engine, example_survey, sink) -> None:
        result = await engine.load_survey(example_survey.id)

        assert result == Ok(example_survey)
        assert sink.surveys[example_survey.id] == example_survey

    @pytest.mark.asyncio
    async def test_cache_disabled(self, example_survey, sink) -> None:
        engine = SurveyEngine(SurveySystemConfig(
            source=InMemorySurveySource([example_survey]),
            sink=sink,
            settings=EngineSettings(cache_enabled=False),
        ))

        await engine.load_survey(example_survey.id)

        assert sink.surveys == {}
        assert engine.remote is None

    @pytest.mark.asyncio
    async def test_cache_failure_not_returned(self, example_survey) -> None:
        sink = AsyncMock()
        sink.save_survey.return_value = Err(PersistenceError(OSError("read-only")))
        engine = SurveyEngine(SurveySystemConfig(
            source=InMemorySurveySource([example_survey]), sink=sink
        ))

        assert (await engine.load_survey(example_survey.id)).is_ok()


class TestSubmitResponse:
    @pytest.mark.asyncio
    async def test_validates_saves_and_submits(self, engine, example_survey, sink, remote) -> None:
        result = await engine.submit_response(example_survey, happy_response(example_survey))

        final = result.unwrap()
        assert final.is_complete
        assert sink.responses[final.response_id] == final
        remote.submit_response.assert_awaited_once_with(final)

    @pytest.mark.asyncio
    async def test_invalid_response_not_saved(self, engine, example_survey, sink, remote) -> None:
        result = await engine.submit_response(example_survey, SurveyResponse.create(example_survey.id))

        assert result.error == [
            RequiredFieldMissing(QuestionId("name")),
            RequiredFieldMissing(QuestionId("satisfied")),
            RequiredFieldMissing(QuestionId("improvements")),
        ]
        assert sink.responses == {}
        remote.submit_response.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_remote_failure_returned(self, engine, example_survey, remote) -> None:
        remote.submit_response.return_value = Err(NetworkError(ConnectionError("offline")))

        result = await engine.submit_response(example_survey, happy_response(example_survey))

        assert isinstance(result.error, CompositeError)


class TestFinish:
    @pytest.mark.asyncio
    async def test_incomplete_flow(self, engine, example_survey) -> None:
        flow = engine.start_survey(example_survey)

        assert await engine.finish(flow) == Err(NavigationBlocked("Survey is not complete."))

    @pytest.mark.asyncio
    async def test_completed_flow_submitted(self, engine, example_survey, sink, remote) -> None:
        flow = engine.start_survey(example_survey)
        flow.add_response(TextResponse(QuestionId("name"), "Ada"))
        await flow.next()
        await flow.next()
        flow.add_response(BooleanResponse(QuestionId("satisfied"), True))
        await flow.next()
        await flow.next()

        result = await engine.finish(flow)

        assert flow.is_complete
        assert result.unwrap().is_complete
        assert remote.submit_response.await_count == 1
        assert sink.responses[flow.survey_response.response_id].is_complete

    @pytest.mark.asyncio
    async def test_submit_on_complete_disabled(self, sink, remote) -> None:
        survey = build_example_survey(SurveySettings(submit_on_complete=False))
        engine = SurveyEngine(SurveySystemConfig(source=InMemorySurveySource(), sink=sink, remotes=[remote]))
        flow = engine.start_survey(survey)
        flow.add_response(TextResponse(QuestionId("name"), "Ada"))
        for _ in range(2):
            await flow.next()
        flow.add_response(BooleanResponse(QuestionId("satisfied"), True))
        for _ in range(2):
            await flow.next()

        result = await engine.finish(flow)

        assert result == Ok(flow.survey_response)
        assert not result.unwrap().is_complete
        assert result.unwrap().ended_at is None
        remote.submit_response.assert_not_awaited()


class TestDemo:
    @pytest.mark.asyncio
    async def test_demo_runs_end_to_end(self, monkeypatch, capsys) -> None:
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("SUPABASE_URL", "")
        monkeypatch.setenv("REMOTE_CONSOLE_DEBUG", "true")

        exit_code = await run_demo(Settings(_env_file=None))

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "[1/5] What is your name?" in out
        assert "SURVEY RESPONSE SUBMITTED [console-debug]" in out
        assert "Survey complete" in out

    @pytest.mark.asyncio
    async def test_demo_with_local_storage(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("STORAGE_BACKEND", "local")
        monkeypatch.setenv("STORAGE_DATA_PATH", str(tmp_path))
        monkeypatch.setenv("SUPABASE_URL", "")
        monkeypatch.setenv("REMOTE_CONSOLE_DEBUG", "false")

        assert await run_demo(Settings(_env_file=None)) == 0
        assert (tmp_path / "responses.json").exists()
        assert (tmp_path / "surveys.json").exists()


def test_engine_without_remotes() -> None:
    engine = SurveyEngine(SurveySystemConfig(source=InMemorySurveySource(), sink=InMemorySurveySink()))

    assert engine.remote is None
    assert engine.config.remotes == []
