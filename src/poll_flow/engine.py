"""Survey engine: ties sources, sinks and remotes to survey flows."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config.settings import EngineSettings
from .errors import NavigationBlocked
from .ids import SurveyId
from .repository.base import SurveyRemote, SurveySink, SurveySource
from .repository.composite import CompositeSurveyRemote
from .result import Err, Ok, Result
from .state_machine import SurveyFlow, SurveyNavigator
from .survey import Survey, SurveyResponse

logger = logging.getLogger(__name__)


@dataclass
class SurveySystemConfig:
    """Everything an engine needs."""
    source: SurveySource
    sink: SurveySink
    remotes: list[SurveyRemote] = field(default_factory=list)
    settings: EngineSettings = field(default_factory=EngineSettings)


class SurveyEngine:
    """Entry point for loading surveys, running flows and submitting responses."""

    def __init__(self, config: SurveySystemConfig):
        self.config = config
        self.remote: Optional[CompositeSurveyRemote] = (
            CompositeSurveyRemote(config.remotes) if config.remotes else None
        )

    async def load_survey(self, survey_id: SurveyId) -> Result:
        """Load a survey; cache it in the sink when caching is enabled."""
        result = await self.config.source.load_survey(survey_id)
        if result.is_ok() and self.config.settings.cache_enabled:
            cached = await self.config.sink.save_survey(result.value)
            if cached.is_err():
                logger.warning("Caching survey %s failed: %s", survey_id, cached.error.message)
        return result

    def start_survey(
        self, survey: Survey, navigator: Optional[SurveyNavigator] = None
    ) -> SurveyFlow:
        return SurveyFlow(survey, navigator=navigator, sink=self.config.sink)

    async def submit_response(self, survey: Survey, response: SurveyResponse) -> Result:
        """Validate, complete, save and submit a response.

        The first failing step decides the error: a list of
        ResponseValidationError from validation, or a SurveyDataError from the
        sink or the remotes.
        """
        validated = response.validate_with(survey)
        if validated.is_err():
            logger.info(
                "Response %s failed validation with %d error(s)",
                response.response_id, len(validated.error),
            )
            return validated

        final = validated.value.mark_complete()
        saved = await self.config.sink.save_response(final)
        if saved.is_err():
            return saved

        if self.remote is not None:
            submitted = await self.remote.submit_response(final)
            if submitted.is_err():
                return submitted

        logger.info("Submitted response %s for survey %s", final.response_id, survey.id)
        return Ok(final)

    async def finish(self, flow: SurveyFlow) -> Result:
        """Submit a completed flow when its survey asks for it.

        With ``submit_on_complete`` off, the flow's response is returned as it
        stands: not validated, not marked complete, and not saved beyond the
        saves made while navigating. Call submit_response() to finalize it.
        """
        if not flow.is_complete:
            return Err(NavigationBlocked("Survey is not complete."))
        if flow.settings.submit_on_complete:
            return await self.submit_response(flow.survey, flow.survey_response)
        return Ok(flow.survey_response)
