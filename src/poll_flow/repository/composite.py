"""Fallback across sources and fan-out across remotes."""

import asyncio
import logging
from typing import Sequence

from ..errors import CompositeError, NetworkError, PersistenceError, SurveyDataError
from ..ids import SurveyId
from ..result import Err, Ok, Result
from ..survey import SurveyResponse
from .base import SurveyRemote, SurveySource

logger = logging.getLogger(__name__)


class CompositeSurveySource(SurveySource):
    """Tries sources from highest to lowest priority; the first hit wins.

    When every source fails, the error is a CompositeError whose primary is the
    last failure and whose ``all`` keeps each failure in attempt order.
    """

    def __init__(self, sources: Sequence[SurveySource]):
        if not sources:
            raise ValueError("CompositeSurveySource needs at least one source")
        self.sources = sorted(sources, key=lambda source: source.priority, reverse=True)
        self.priority = max(source.priority for source in self.sources)

    async def load_survey(self, survey_id: SurveyId) -> Result:
        errors: list[SurveyDataError] = []
        for source in self.sources:
            try:
                result = await source.load_survey(survey_id)
            except Exception as e:
                logger.exception("Source %s raised loading %s", type(source).__name__, survey_id)
                result = Err(PersistenceError(e))
            match result:
                case Ok():
                    return result
                case Err(error):
                    logger.info(
                        "Source %s (priority %d) could not load %s: %s",
                        type(source).__name__, source.priority, survey_id, error.message,
                    )
                    errors.append(error)
        return Err(CompositeError(primary=errors[-1], all=tuple(errors)))


class CompositeSurveyRemote(SurveyRemote):
    """Delivers to several remotes.

    Single responses are best effort: every remote is tried and one acceptance
    is enough. Batches are strict: each remote must take the whole batch, and the
    first refusal stops delivery.
    """

    def __init__(self, remotes: Sequence[SurveyRemote]):
        if not remotes:
            raise ValueError("CompositeSurveyRemote needs at least one remote")
        self.remotes = list(remotes)

    @property
    def identifier(self) -> str:
        return f"composite[{','.join(remote.identifier for remote in self.remotes)}]"

    async def _attempt(self, remote: SurveyRemote, response: SurveyResponse) -> Result:
        try:
            return await remote.submit_response(response)
        except Exception as e:
            logger.exception("Remote %s raised submitting %s", remote.identifier, response.response_id)
            return Err(NetworkError(e))

    async def submit_response(self, response: SurveyResponse) -> Result:
        outcomes = await asyncio.gather(
            *(self._attempt(remote, response) for remote in self.remotes)
        )
        errors: list[SurveyDataError] = []
        successes = 0
        for remote, outcome in zip(self.remotes, outcomes):
            match outcome:
                case Ok():
                    successes += 1
                case Err(error):
                    logger.warning(
                        "Remote %s rejected response %s: %s",
                        remote.identifier, response.response_id, error.message,
                    )
                    errors.append(error)
        if successes == 0:
            return Err(CompositeError(primary=errors[0], all=tuple(errors)))
        return Ok(None)

    async def submit_batch(self, responses: list[SurveyResponse]) -> Result:
        for remote in self.remotes:
            try:
                result = await remote.submit_batch(responses)
            except Exception as e:
                logger.exception("Remote %s raised submitting a batch", remote.identifier)
                result = Err(NetworkError(e))
            if result.is_err():
                logger.warning(
                    "Remote %s rejected a batch of %d: %s",
                    remote.identifier, len(responses), result.error.message,
                )
                return result
        return Ok(None)

    async def fetch_survey(self, survey_id: SurveyId) -> Result:
        errors: list[SurveyDataError] = []
        for remote in self.remotes:
            try:
                result = await remote.fetch_survey(survey_id)
            except Exception as e:
                logger.exception("Remote %s raised fetching %s", remote.identifier, survey_id)
                result = Err(NetworkError(e))
            if result.is_ok():
                return result
            errors.append(result.error)
        return Err(CompositeError(primary=errors[-1], all=tuple(errors)))
