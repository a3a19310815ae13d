"""In-memory backends for demos and tests."""

from typing import Iterable, Optional

from ..errors import ResponseNotFound, SurveyNotFound
from ..ids import ResponseId, SurveyId
from ..result import Err, Ok, Result
from ..survey import Survey, SurveyResponse
from .base import SurveyRemote, SurveySink, SurveySource


class InMemorySurveySource(SurveySource):
    """Dictionary-backed survey source."""

    def __init__(self, surveys: Optional[Iterable[Survey]] = None, priority: int = 100):
        self.surveys: dict[SurveyId, Survey] = {survey.id: survey for survey in surveys or ()}
        self.priority = priority

    def add(self, survey: Survey) -> None:
        self.surveys[survey.id] = survey

    async def load_survey(self, survey_id: SurveyId) -> Result:
        survey = self.surveys.get(survey_id)
        if survey is None:
            return Err(SurveyNotFound(survey_id))
        return Ok(survey)


class InMemorySurveySink(SurveySink):
    """Dictionary-backed sink. Contents die with the process."""

    is_persistent = False

    def __init__(self):
        self.surveys: dict[SurveyId, Survey] = {}
        self.responses: dict[ResponseId, SurveyResponse] = {}

    async def save_survey(self, survey: Survey) -> Result:
        self.surveys[survey.id] = survey
        return Ok(None)

    async def save_response(self, response: SurveyResponse) -> Result:
        self.responses[response.response_id] = response
        return Ok(None)

    async def load_response(self, response_id: ResponseId) -> Result:
        response = self.responses.get(response_id)
        if response is None:
            return Err(ResponseNotFound(response_id))
        return Ok(response)

    async def load_all_responses(self, survey_id: SurveyId) -> Result:
        return Ok([r for r in self.responses.values() if r.survey_id == survey_id])

    async def delete_response(self, response_id: ResponseId) -> Result:
        if self.responses.pop(response_id, None) is None:
            return Err(ResponseNotFound(response_id))
        return Ok(None)


class ConsoleDebugRemote(SurveyRemote):
    """Prints submissions instead of sending them anywhere."""

    def __init__(self, identifier: str = "console-debug"):
        self._identifier = identifier

    @property
    def identifier(self) -> str:
        return self._identifier

    async def submit_response(self, response: SurveyResponse) -> Result:
        print("\n" + "=" * 50)
        print(f"SURVEY RESPONSE SUBMITTED [{self.identifier}]")
        print("=" * 50)
        print(f"Survey: {response.survey_id}")
        print(f"Response: {response.response_id}")
        print(f"Answers: {len(response.responses)}")
        print(f"Complete: {response.is_complete}")
        print("=" * 50 + "\n")
        return Ok(None)

    async def submit_batch(self, responses: list[SurveyResponse]) -> Result:
        print(f"[{self.identifier}] Submitting batch of {len(responses)} responses")
        for response in responses:
            result = await self.submit_response(response)
            if result.is_err():
                return result
        return Ok(None)
