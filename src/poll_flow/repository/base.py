"""Abstract collaborator interfaces."""

from abc import ABC, abstractmethod

from ..errors import NetworkError
from ..ids import ResponseId, SurveyId
from ..result import Err, Result
from ..survey import Survey, SurveyResponse


class SurveySource(ABC):
    """Abstract interface for loading surveys."""

    priority: int = 0

    @abstractmethod
    async def load_survey(self, survey_id: SurveyId) -> Result:
        """Load a survey, or Err(SurveyDataError)."""
        pass


class SurveySink(ABC):
    """Abstract interface for survey and response storage."""

    is_persistent: bool = False

    @abstractmethod
    async def save_survey(self, survey: Survey) -> Result:
        """Store a survey definition."""
        pass

    @abstractmethod
    async def save_response(self, response: SurveyResponse) -> Result:
        """Store a response, replacing any earlier snapshot with the same id."""
        pass

    @abstractmethod
    async def load_response(self, response_id: ResponseId) -> Result:
        """Load a response by ID."""
        pass

    @abstractmethod
    async def load_all_responses(self, survey_id: SurveyId) -> Result:
        """Load every response recorded for a survey."""
        pass

    @abstractmethod
    async def delete_response(self, response_id: ResponseId) -> Result:
        """Delete a response by ID."""
        pass


class SurveyRemote(ABC):
    """Abstract interface for remote submission targets."""

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Name used in diagnostics."""
        pass

    @abstractmethod
    async def submit_response(self, response: SurveyResponse) -> Result:
        """Deliver a single response."""
        pass

    @abstractmethod
    async def submit_batch(self, responses: list[SurveyResponse]) -> Result:
        """Deliver several responses; all or nothing."""
        pass

    async def fetch_survey(self, survey_id: SurveyId) -> Result:
        """Fetch a survey definition. Unsupported unless a remote overrides it."""
        return Err(NetworkError(
            NotImplementedError(f"Fetching not supported by remote '{self.identifier}'")
        ))
