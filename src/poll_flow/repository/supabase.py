"""Supabase-backed source and remote."""

import logging
from typing import Optional

from supabase import create_client, Client

from ..codec import survey_from_dict, survey_response_to_dict
from ..errors import InvalidSurveyData, NetworkError, SurveyNotFound
from ..ids import SurveyId
from ..result import Err, Ok, Result
from ..survey import SurveyResponse
from .base import SurveyRemote, SurveySource

logger = logging.getLogger(__name__)


class SupabaseClientManager:
    """Manages Supabase client lifecycle."""

    def __init__(self, url: str, key: str):
        self.url = url
        self.key = key
        self._client: Optional[Client] = None

    def get_client(self) -> Client:
        """Get or create Supabase client."""
        if self._client is None:
            self._client = create_client(self.url, self.key)
        return self._client


def _fetch_survey(client_manager: SupabaseClientManager, table: str, survey_id: SurveyId) -> Result:
    """Read one survey row; the ``definition`` column holds the encoded survey."""
    try:
        client = client_manager.get_client()
        response = (
            client.table(table)
            .select("*")
            .eq("id", survey_id.value)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.warning("Supabase fetch of survey %s failed: %s", survey_id, e)
        return Err(NetworkError(e))
    if not response.data:
        return Err(SurveyNotFound(survey_id))
    definition = response.data[0].get("definition")
    if not isinstance(definition, dict):
        return Err(InvalidSurveyData(f"survey row {survey_id} has no definition"))
    return survey_from_dict(definition)


def _to_row(response: SurveyResponse) -> dict:
    """Convert a SurveyResponse to a Supabase row."""
    return {
        "id": response.response_id.value,
        "survey_id": response.survey_id.value,
        "is_complete": response.is_complete,
        "started_at": response.started_at.isoformat(),
        "ended_at": response.ended_at.isoformat() if response.ended_at else None,
        "payload": survey_response_to_dict(response),
    }


class SupabaseSurveySource(SurveySource):
    """Loads surveys from a Supabase table."""

    def __init__(self, client_manager: SupabaseClientManager, table: str = "surveys", priority: int = 10):
        self.client_manager = client_manager
        self.table = table
        self.priority = priority

    async def load_survey(self, survey_id: SurveyId) -> Result:
        return _fetch_survey(self.client_manager, self.table, survey_id)


class SupabaseSurveyRemote(SurveyRemote):
    """Submits responses to a Supabase table."""

    def __init__(
        self,
        client_manager: SupabaseClientManager,
        table: str = "survey_responses",
        surveys_table: str = "surveys",
        identifier: str = "supabase",
    ):
        self.client_manager = client_manager
        self.table = table
        self.surveys_table = surveys_table
        self._identifier = identifier

    @property
    def identifier(self) -> str:
        return self._identifier

    async def submit_response(self, response: SurveyResponse) -> Result:
        """Upsert a single response."""
        try:
            client = self.client_manager.get_client()
            client.table(self.table).upsert(_to_row(response)).execute()
        except Exception as e:
            logger.warning("Supabase submit of %s failed: %s", response.response_id, e)
            return Err(NetworkError(e))
        logger.info("Submitted response %s to Supabase", response.response_id)
        return Ok(None)

    async def submit_batch(self, responses: list[SurveyResponse]) -> Result:
        """Upsert all responses in one request."""
        if not responses:
            return Ok(None)
        try:
            client = self.client_manager.get_client()
            client.table(self.table).upsert([_to_row(r) for r in responses]).execute()
        except Exception as e:
            logger.warning("Supabase batch submit of %d failed: %s", len(responses), e)
            return Err(NetworkError(e))
        return Ok(None)

    async def fetch_survey(self, survey_id: SurveyId) -> Result:
        return _fetch_survey(self.client_manager, self.surveys_table, survey_id)
