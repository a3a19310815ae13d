"""Local JSON file backends."""

import json
import logging
from pathlib import Path

import aiofiles

from ..codec import (
    survey_from_dict,
    survey_response_from_dict,
    survey_response_to_dict,
    survey_to_dict,
)
from ..errors import InvalidSurveyData, PersistenceError, ResponseNotFound, SurveyNotFound
from ..ids import ResponseId, SurveyId
from ..result import Err, Ok, Result
from ..survey import Survey, SurveyResponse
from .base import SurveySink, SurveySource

logger = logging.getLogger(__name__)


class JsonFile:
    """A JSON array of records stored in one file."""

    def __init__(self, file_path: Path):
        self.file_path = file_path

    async def read_all(self) -> list[dict]:
        """Read all records from file."""
        if not self.file_path.exists():
            return []
        async with aiofiles.open(self.file_path, "r") as f:
            content = await f.read()
        data = json.loads(content) if content else []
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise ValueError(f"{self.file_path.name} is not a JSON array of objects")
        return data

    async def write_all(self, data: list[dict]) -> None:
        """Write all records to file."""
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.file_path, "w") as f:
            await f.write(json.dumps(data, indent=2, default=str))

    async def upsert(self, key: str, record: dict) -> None:
        """Replace the record with the same key, or append it."""
        data = [item for item in await self.read_all() if item.get(key) != record[key]]
        data.append(record)
        await self.write_all(data)


async def _guarded(call) -> Result:
    """Run a file operation, turning I/O and decoding faults into error values."""
    try:
        return await call()
    except OSError as e:
        logger.warning("File storage failed: %s", e)
        return Err(PersistenceError(e))
    except json.JSONDecodeError as e:
        logger.warning("File storage is corrupt: %s", e)
        return Err(InvalidSurveyData(f"unreadable JSON: {e}"))
    except ValueError as e:
        logger.warning("File storage is corrupt: %s", e)
        return Err(InvalidSurveyData(str(e)))


class LocalSurveySource(SurveySource):
    """Loads surveys from ``surveys.json`` under a data directory."""

    def __init__(self, data_path: str, priority: int = 50):
        self.file = JsonFile(Path(data_path) / "surveys.json")
        self.priority = priority

    async def load_survey(self, survey_id: SurveyId) -> Result:
        async def load() -> Result:
            for item in await self.file.read_all():
                if item.get("id") == survey_id.value:
                    return survey_from_dict(item)
            return Err(SurveyNotFound(survey_id))

        return await _guarded(load)


class LocalSurveySink(SurveySink):
    """Stores surveys and responses as JSON files under a data directory."""

    is_persistent = True

    def __init__(self, data_path: str):
        self.surveys = JsonFile(Path(data_path) / "surveys.json")
        self.responses = JsonFile(Path(data_path) / "responses.json")

    async def save_survey(self, survey: Survey) -> Result:
        async def save() -> Result:
            await self.surveys.upsert("id", survey_to_dict(survey))
            return Ok(None)

        return await _guarded(save)

    async def save_response(self, response: SurveyResponse) -> Result:
        async def save() -> Result:
            await self.responses.upsert("response_id", survey_response_to_dict(response))
            return Ok(None)

        return await _guarded(save)

    async def load_response(self, response_id: ResponseId) -> Result:
        async def load() -> Result:
            for item in await self.responses.read_all():
                if item.get("response_id") == response_id.value:
                    return survey_response_from_dict(item)
            return Err(ResponseNotFound(response_id))

        return await _guarded(load)

    async def load_all_responses(self, survey_id: SurveyId) -> Result:
        async def load() -> Result:
            loaded = []
            for item in await self.responses.read_all():
                if item.get("survey_id") != survey_id.value:
                    continue
                result = survey_response_from_dict(item)
                if result.is_err():
                    return result
                loaded.append(result.value)
            return Ok(loaded)

        return await _guarded(load)

    async def delete_response(self, response_id: ResponseId) -> Result:
        async def delete() -> Result:
            data = await self.responses.read_all()
            remaining = [item for item in data if item.get("response_id") != response_id.value]
            if len(remaining) == len(data):
                return Err(ResponseNotFound(response_id))
            await self.responses.write_all(remaining)
            return Ok(None)

        return await _guarded(delete)
