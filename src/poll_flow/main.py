"""Entry point: runs the example survey through a configured engine."""

import asyncio
import logging

from dotenv import load_dotenv

from .config.logging import setup_logging
from .config.settings import Settings
from .engine import SurveyEngine, SurveySystemConfig
from .repository.factory import create_backends
from .responses import BooleanResponse, MultipleChoiceResponse, TextResponse
from .result import Err, Ok
from .sample import build_example_survey

logger = logging.getLogger(__name__)


async def run_demo(settings: Settings) -> int:
    """Answer the example survey with scripted responses and submit it."""
    backends = create_backends(settings)
    survey = build_example_survey()
    backends.memory_source.add(survey)

    engine = SurveyEngine(SurveySystemConfig(
        source=backends.source,
        sink=backends.sink,
        remotes=backends.remotes,
        settings=settings.engine,
    ))

    loaded = await engine.load_survey(survey.id)
    if loaded.is_err():
        logger.error("Could not load %s: %s", survey.id, loaded.error.message)
        return 1

    flow = engine.start_survey(loaded.value)
    answers = {
        "name": lambda qid: TextResponse(qid, "Ada Lovelace"),
        "email": lambda qid: TextResponse(qid, "ada@example.com"),
        "satisfied": lambda qid: BooleanResponse(qid, False),
        "improvements": lambda qid: MultipleChoiceResponse.create(qid, ["speed", "support"]).unwrap(),
        "comments": lambda qid: TextResponse(qid, "Keep going."),
    }

    while not flow.is_complete:
        question = flow.current_question
        progress = flow.progress()
        print(f"[{progress.position}/{progress.total}] {question.text}")
        added = flow.add_response(answers[question.id.value](question.id))
        if added.is_err():
            for error in added.error:
                print(f"  ! {error.message}")
            return 1
        moved = await flow.next()
        if moved.is_err():
            print(f"  ! {moved.error.message}")
            return 1

    match await engine.finish(flow):
        case Ok(response):
            print(f"Survey complete: response {response.response_id}")
            return 0
        case Err(error):
            messages = [e.message for e in error] if isinstance(error, list) else [error.message]
            for message in messages:
                print(f"  ! {message}")
            return 1


def main() -> None:
    """Run the poll-flow demo."""
    # Load environment variables
    load_dotenv()

    # Initialize settings
    settings = Settings()
    setup_logging(settings)

    try:
        raise SystemExit(asyncio.run(run_demo(settings)))
    except KeyboardInterrupt:
        print("\nDemo interrupted.")


if __name__ == "__main__":
    main()
