"""Survey flow: position in the question graph plus the answers collected so far."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from .errors import (
    NavigationBlocked,
    NoCurrentQuestion,
    NoNextQuestion,
    NoPreviousQuestion,
    PersistenceError,
    QuestionMismatch,
    SurveyDataError,
)
from .graph import NavigationGraph, QuestionNode, Responses
from .ids import QuestionId
from .questions import Question
from .repository.base import SurveySink
from .responses import QuestionResponse
from .result import Err, Ok, Result
from .survey import Survey, SurveyResponse, SurveySettings, ValidationStrategy

logger = logging.getLogger(__name__)


class FlowState:
    """States in the survey flow."""


@dataclass(frozen=True)
class Positioned(FlowState):
    """A question is on screen."""
    index: int


@dataclass(frozen=True)
class Completed(FlowState):
    """The graph is exhausted. Terminal."""


@dataclass(frozen=True)
class FlowProgress:
    position: int
    total: int
    answered: int

    @property
    def fraction(self) -> float:
        return self.answered / self.total if self.total else 1.0


class SurveyNavigator(ABC):
    """Policy deciding whether and where a flow may move."""

    @abstractmethod
    def can_navigate_next(self, node: QuestionNode, responses: Responses) -> bool:
        pass

    @abstractmethod
    def can_navigate_previous(self, node: QuestionNode) -> bool:
        pass

    @abstractmethod
    def get_next_question(
        self, graph: NavigationGraph, node: QuestionNode, responses: Responses
    ) -> Optional[QuestionNode]:
        pass

    @abstractmethod
    def get_previous_question(
        self, graph: NavigationGraph, node: QuestionNode
    ) -> Optional[QuestionNode]:
        pass


class DefaultSurveyNavigator(SurveyNavigator):
    """Moves forward unless a required question is unanswered; follows the graph."""

    def can_navigate_next(self, node: QuestionNode, responses: Responses) -> bool:
        question = node.question
        return not question.required or question.id in responses

    def can_navigate_previous(self, node: QuestionNode) -> bool:
        return node.previous_index is not None

    def get_next_question(
        self, graph: NavigationGraph, node: QuestionNode, responses: Responses
    ) -> Optional[QuestionNode]:
        return graph.next_node(node, responses)

    def get_previous_question(
        self, graph: NavigationGraph, node: QuestionNode
    ) -> Optional[QuestionNode]:
        return graph.previous_node(node)


def advance(
    survey: Survey, state: FlowState, responses: Responses, navigator: SurveyNavigator
) -> Result:
    """Compute the state after moving forward. Pure: nothing is committed."""
    if not isinstance(state, Positioned):
        return Err(NoNextQuestion())

    node = survey.graph.node(state.index)
    if not navigator.can_navigate_next(node, responses):
        return Err(NavigationBlocked("Response required for the current question."))

    if survey.settings.validation_strategy is ValidationStrategy.HYBRID:
        response = responses.get(node.question.id)
        if response is not None:
            match node.question.validate(response):
                case Err(errors):
                    reasons = "; ".join(error.message for error in errors)
                    return Err(NavigationBlocked(f"Current answer is invalid: {reasons}"))

    following = navigator.get_next_question(survey.graph, node, responses)
    if following is None:
        return Ok(Completed())
    return Ok(Positioned(following.index))


def retreat(
    survey: Survey, state: FlowState, navigator: SurveyNavigator
) -> Result:
    """Compute the state after moving back. Pure: nothing is committed."""
    if not isinstance(state, Positioned):
        return Err(NoPreviousQuestion())
    if not survey.settings.allow_back_navigation:
        return Err(NavigationBlocked("Backward navigation is disabled."))

    node = survey.graph.node(state.index)
    if not navigator.can_navigate_previous(node):
        return Err(NoPreviousQuestion())
    previous = navigator.get_previous_question(survey.graph, node)
    if previous is None:
        return Err(NoPreviousQuestion())
    return Ok(Positioned(previous.index))


class SurveyFlow:
    """Single-writer state machine over one survey attempt.

    Calls on one instance must not overlap; the embedding application
    serializes them.
    """

    def __init__(
        self,
        survey: Survey,
        navigator: Optional[SurveyNavigator] = None,
        sink: Optional[SurveySink] = None,
    ):
        self.survey = survey
        self.navigator = navigator or DefaultSurveyNavigator()
        self.sink = sink
        self.state: FlowState = Positioned(0) if survey.entry is not None else Completed()
        self.survey_response = SurveyResponse.create(survey.id)
        self.last_save_error: Optional[SurveyDataError] = None

    @property
    def settings(self) -> SurveySettings:
        return self.survey.settings

    @property
    def current_node(self) -> Optional[QuestionNode]:
        if isinstance(self.state, Positioned):
            return self.survey.graph.node(self.state.index)
        return None

    @property
    def current_question(self) -> Optional[Question]:
        node = self.current_node
        return node.question if node else None

    @property
    def responses(self) -> dict[QuestionId, QuestionResponse]:
        return self.survey_response.responses

    @property
    def is_complete(self) -> bool:
        return isinstance(self.state, Completed)

    def progress(self) -> FlowProgress:
        total = len(self.survey.graph)
        match self.state:
            case Positioned(index):
                position = index + 1
            case _:
                position = total
        return FlowProgress(position=position, total=total, answered=len(self.responses))

    def add_response(self, response: QuestionResponse) -> Result:
        """Record an answer to the question on screen.

        Returns Ok(self) for chaining, or Err with every validation error. State
        is untouched on failure.
        """
        question = self.current_question
        if question is None:
            return Err([NoCurrentQuestion(response.question_id)])
        if response.question_id != question.id:
            return Err([QuestionMismatch(response.question_id, question.id)])

        if self.settings.validation_strategy is ValidationStrategy.IMMEDIATE:
            match question.validate(response):
                case Err() as failure:
                    return failure

        self.survey_response = self.survey_response.add_response(response)
        return Ok(self)

    async def next(self) -> Result:
        """Move forward. Ok(Completed()) signals the end of the survey."""
        outcome = advance(self.survey, self.state, self.responses, self.navigator)
        if outcome.is_ok():
            await self._commit(outcome.value)
        return outcome

    async def previous(self) -> Result:
        """Move back along the predecessor link."""
        outcome = retreat(self.survey, self.state, self.navigator)
        if outcome.is_ok():
            await self._commit(outcome.value)
        return outcome

    async def _commit(self, state: FlowState) -> None:
        logger.debug(
            "Survey %s response %s: %s -> %s",
            self.survey.id, self.survey_response.response_id, self.state, state,
        )
        self.state = state
        await self._save()

    async def _save(self) -> None:
        """Best-effort save of the whole response; failures never undo a move."""
        if self.sink is None or not self.settings.save_progress_locally:
            return
        try:
            result = await self.sink.save_response(self.survey_response)
        except Exception as e:
            logger.exception("Saving response %s raised", self.survey_response.response_id)
            self.last_save_error = PersistenceError(e)
            return
        match result:
            case Err(error):
                logger.warning(
                    "Saving response %s failed: %s",
                    self.survey_response.response_id, error.message,
                )
                self.last_save_error = error
            case _:
                self.last_save_error = None
