"""Navigation graph: one node per question, linked forward by resolvers and back by index.

Nodes live in an arena indexed by position. Each node keeps the index of its
predecessor for O(1) backward moves and a resolver that decides the next
position from the answers collected so far. Resolvers and conditions are
frozen values, so a graph can be inspected, compared and serialized.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional, Sequence, Union

from .errors import InvalidBranchTarget, SurveyValidationError, UnknownBranchSource
from .ids import QuestionId
from .questions import Question
from .responses import BooleanResponse, MultipleChoiceResponse, QuestionResponse, TextResponse

Responses = Mapping[QuestionId, QuestionResponse]


# Conditions

class Condition(ABC):
    """Predicate over the accumulated responses."""

    @abstractmethod
    def evaluate(self, responses: Responses) -> bool:
        ...


@dataclass(frozen=True)
class IsAnswered(Condition):
    question_id: QuestionId

    def evaluate(self, responses: Responses) -> bool:
        return self.question_id in responses


@dataclass(frozen=True)
class BooleanIs(Condition):
    question_id: QuestionId
    value: bool

    def evaluate(self, responses: Responses) -> bool:
        response = responses.get(self.question_id)
        return isinstance(response, BooleanResponse) and response.value == self.value


@dataclass(frozen=True)
class OptionSelected(Condition):
    question_id: QuestionId
    option_id: str

    def evaluate(self, responses: Responses) -> bool:
        response = responses.get(self.question_id)
        return (
            isinstance(response, MultipleChoiceResponse)
            and self.option_id in response.selected_option_ids
        )


@dataclass(frozen=True)
class TextEquals(Condition):
    question_id: QuestionId
    value: str
    case_sensitive: bool = False

    def evaluate(self, responses: Responses) -> bool:
        response = responses.get(self.question_id)
        if not isinstance(response, TextResponse):
            return False
        if self.case_sensitive:
            return response.value.strip() == self.value
        return response.value.strip().casefold() == self.value.casefold()


@dataclass(frozen=True)
class Not(Condition):
    condition: Condition

    def evaluate(self, responses: Responses) -> bool:
        return not self.condition.evaluate(responses)


@dataclass(frozen=True)
class AllOf(Condition):
    conditions: tuple[Condition, ...]

    def evaluate(self, responses: Responses) -> bool:
        return all(c.evaluate(responses) for c in self.conditions)


@dataclass(frozen=True)
class AnyOf(Condition):
    conditions: tuple[Condition, ...]

    def evaluate(self, responses: Responses) -> bool:
        return any(c.evaluate(responses) for c in self.conditions)


# Resolvers

class Resolver(ABC):
    """Decides which position follows a node. Must be a pure function of its inputs."""

    @abstractmethod
    def resolve(self, graph: "NavigationGraph", index: int, responses: Responses) -> Optional[int]:
        ...

    def leaves(self) -> Iterator["Resolver"]:
        """Every terminal decision this resolver can produce."""
        yield self


@dataclass(frozen=True)
class Linear(Resolver):
    """Go to the following question in list order."""

    def resolve(self, graph: "NavigationGraph", index: int, responses: Responses) -> Optional[int]:
        following = index + 1
        return following if following < len(graph) else None


@dataclass(frozen=True)
class GoToQuestion(Resolver):
    question_id: QuestionId

    def resolve(self, graph: "NavigationGraph", index: int, responses: Responses) -> Optional[int]:
        return graph.index_of(self.question_id)


@dataclass(frozen=True)
class GoToIndex(Resolver):
    index: int

    def resolve(self, graph: "NavigationGraph", index: int, responses: Responses) -> Optional[int]:
        return self.index if 0 <= self.index < len(graph) else None


@dataclass(frozen=True)
class End(Resolver):
    """Finish the survey after this question."""

    def resolve(self, graph: "NavigationGraph", index: int, responses: Responses) -> Optional[int]:
        return None


@dataclass(frozen=True)
class Conditional(Resolver):
    """Branch on a condition; both arms default to list order."""
    condition: Condition
    then: Resolver = field(default_factory=Linear)
    otherwise: Resolver = field(default_factory=Linear)

    def resolve(self, graph: "NavigationGraph", index: int, responses: Responses) -> Optional[int]:
        arm = self.then if self.condition.evaluate(responses) else self.otherwise
        return arm.resolve(graph, index, responses)

    def leaves(self) -> Iterator[Resolver]:
        yield from self.then.leaves()
        yield from self.otherwise.leaves()


Branches = Mapping[Union[QuestionId, str], Resolver]


def _normalize(branches: Optional[Branches]) -> dict[QuestionId, Resolver]:
    normalized: dict[QuestionId, Resolver] = {}
    for key, resolver in (branches or {}).items():
        question_id = key if isinstance(key, QuestionId) else QuestionId.unsafe(key)
        normalized[question_id] = resolver
    return normalized


def check_branches(
    questions: Sequence[Question], branches: Optional[Branches]
) -> list[SurveyValidationError]:
    """Structural errors in custom resolvers.

    Targets must point strictly forward, which keeps every walk from the entry
    node finite and bounded by the question count.
    """
    errors: list[SurveyValidationError] = []
    positions = {question.id: i for i, question in enumerate(questions)}
    for source, resolver in _normalize(branches).items():
        if source not in positions:
            errors.append(UnknownBranchSource(source))
            continue
        origin = positions[source]
        for leaf in resolver.leaves():
            if isinstance(leaf, GoToQuestion):
                target = positions.get(leaf.question_id)
                if target is None:
                    errors.append(InvalidBranchTarget(
                        source, str(leaf.question_id), "unknown question"
                    ))
                elif target <= origin:
                    errors.append(InvalidBranchTarget(
                        source, str(leaf.question_id), "branches must point forward"
                    ))
            elif isinstance(leaf, GoToIndex):
                if not 0 <= leaf.index < len(questions):
                    errors.append(InvalidBranchTarget(
                        source, str(leaf.index), "index out of range"
                    ))
                elif leaf.index <= origin:
                    errors.append(InvalidBranchTarget(
                        source, str(leaf.index), "branches must point forward"
                    ))
    return errors


@dataclass(frozen=True)
class QuestionNode:
    index: int
    question: Question
    previous_index: Optional[int]
    resolver: Resolver = field(default_factory=Linear)

    @property
    def is_head(self) -> bool:
        return self.previous_index is None


class NavigationGraph:
    """Arena of question nodes owned by a single survey."""

    def __init__(self, nodes: Sequence[QuestionNode]):
        self._nodes = tuple(nodes)
        self._positions = {node.question.id: node.index for node in self._nodes}

    @classmethod
    def build(
        cls, questions: Sequence[Question], branches: Optional[Branches] = None
    ) -> "NavigationGraph":
        """Link questions in one pass: list order forward, predecessor backward."""
        resolvers = _normalize(branches)
        nodes = [
            QuestionNode(
                index=i,
                question=question,
                previous_index=i - 1 if i > 0 else None,
                resolver=resolvers.get(question.id, Linear()),
            )
            for i, question in enumerate(questions)
        ]
        return cls(nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[QuestionNode]:
        return iter(self._nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NavigationGraph):
            return NotImplemented
        return self._nodes == other._nodes

    __hash__ = None  # type: ignore[assignment]

    @property
    def entry(self) -> Optional[QuestionNode]:
        return self._nodes[0] if self._nodes else None

    def node(self, index: int) -> QuestionNode:
        return self._nodes[index]

    def index_of(self, question_id: QuestionId) -> Optional[int]:
        return self._positions.get(question_id)

    def find(self, question_id: QuestionId) -> Optional[QuestionNode]:
        index = self.index_of(question_id)
        return None if index is None else self._nodes[index]

    def next_node(self, node: QuestionNode, responses: Responses) -> Optional[QuestionNode]:
        index = node.resolver.resolve(self, node.index, responses)
        return None if index is None else self._nodes[index]

    def previous_node(self, node: QuestionNode) -> Optional[QuestionNode]:
        if node.previous_index is None:
            return None
        return self._nodes[node.previous_index]

    def walk(self, responses: Responses) -> Iterator[QuestionNode]:
        """Nodes visited from the entry for the given answers."""
        node = self.entry
        for _ in range(len(self._nodes)):
            if node is None:
                return
            yield node
            node = self.next_node(node, responses)
