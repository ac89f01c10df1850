"""Query routing models."""

from dataclasses import dataclass
from enum import Enum


class QueryComplexity(str, Enum):
    """Coarse query difficulty classification."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


class ModelTier(str, Enum):
    """Pricing tier of a routing target."""

    HAIKU = "haiku"
    SONNET = "sonnet"


@dataclass(frozen=True)
class ModelProfile:
    """Static description of a routing target."""

    model: str
    tier: ModelTier
    max_tokens: int
    input_cost_per_1m: float
    output_cost_per_1m: float
    description: str


@dataclass
class RoutingDecision:
    """Routing outcome with an explanation and an input-size estimate."""

    model: ModelProfile
    complexity: QueryComplexity
    reasoning: str
    estimated_input_tokens: int
