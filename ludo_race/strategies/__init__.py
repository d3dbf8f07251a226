from .base import Strategy
from .easy import EasyStrategy
from .hard import HardStrategy
from .heuristics import HeuristicScorer
from .medium import MediumStrategy
from .registry import STRATEGY_REGISTRY, AIController, available, create

__all__ = [
    "Strategy",
    "EasyStrategy",
    "MediumStrategy",
    "HardStrategy",
    "HeuristicScorer",
    "STRATEGY_REGISTRY",
    "AIController",
    "available",
    "create",
]
