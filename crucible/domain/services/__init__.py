"""Pure domain services for Crucible of Fate."""

from crucible.domain.services.action_classifier import (
    ClassifierChain,
    KeywordClassifier,
    SystemTagClassifier,
)
from crucible.domain.services.invariant_enforcer import is_balanced, rebalance

__all__: list[str] = [
    "ClassifierChain",
    "KeywordClassifier",
    "SystemTagClassifier",
    "is_balanced",
    "rebalance",
]
