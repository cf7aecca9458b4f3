"""Action classification strategies.

Decides whether an action may be augmented. Classifiers are tried in
order; the first one returning a confident verdict (anything other than
UNKNOWN) wins. If none is confident the action is UNKNOWN, which is
never augmentable.

Default chain:
1. SystemTagClassifier - structured roll type flags from the game system
2. KeywordClassifier   - text heuristics over flavor/content
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from crucible.application.ports.action_classifier import ActionClassifierProtocol
from crucible.domain.models.action import ActionClassification, ActionReference

DEFAULT_AUGMENTABLE_ROLL_TYPES: frozenset[str] = frozenset(
    {"skill", "save", "savingThrow"}
)

DEFAULT_KEYWORDS: tuple[str, ...] = (
    "skill",
    "save",
    "saving throw",
    "ability check",
    "check",
    "saving",
)


class SystemTagClassifier(ActionClassifierProtocol):
    """Classify from a structured roll-type flag.

    Returns UNKNOWN when the action carries no roll type, so text
    heuristics get a chance.
    """

    def __init__(
        self,
        augmentable_types: Iterable[str] = DEFAULT_AUGMENTABLE_ROLL_TYPES,
        metadata_key: str = "roll_type",
    ) -> None:
        self._augmentable_types = frozenset(augmentable_types)
        self._metadata_key = metadata_key

    def classify(self, action: ActionReference) -> ActionClassification:
        roll_type = action.metadata.get(self._metadata_key)
        if not roll_type:
            return ActionClassification.UNKNOWN
        if roll_type in self._augmentable_types:
            return ActionClassification.AUGMENTABLE
        return ActionClassification.NOT_AUGMENTABLE


class KeywordClassifier(ActionClassifierProtocol):
    """Classify from keywords in the action text.

    Attack rolls are excluded unless the text also mentions a saving throw.
    """

    def __init__(self, keywords: Sequence[str] = DEFAULT_KEYWORDS) -> None:
        self._keywords = tuple(k.lower() for k in keywords)

    def classify(self, action: ActionReference) -> ActionClassification:
        text = action.text.lower()
        if not any(keyword in text for keyword in self._keywords):
            return ActionClassification.UNKNOWN
        if "attack" in text and "saving throw" not in text:
            return ActionClassification.NOT_AUGMENTABLE
        return ActionClassification.AUGMENTABLE


class ClassifierChain(ActionClassifierProtocol):
    """Ordered list of classifiers; first confident verdict wins."""

    def __init__(self, classifiers: Sequence[ActionClassifierProtocol]) -> None:
        self._classifiers = tuple(classifiers)

    def classify(self, action: ActionReference) -> ActionClassification:
        for classifier in self._classifiers:
            verdict = classifier.classify(action)
            if verdict is not ActionClassification.UNKNOWN:
                return verdict
        return ActionClassification.UNKNOWN

    @classmethod
    def default(cls) -> ClassifierChain:
        return cls([SystemTagClassifier(), KeywordClassifier()])
