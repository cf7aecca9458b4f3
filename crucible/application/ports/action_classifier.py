"""Action classifier port definition.

A classifier inspects a host action and says whether a pool die may be
spent on it. Implementations are pure and synchronous.
"""

from abc import ABC, abstractmethod

from crucible.domain.models.action import ActionClassification, ActionReference


class ActionClassifierProtocol(ABC):
    """Abstract protocol for action classification strategies."""

    @abstractmethod
    def classify(self, action: ActionReference) -> ActionClassification:
        """Classify an action.

        Returns:
            AUGMENTABLE or NOT_AUGMENTABLE when confident, UNKNOWN otherwise.
        """
        ...
