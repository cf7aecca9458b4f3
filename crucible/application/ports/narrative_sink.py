"""Narrative sink port definition.

The narrative sink is the host's chat/log. Augmentations and arbiter die
rolls are announced there so the table sees the result.
"""

from abc import ABC, abstractmethod


class NarrativeSinkProtocol(ABC):
    """Abstract protocol for posting narrative messages."""

    @abstractmethod
    async def post_message(self, text: str, speaker_id: str | None = None) -> None:
        """Post a message to the session narrative.

        Args:
            text: Plain text to post.
            speaker_id: Participant the message is attributed to, or None
                for the arbiter/system voice.
        """
        ...
