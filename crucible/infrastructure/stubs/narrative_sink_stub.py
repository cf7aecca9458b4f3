"""Recording narrative sink for development and testing.

WARNING: This stub is for development/testing only.
"""

from __future__ import annotations

from crucible.application.ports.narrative_sink import NarrativeSinkProtocol


class NarrativeSinkStub(NarrativeSinkProtocol):
    """Keeps every posted message as (speaker_id, text)."""

    def __init__(self) -> None:
        self.messages: list[tuple[str | None, str]] = []

    async def post_message(self, text: str, speaker_id: str | None = None) -> None:
        self.messages.append((speaker_id, text))
