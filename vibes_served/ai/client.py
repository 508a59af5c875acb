from __future__ import annotations

import logging
from typing import Protocol

from ..models import Idea


logger = logging.getLogger("vibes_served.ai")


class AiClient(Protocol):
    def generate_ideas(self, count: int = 1) -> list[Idea]: ...


class DummyAiClient:
    """Placeholder provider: identical ideas that differ only by id."""

    title = "Dummy Idea"
    summary = "A placeholder idea for development and testing."
    objective = "Demonstrate the API contract for idea generation."
    tags = ("ideation", "dummy", "v0")

    def generate_ideas(self, count: int = 1) -> list[Idea]:
        return [
            Idea(
                id=f"idea-{i + 1}",
                title=self.title,
                summary=self.summary,
                objective=self.objective,
                tags=list(self.tags),
            )
            for i in range(count)
        ]


_PROVIDERS: dict[str, type] = {
    "dummy": DummyAiClient,
}


def create_ai_client(provider: str | None = None) -> AiClient:
    name = (provider or "dummy").strip().lower()
    cls = _PROVIDERS.get(name)
    if cls is None:
        logger.warning(f"Unknown AI provider '{name}', falling back to dummy")
        cls = DummyAiClient
    return cls()
