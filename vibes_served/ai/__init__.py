from .client import AiClient, DummyAiClient, create_ai_client

__all__ = ["AiClient", "DummyAiClient", "create_ai_client"]
