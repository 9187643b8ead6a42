"""Dependency providers used by FastAPI endpoints.

Route handlers receive their collaborators through FastAPI's dependency
injection so tests can override them with `app.dependency_overrides`.
"""

from app.services.message import MessageService


def get_message_service() -> MessageService:
    """Return the stateless service producing the server greeting."""
    return MessageService()
