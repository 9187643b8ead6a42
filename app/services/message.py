"""Source of the greeting served by `GET /api/message`."""

from app.schemas.common import Message

SERVER_MESSAGE = "Hello from Server"


class MessageService:
    """Builds the message payload; a fresh value on every request."""

    def get_message(self) -> Message:
        return Message(message=SERVER_MESSAGE)
