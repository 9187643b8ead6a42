"""Response schemas for the message API."""

from pydantic import BaseModel


class Message(BaseModel):
    """JSON body `{"message": ...}` returned by `GET /api/message`."""

    message: str
