"""HTTP route handlers for the message API."""

from fastapi import APIRouter, Depends

from app.api import deps
from app.schemas.common import Message
from app.services.message import MessageService

router = APIRouter(prefix="/api", tags=["message"])


@router.get("/message", response_model=Message)
async def read_message(
    message_service: MessageService = Depends(deps.get_message_service),
) -> Message:
    """Return the fixed greeting; request body and headers are ignored."""

    return message_service.get_message()
