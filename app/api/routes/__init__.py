from app.api.routes.message import router as message_router

__all__ = ["message_router"]
