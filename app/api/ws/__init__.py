from app.api.ws.comments import router as websocket_router

__all__ = ["websocket_router"]
