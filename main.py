from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import chat_websocket, messages, users
from app.chat.registry import ConnectionRegistry
from app.chat.relay import ChatRelay
from app.core.config import settings
from app.core.logging import configure_logging
from app.middleware.logging import LoggingMiddleware


def create_app(relay: ChatRelay | None = None) -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Furniture & Bedding Business Platform",
        version="0.1.0",
    )

    # CORS middleware - must be added before other middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware
    app.add_middleware(LoggingMiddleware)

    # One relay, and one connection registry, per application
    app.state.chat_relay = relay or ChatRelay(registry=ConnectionRegistry())

    # API routes
    prefix = settings.API_PREFIX
    app.include_router(users.router, prefix=prefix)
    app.include_router(messages.router, prefix=prefix)
    app.include_router(chat_websocket.router, prefix=prefix)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        return {
            "status": "ok",
            "environment": settings.ENVIRONMENT,
            "chat_connections": len(app.state.chat_relay.registry),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import os
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=settings.DEBUG,
    )
