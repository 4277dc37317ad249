from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from promptforge import __version__
from promptforge.api.v1 import folders, prompts, refine, session, tags
from promptforge.core.config import settings
from promptforge.core.database import SessionLocal, engine, init_local_store
from promptforge.core.logging import configure_logging
from promptforge.middleware.logging import LoggingMiddleware
from promptforge.services.mock_refine_service import MockRefinementProvider
from promptforge.storage import LocalStore, RemoteMirror
from promptforge.workspace import InvalidCommandError, RecordNotFoundError, WorkspaceRegistry


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_local_store(engine)
    client = httpx.AsyncClient(timeout=settings.REMOTE_TIMEOUT_SECONDS)

    def mirror_factory(access_token):
        return RemoteMirror(
            settings.REMOTE_URL,
            api_key=settings.REMOTE_API_KEY,
            access_token=access_token,
            client=client,
            timeout=settings.REMOTE_TIMEOUT_SECONDS,
        )

    app.state.workspaces = WorkspaceRegistry(
        LocalStore(SessionLocal),
        mirror_factory,
        refiner=app.state.refiner,
        default_provider=settings.DEFAULT_LLM_PROVIDER,
    )
    try:
        yield
    finally:
        app.state.workspaces.clear()
        await client.aclose()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="PromptForge",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.refiner = MockRefinementProvider()

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

    @app.exception_handler(RecordNotFoundError)
    async def record_not_found(request: Request, exc: RecordNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(InvalidCommandError)
    async def invalid_command(request: Request, exc: InvalidCommandError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    # API routes
    prefix = settings.API_V1_PREFIX
    app.include_router(prompts.router, prefix=prefix)
    app.include_router(folders.router, prefix=prefix)
    app.include_router(tags.router, prefix=prefix)
    app.include_router(session.router, prefix=prefix)
    app.include_router(refine.router, prefix="/api")

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        return {"status": "ok", "environment": settings.ENVIRONMENT}

    return app


app = create_app()


if __name__ == "__main__":
    import os
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
