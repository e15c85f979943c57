import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
import uvicorn

from movie_rating.api.v1 import auth, movie, rating, user
from movie_rating.core.config import settings
from movie_rating.core.logging import configure_logging
from movie_rating.db.session import async_session_maker, engine
from movie_rating.domain.entity import field_errors
from movie_rating.exceptions.validation import ValidationException
from movie_rating.services.token_cleanup import run_token_cleanup

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.LOG_LEVEL)
    cleanup_task = asyncio.create_task(run_token_cleanup(async_session_maker))
    logger.info("%s %s started in %s environment", settings.TITLE, settings.VERSION, settings.ENVIRONMENT)
    yield
    cleanup_task.cancel()
    with suppress(asyncio.CancelledError):
        await cleanup_task
    await engine.dispose()
    logger.info("%s stopped", settings.TITLE)


app = FastAPI(
    title=settings.TITLE,
    description="Movie catalogue with user ratings and reviews",
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "errors": exc.errors})


@app.exception_handler(ValidationError)
async def command_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Service commands built from request data reject blank strings."""
    return await validation_exception_handler(request, ValidationException("Invalid request data", field_errors(exc)))


app.include_router(auth.router, prefix="/api/v1")
app.include_router(user.router, prefix="/api/v1")
app.include_router(movie.router, prefix="/api/v1")
app.include_router(rating.router, prefix="/api/v1")


@app.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run("movie_rating.main:app", host="0.0.0.0", port=8000, reload=True)  # noqa: S104
