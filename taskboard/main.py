import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskboard import __version__, config
from taskboard.api import tasks_router, users_router

logger = logging.getLogger(__name__)


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = [str(p) for p in error.get("loc", ()) if p != "body"]
        message = error.get("msg", "Invalid value")
        parts.append(f"{'.'.join(loc)}: {message}" if loc else message)
    return "; ".join(parts) or "Invalid request"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    detail = _describe_validation_errors(exc)
    logger.info("Rejected %s %s: %s", request.method, request.url.path, detail)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


def create_app() -> FastAPI:
    """
    Creates and configures the FastAPI application.
    """
    app = FastAPI(
        title="Task Board",
        description="Users and their ordered task lists.",
        version=__version__,
    )

    # --- Middleware Configuration ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Validation failures are client errors with a readable message
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(tasks_router)
    app.include_router(users_router)

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the Task Board API!"}

    return app


# Create the FastAPI app instance
app = create_app()


def run() -> None:
    import uvicorn

    from taskboard.database import create_db_and_tables
    from taskboard.logging_setup import setup_logging

    setup_logging(config.LOG_LEVEL, config.LOG_DIR)
    create_db_and_tables()
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
