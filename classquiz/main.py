import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .core.config import Settings, get_settings
from .core.cors import setup_cors
from .core.errors import ClassQuizError, ValidationError
from .core.logging_config import configure_logging
from .core.resources import Resources, close_resources, open_resources
from .api.v1.routers import quizzes as quizzes_router
from .api.v1.routers import users as users_router
from .api.v1.routers import ws_router

logger = logging.getLogger(__name__)


def _error_response(status_code: int, kind: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message, "kind": kind})


async def handle_classquiz_error(request: Request, exc: ClassQuizError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.kind, exc.message)
    return _error_response(exc.status_code, exc.kind, exc.message)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    message = "; ".join(problems) or "Invalid request"
    logger.info("%s %s invalid: %s", request.method, request.url.path, message)
    return _error_response(status.HTTP_400_BAD_REQUEST, ValidationError.kind, message)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal", "Internal server error")


def create_app(settings: Optional[Settings] = None, resources: Optional[Resources] = None) -> FastAPI:
    """
    Build the application. When ``resources`` is given it is used as-is and not
    closed on shutdown; otherwise real connections are opened from ``settings``.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = resources is None
        res = await open_resources(settings) if owned else resources
        app.state.resources = res
        if res.relay is not None:
            res.relay.start()
        logger.info("%s started (env=%s)", settings.APP_NAME, settings.APP_ENV)
        try:
            yield
        finally:
            if owned:
                await close_resources(res)
            elif res.relay is not None:
                await res.relay.stop()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    setup_cors(app, settings)

    app.add_exception_handler(ClassQuizError, handle_classquiz_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)

    app.include_router(quizzes_router.router, prefix=settings.API_V1_PREFIX)
    app.include_router(users_router.router, prefix=settings.API_V1_PREFIX)

    app.include_router(ws_router.ws_router)

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    return app


app = create_app()
