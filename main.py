import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from app.api.endpoints import router as api_router
from app.core.config import settings
from app.core.errors import DirectoryError, ValidationError
from app.core.logging import configure_logging
from app.db.init_db import init_db

logger = logging.getLogger("app.main")

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    await init_db()
    yield


def validation_errors_to_dict(exc: RequestValidationError) -> dict:
    # {"lat": ["Field required"]} - ключ по имени параметра, без "query"/"path"
    errors: dict = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("query", "path", "body")]
        field = ".".join(loc) or "request"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return errors


async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
    logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    if isinstance(exc, ValidationError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message, "errors": exc.errors})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await directory_error_handler(request, ValidationError(validation_errors_to_dict(exc)))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DirectoryError, directory_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Directory API for Organizations, Buildings, and Activities",
    version="1.0.0",
    lifespan=lifespan
)

register_exception_handlers(app)
app.include_router(api_router, prefix=settings.API_PREFIX)

@app.get("/health")
def health_check():
    return {"status": "ok"}
