import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import ActivityError, MalformedRequestError
from .logging_config import setup_logging
from .repositories import ActivityStore, get_store
from .routers import activities as activities_router
from .settings import get_settings

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "activities",
        "description": "List, create, replace and delete user-scoped activities stored in a JSON document.",
    },
]

_settings = get_settings()
setup_logging(_settings.log_level, _settings.log_json)
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Activity Backend",
    description="Activity tracking API persisting every user's activities in a single JSON file.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# CORS from CORS_ALLOW_ORIGINS, '*' when unset
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ActivityError)
async def activity_error_handler(request: Request, exc: ActivityError) -> JSONResponse:
    """
    Render service errors as {"error": <message>} with the error's status code.
    """
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, method=request.method, error=exc.message)
    else:
        logger.info("request_rejected", path=request.url.path, method=request.method, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    A body that is missing, not JSON, or not a JSON object is reported as a
    malformed request.
    """
    error = MalformedRequestError()
    logger.info("request_malformed", path=request.url.path, method=request.method, detail=exc.errors())
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check(store: ActivityStore = Depends(get_store)):
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the active storage backend.
    """
    return {"message": "Healthy", "backend": store.backend_name}


# Include routers
app.include_router(activities_router.router)
