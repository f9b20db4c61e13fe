"""FastAPI main application (V2)."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.api import v2_casting as v2_casting_api
from backend.app.config import CORS_ALLOW_ORIGINS, DEV_MODE, STATE_PATH
from backend.app.core.error_handling import create_error_response, log_error_with_context
from shared.config import LOG_LEVEL

logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not DEV_MODE and "*" in CORS_ALLOW_ORIGINS:
        raise RuntimeError(
            "Unsafe CORS config: '*' is only allowed in dev mode. "
            "Set CASTDESK_CORS_ALLOW_ORIGINS to explicit origins."
        )
    logger.info("API startup complete (dev_mode=%s, state=%s)", DEV_MODE, STATE_PATH)
    yield


app = FastAPI(title="Castdesk API", version="2.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTPExceptions with structured error responses."""
    error_response = create_error_response(
        error_code=f"API_HTTP_{exc.status_code}",
        message=exc.detail,
        operation=request.url.path,
        details={"status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content=error_response)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler: return structured error responses with logging."""
    log_error_with_context(
        error=exc,
        operation=request.url.path,
        character_id=request.path_params.get("character_id"),
        extra_context={
            "method": request.method,
            "query_params": dict(request.query_params),
        },
    )
    message = str(exc) or f"An error occurred: {type(exc).__name__}"
    error_response = create_error_response(
        error_code="API_ERROR",
        message=message,
        operation=request.url.path,
        details={"exception_type": type(exc).__name__},
    )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_response)


app.include_router(v2_casting_api.router)


@app.get("/")
async def root():
    return {"message": "Castdesk API", "version": "2.0.0"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
