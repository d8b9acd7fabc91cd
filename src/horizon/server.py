import argparse
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import CORS_ORIGIN, DEFAULT_HOST, DEFAULT_PORT
from .logging_config import get_logger, setup_logging
from .routes import interactions_router, stats_router
from .storage import init_database

logger = get_logger(__name__, namespace='api')

app = FastAPI(title="Horizon API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[CORS_ORIGIN],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(interactions_router)
app.include_router(stats_router)


def format_validation_error(exc: RequestValidationError) -> str:
    """Turn the first validation error into a single readable message."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    error = errors[0]
    loc = error.get('loc', ())
    error_type = error.get('type', '')

    if error_type == 'json_invalid':
        return "Invalid JSON body"

    if loc and loc[0] == 'body':
        if len(loc) == 1:
            return "Invalid JSON body"
        if error_type == 'missing':
            return f"Missing required field: {loc[-1]}"
        msg = error.get('msg', '')
        # pydantic prefixes messages raised from validators
        return msg.removeprefix('Value error, ')

    if loc:
        return f"Invalid {loc[-1]}: {error.get('msg', '')}"
    return error.get('msg', 'Invalid request')


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": format_validation_error(exc)})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.on_event("startup")
def startup_event():
    """Initialize database on startup."""
    init_database()


@app.get("/", response_class=PlainTextResponse)
def index():
    return "Horizon API"


@app.get("/health")
def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


def main():
    parser = argparse.ArgumentParser(description="Horizon coding activity tracker API")
    parser.add_argument('--host', default=DEFAULT_HOST, help='Host to bind to')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT, help='Port to bind to')
    args = parser.parse_args()

    setup_logging()
    init_database()

    logger.info(f"Starting Horizon API on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
