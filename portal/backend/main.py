import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal.backend.core.logging_middleware import LoggingMiddleware
from portal.backend.db.init_db import init_db
from portal.backend.routers.assignments import router as assignments_router
from portal.backend.routers.auth import router as auth_router
from portal.backend.routers.submissions import router as submissions_router

logging.basicConfig(level=logging.INFO)

# DEV ONLY: stands in for the real assignment backend.
app = FastAPI(title="Assignment Portal (development backend)")

# Middleware
app.add_middleware(LoggingMiddleware)


# Errors go out as {"message": ...}, the only error field clients read.
@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"message": message})


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(assignments_router, tags=["assignments"])
app.include_router(submissions_router, tags=["submissions"])
