from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from datetime import datetime
import logging
import time

from .config.settings import (
    API_TITLE, API_VERSION, API_DESCRIPTION,
    CORS_ORIGINS, CORS_ALLOW_ALL, IS_PRODUCTION, ENV,
)
from .config.database import init_db
from .routers import auth, colleges, dashboard, files, health, saved_files, search

logger = logging.getLogger(__name__)

app = FastAPI(
    title=API_TITLE,
    version=API_VERSION,
    description=API_DESCRIPTION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    swagger_ui_parameters={"defaultModelsExpandDepth": -1},
)


# Advertise the admin bearer token in /docs
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "Bearer": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Token from POST /api/auth/login"
        }
    }
    openapi_schema["security"] = [{"Bearer": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    # Browsers reject credentials with a wildcard origin
    allow_credentials=not CORS_ALLOW_ALL,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_timing_middleware(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    if process_time > 1.0:
        logger.warning(f"Slow request: {request.method} {request.url.path} took {process_time:.2f}s")

    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as {"error": ...}; dict details are passed through"""
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")
    else:
        logger.info(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")

    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(
        content=content,
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report the first invalid field as a 400"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "form")]
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{'.'.join(location)}: {message}"

    logger.info(f"Validation error on {request.method} {request.url.path}: {message}")
    return JSONResponse(
        status_code=400,
        content={"error": message, "details": [
            {"field": ".".join(str(p) for p in e.get("loc", ())), "message": e.get("msg")}
            for e in errors
        ]}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "details": "Internal server error" if IS_PRODUCTION else str(exc),
            "timestamp": datetime.utcnow().isoformat(),
            "path": str(request.url.path),
        }
    )


app.include_router(auth.router)
app.include_router(files.router)
app.include_router(colleges.router)
app.include_router(saved_files.router)
app.include_router(search.router)
app.include_router(dashboard.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {"msg": "Welcome", "docs": "/docs"}


@app.get("/health")
async def health_check():
    """Liveness probe"""
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}


@app.on_event("startup")
async def startup_event():
    """Create tables and log the effective configuration"""
    logger.info(f"Starting {API_TITLE} v{API_VERSION} (env={ENV})")
    logger.info(f"CORS origins: {CORS_ORIGINS}")
    init_db()
    logger.info(f"Application started successfully at {datetime.utcnow().strftime('%Y-%m-%d %H:%M:%S')} UTC")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutting down")
