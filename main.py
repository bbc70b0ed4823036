"""
FastAPI application entry point for Clinic Service API.

This module configures and creates the FastAPI application with:
- Structured JSON Logging: Request/response logging for log shippers
- Request ID Propagation: X-Request-ID tracking across logs
- Dependency Injection: Services and repositories injected via Depends()
- Exception Handling: Consistent error responses via setup_exception_handlers()
- CORS Middleware: Allows cross-origin requests from browser clients
- Lifespan Management: MongoDB connection, index creation and cleanup
- Metrics Collection: In-memory metrics for Prometheus scraping

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware Stack (order matters!)                          │
    │    ├── LoggingMiddleware  - Request logging & metrics       │
    │    └── CORSMiddleware     - Cross-origin support            │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py       - /health, /ready, /metrics          │
    │    ├── patients.py     - /v1/patients CRUD                  │
    │    └── specialists.py  - /v1/specialists CRUD               │
    ├─────────────────────────────────────────────────────────────┤
    │  Services (services/)     ← Injected via Depends()          │
    │    └── ResourceService  - role policy, duplicate mapping    │
    ├─────────────────────────────────────────────────────────────┤
    │  Repositories (repositories/)   ← Injected into Services    │
    │    └── ResourceRepository  - one per resource descriptor    │
    ├─────────────────────────────────────────────────────────────┤
    │  Database (MongoDB)             ← Injected into Repositories│
    └─────────────────────────────────────────────────────────────┘

Dependency Injection Flow:
    1. Request arrives at router endpoint
    2. FastAPI resolves the auth dependencies declared on the route
    3. FastAPI resolves Depends(get_*_service) dependencies
    4. Services receive repository instances via their constructors
    5. Repositories receive the Database instance via their constructors
    6. Handler executes with fully configured dependency graph
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from core.config import API_HOST, API_PORT, API_RELOAD
from core.dependencies import get_database, reset_database
from core.exceptions import setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
from api.routers import health_router, patients_router, specialists_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application.

    Startup:
        - Configures structured JSON logging
        - Connects to MongoDB and ensures collection indexes

    Shutdown:
        - Closes the MongoDB client
    """
    # Configure structured logging FIRST (before any other logging)
    setup_logging(level="INFO", json_format=True)

    logger = logging.getLogger(__name__)
    logger.info("Starting Clinic Service API...")

    db = get_database()
    logger.info("Database initialized", extra={"db_name": db.db_name})

    yield  # Application runs here

    logger.info("Clinic Service API shutting down...")
    reset_database()


app = FastAPI(
    title="Clinic Service API",
    description="REST API for a mental-health clinic. Manage patients and specialists with role-based access control.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================
setup_exception_handlers(app)

# =============================================================================
# MIDDLEWARE
# =============================================================================
# Middleware is executed in REVERSE order of registration.

# 1. CORS Middleware (innermost - closest to routes)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 2. Logging Middleware (outermost - captures all requests)
app.add_middleware(LoggingMiddleware)

# =============================================================================
# ROUTERS
# =============================================================================
app.include_router(health_router)
app.include_router(patients_router)
app.include_router(specialists_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )
