from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from pathlib import Path
import logging

from stockapp.config import get_settings
from stockapp.database import engine, Base
from stockapp.exceptions import InventoryError
from stockapp.api import products, sales, purchases, adjustments, health

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"
STATIC_DIR = Path(settings.STATIC_DIR) if settings.STATIC_DIR else Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting up application...")

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    yield

    logger.info("Shutting down application...")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Inventory management API: products, sales and purchases.

    - **Products**: CRUD with unique names and a low-stock threshold
    - **Sales**: append-only records that take units out of stock
    - **Purchases**: append-only records that put units back in stock
    - **Stock adjustments**: audited manual corrections of the stock level

    ### Stock consistency
    Every quantity change goes through the stock ledger, which applies it as a
    single conditional update. Concurrent sales of the same product can never
    oversell it.

    ### Errors
    Every error response has the shape `{"message": "..."}`.
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part not in ("body", "path", "query"))
        problems.append(f"{field}: {error['msg']}" if field else error["msg"])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request: " + "; ".join(problems)},
    )


@app.exception_handler(InventoryError)
async def inventory_exception_handler(request: Request, exc: InventoryError):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc)})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "The inventory database is unavailable"},
    )


# Include API routers
app.include_router(health.router, prefix=API_PREFIX)
app.include_router(products.router, prefix=API_PREFIX)
app.include_router(sales.router, prefix=API_PREFIX)
app.include_router(purchases.router, prefix=API_PREFIX)
app.include_router(adjustments.router, prefix=API_PREFIX)


@app.get(API_PREFIX, tags=["Root"])
def api_info():
    """API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": f"{API_PREFIX}/health/"
    }


@app.api_route(
    API_PREFIX + "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
def api_not_found(path: str):
    """Unknown API paths get an explicit 404 instead of the UI."""
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"No API endpoint at {API_PREFIX}/{path}"
    )


if STATIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@app.get("/{full_path:path}", include_in_schema=False)
def serve_ui(full_path: str):
    """Serve the browser UI; unknown paths fall back to index.html."""
    index = STATIC_DIR / "index.html"
    if not index.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="UI bundle not found")

    static_root = STATIC_DIR.resolve()
    candidate = (static_root / full_path).resolve()
    if full_path and candidate.is_file() and static_root in candidate.parents:
        return FileResponse(candidate)
    return FileResponse(index)
