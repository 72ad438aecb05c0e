"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.backend.core.config import settings
from app.backend.core.logging import setup_logging
from app.backend.db.init_db import init_db
from app.backend.api import properties, room_types, units, rates, bookings
from app.backend.services.errors import PricingError


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Setup logging
    setup_logging(settings.log_level, settings.pricing_trace)

    # Initialize database
    init_db()
    yield


# Create FastAPI app
app = FastAPI(
    title="SpaceRate Pro API",
    description="Rate management and booking price calculation for flexible workspaces",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(properties.router, prefix="/api", tags=["properties"])
app.include_router(room_types.router, prefix="/api", tags=["room-types"])
app.include_router(units.router, prefix="/api", tags=["units"])
app.include_router(rates.router, prefix="/api", tags=["rates"])
app.include_router(bookings.router, prefix="/api", tags=["bookings"])


@app.exception_handler(PricingError)
async def pricing_error_handler(request: Request, exc: PricingError):
    """Render typed pricing failures as an error envelope."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Render request validation failures as VALIDATION_ERROR (400)."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": {"code": "VALIDATION_ERROR", "message": "Request validation failed", "details": errors}}
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "SpaceRate Pro API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.backend.main:app", host=settings.api_host, port=settings.api_port)
