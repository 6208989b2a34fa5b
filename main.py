from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text
from bizcards.database import get_db
from bizcards.core.config import settings
from bizcards.core.exception_handlers import register_exception_handlers
from bizcards.core.logging_config import logger
from bizcards.core.rate_limiter import rate_limiter
from bizcards.middleware import LocaleAuthMiddleware
from bizcards.routers import auth, admin, companies, employees, pages

# Schema is managed by Alembic; see alembic/versions


@asynccontextmanager
async def lifespan(app: FastAPI):
    rate_limiter.start()
    logger.info("Rate limiter sweep started")
    yield
    await rate_limiter.stop()


app = FastAPI(
    title="Digital Business Cards API",
    version="1.0.0",
    redirect_slashes=False,  # Disable automatic redirects to prevent POST data loss
    lifespan=lifespan,
)

register_exception_handlers(app)

# Locale routing and the dashboard role gate run inside CORS
app.add_middleware(LocaleAuthMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,  # Required for HTTP-only cookie authentication
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(companies.router, prefix="/api/companies", tags=["Companies"])
app.include_router(employees.router, prefix="/api", tags=["Employees"])
app.include_router(pages.router, tags=["Pages"])


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "database": "connected"
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unhealthy"
        )
