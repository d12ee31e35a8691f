"""
ExpenseDesk — FastAPI application entry-point.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from expensedesk.config import settings
from expensedesk.database import Base, SessionLocal, engine
from expensedesk.errors import (
    ExpenseDeskError,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    ValidationError,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 422,
    InvalidTransition: 409,
    NotFound: 404,
    PermissionDenied: 403,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure data dir + tables exist
    os.makedirs(settings.DATA_DIR, exist_ok=True)
    # Import models so Base.metadata knows about them
    import expensedesk.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready (%s)", settings.DATABASE_URL)

    if settings.SEED_DEMO_DATA:
        from expensedesk.store import SqlStore, seed_demo_data
        db = SessionLocal()
        try:
            seed_demo_data(SqlStore(db))
        finally:
            db.close()

    yield
    logger.info("Shutting down")


app = FastAPI(
    title="ExpenseDesk",
    description="Expense receipt submission → supervisor review → reports",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ExpenseDeskError)
async def expensedesk_error_handler(request: Request, exc: ExpenseDeskError):
    status = next((s for cls, s in ERROR_STATUS.items() if isinstance(exc, cls)), 400)
    logger.info("%s %s -> %d %s", request.method, request.url.path, status, exc.code)
    return JSONResponse(status_code=status, content=exc.to_dict())


@app.get("/")
async def root():
    return {"service": "ExpenseDesk", "version": "0.1.0", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# ── Register API routers ─────────────────────────────────────────────────
from expensedesk.routers.extract import router as extract_router  # noqa: E402
from expensedesk.routers.receipts import router as receipts_router  # noqa: E402
from expensedesk.routers.reports import router as reports_router  # noqa: E402
from expensedesk.routers.users import router as users_router  # noqa: E402

app.include_router(receipts_router, prefix="/api", tags=["Receipts"])
app.include_router(reports_router, prefix="/api", tags=["Reports"])
app.include_router(users_router, prefix="/api", tags=["Users"])
app.include_router(extract_router, prefix="/api", tags=["Extraction"])
