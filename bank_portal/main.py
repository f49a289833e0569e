from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import bank_portal.models  # ensure models are registered
from bank_portal.api import member, transaction, loan, ledger, report
from bank_portal.core.config import settings
from bank_portal.core.errors import LedgerError, ValidationError
from bank_portal.db.base import get_db
from datetime import datetime, timezone
import logging

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Get logger for this module
logger = logging.getLogger(__name__)
logger.info("Starting Bank Portal API")


app = FastAPI(
    title="Bank Portal API",
    description="Savings and loan cooperative back office",
    version="1.0.0",
    debug=settings.DEBUG,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """Map ledger failures to responses, keeping the failure kind for clients."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.kind}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "kind": exc.kind})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"detail": "Validation failed", "kind": ValidationError.kind, "errors": details},
    )


# Include routers
app.include_router(member.router)
app.include_router(transaction.router)
app.include_router(loan.router)
app.include_router(ledger.released_money_router)
app.include_router(ledger.audit_router)
app.include_router(ledger.withdrawal_router)
app.include_router(report.router)


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "Bank Portal API", "version": "1.0.0"}


@app.get("/api/health")
def health_check(db: Session = Depends(get_db)):
    """API and database reachability."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check could not reach the database: {e}")
        return {"status": "degraded", "version": "1.0.0", "database": "unreachable", "database_error": str(e)}
    return {
        "status": "healthy",
        "version": "1.0.0",
        "database": "connected",
        "checked_at": datetime.now(timezone.utc).isoformat(),
    }
