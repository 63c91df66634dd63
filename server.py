# FastAPI Server for the Influencer Marketplace

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.orm import Session

from config.app_config import ADMIN_EMAIL, ADMIN_PASS, ENABLE_SCHEDULER, FRONTEND_URL, UPLOAD_DIR
from core.errors import MarketplaceError
from database.config import SessionLocal, get_db_context, init_db
from database.models import User, UserRole
from auth.utils import get_password_hash
from jobs.stats_sync import StatsSyncJob, schedule_stats_sync
from routers import (
    auth_router,
    influencers_router,
    brands_router,
    campaigns_router,
    chat_router,
    admin_router,
)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Influencer Marketplace API",
    description="Brands, influencers and campaigns with in-app chat",
    version="1.0.0"
)

scheduler = None


def seed_admin(db: Session) -> User:
    """Create the admin account on first start."""
    admin = db.query(User).filter(User.email == ADMIN_EMAIL).first()
    if admin is None:
        logger.info(f"Seeding admin user: {ADMIN_EMAIL}")
        admin = User(
            email=ADMIN_EMAIL,
            password_hash=get_password_hash(ADMIN_PASS),
            role=UserRole.ADMIN,
            is_active=True,
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
    return admin


@app.on_event("startup")
def startup_event():
    global scheduler

    init_db()

    try:
        with get_db_context() as db:
            seed_admin(db)
    except Exception:
        logger.exception("Seeding admin user failed")

    if ENABLE_SCHEDULER:
        from apscheduler.schedulers.background import BackgroundScheduler

        scheduler = BackgroundScheduler(timezone="UTC")
        schedule_stats_sync(scheduler, StatsSyncJob(SessionLocal))
        scheduler.start()
        logger.info("Scheduler started: social stats sync runs daily.")


@app.on_event("shutdown")
def shutdown_event():
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)


# CORS Setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# ERROR HANDLING
# ============================================================================

@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(p) for p in err["loc"] if p != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": "ValidationError", "message": "Validation failed", "details": details},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": type(exc).__name__, "message": exc.detail, "details": None},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "InternalError", "message": "Internal server error", "details": None},
    )


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(auth_router, prefix="/api")
app.include_router(influencers_router, prefix="/api")
app.include_router(brands_router, prefix="/api")
app.include_router(campaigns_router, prefix="/api")
app.include_router(chat_router, prefix="/api")
app.include_router(admin_router, prefix="/api")

# Locally stored uploads
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/api/health")
def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
