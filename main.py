from fastapi import FastAPI, Depends, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from mentorship.config.settings import settings
from mentorship.database import Base, SessionLocal, engine
from mentorship.errors import MentorshipError
from mentorship.routers import admins, auth, curriculum, tasks, users
from mentorship.schemas import MaintenanceReportOut, SchedulerStatus
from mentorship.services.blob_store import BlobStore
from mentorship.services.curriculum import CurriculumCatalog
from mentorship.services.scheduler import MaintenanceScheduler
from mentorship.utils.deps import get_blob_store, get_maintenance

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Mentorship Program API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Route registration
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(admins.router, tags=["Admin"])
app.include_router(tasks.router, tags=["Tasks"])
app.include_router(curriculum.router, tags=["Curriculum"])


@app.exception_handler(MentorshipError)
async def mentorship_error_handler(request: Request, exc: MentorshipError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Build the storage collaborators and start the maintenance scheduler"""
    logger.info("Starting Mentorship API...")
    Base.metadata.create_all(bind=engine)

    blob_store = BlobStore(settings.UPLOAD_DIR, settings.MAX_FILE_SIZE)
    blob_store.open()
    catalog = CurriculumCatalog.load(settings.CURRICULUM_PATH)
    maintenance = MaintenanceScheduler(SessionLocal, blob_store, catalog)

    app.state.blob_store = blob_store
    app.state.catalog = catalog
    app.state.maintenance = maintenance

    if settings.SCHEDULER_ENABLED:
        maintenance.start()
    else:
        logger.info("In-process scheduler disabled, relying on the /cron trigger")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the scheduler and mark the blob store unavailable"""
    logger.info("Shutting down Mentorship API...")
    maintenance = getattr(app.state, "maintenance", None)
    if maintenance is not None:
        maintenance.stop()
    blob_store = getattr(app.state, "blob_store", None)
    if blob_store is not None:
        blob_store.close()


def verify_cron_secret(authorization: Optional[str] = Header(None)):
    """External triggers must present the shared CRON_SECRET as a bearer token"""
    if not settings.CRON_SECRET or authorization != f"Bearer {settings.CRON_SECRET}":
        raise HTTPException(status_code=401, detail="Unauthorized")


def _run_maintenance(maintenance: MaintenanceScheduler):
    logger.info("Maintenance run triggered externally")
    report = maintenance.run_maintenance()
    if not report.success:
        return JSONResponse(status_code=500, content=report.to_dict())
    return report.to_dict()


# Root route
@app.get("/")
def read_root():
    return {"message": "Mentorship Program API"}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/storage/stats")
def storage_stats(blob_store: BlobStore = Depends(get_blob_store)):
    """Number and size of stored submission files"""
    return blob_store.get_storage_stats()


@app.get("/scheduler/status", response_model=SchedulerStatus)
async def get_scheduler_status(maintenance: MaintenanceScheduler = Depends(get_maintenance)):
    """Get scheduler status and job information"""
    return await maintenance.get_scheduler_status()


@app.post("/scheduler/trigger", response_model=MaintenanceReportOut,
          dependencies=[Depends(verify_cron_secret)])
def trigger_maintenance(maintenance: MaintenanceScheduler = Depends(get_maintenance)):
    """Run the daily maintenance now and report what it did"""
    return _run_maintenance(maintenance)


@app.get("/cron", response_model=MaintenanceReportOut, dependencies=[Depends(verify_cron_secret)])
def cron(maintenance: MaintenanceScheduler = Depends(get_maintenance)):
    """Entry point for an external cron service (same routine as the timer)"""
    return _run_maintenance(maintenance)
