import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from personnel.core.config import settings
from personnel.core.database import Base, SessionLocal, engine
from personnel.core.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from personnel.core.logging_config import setup_logging

from personnel.routers.auth import router as auth_router
from personnel.routers.employees import router as employees_router
from personnel.routers.departments import router as departments_router
from personnel.routers.titles import router as titles_router
from personnel.routers.salaries import router as salaries_router
from personnel.routers.audit import router as audit_router
from personnel.routers.reports import router as reports_router, dashboard_router
from personnel.services.seed import seed_demo_data

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
  if settings.auto_create_schema:
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ensured")
  if settings.seed_demo_data:
    db = SessionLocal()
    try:
      seed_demo_data(db)
    finally:
      db.close()
  yield


app = FastAPI(title="Personnel API", lifespan=lifespan)

# Comma-separated list, e.g.:
# CORS_ORIGINS="http://localhost:8081,http://127.0.0.1:8081,https://hr.example.com"
allow_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]

# Safe fallback for local dev if env var not set
if not allow_origins:
  allow_origins = [
    "http://localhost:8081",
    "http://127.0.0.1:8081",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
  ]

app.add_middleware(
  CORSMiddleware,
  allow_origins=allow_origins,
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)


# --- Error responses ---
@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
  return JSONResponse(status_code=409, content={"detail": {"field": exc.field, "message": exc.message}})


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
  return JSONResponse(status_code=422, content={"detail": {"field": exc.field, "message": exc.message}})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
  return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(PersistenceError)
async def persistence_handler(request: Request, exc: PersistenceError):
  return JSONResponse(status_code=500, content={"detail": str(exc)})


app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(employees_router, prefix="/employees", tags=["employees"])
app.include_router(departments_router, prefix="/departments", tags=["departments"])
app.include_router(titles_router, prefix="/titles", tags=["titles"])
app.include_router(salaries_router, prefix="/salaries", tags=["salaries"])
app.include_router(audit_router, prefix="/audit", tags=["audit"])
app.include_router(reports_router, prefix="/reports", tags=["reports"])
app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])

@app.get("/health")
def health():
  return {"status": "ok"}
