import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# ✅ Import All API Routes
from admissions.api.routes import auth, applications, admin, notifications, health
from admissions.core import config
from admissions.core.logging_config import setup_logging

setup_logging(config.LOG_LEVEL, config.LOG_DIR)
logger = logging.getLogger(__name__)


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(
    title="University Admissions API",
    description="Student application portal and admin review workflow",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(applications.router)
app.include_router(admin.router)
app.include_router(notifications.router)
app.include_router(health.router)


# ============================================
# ✅ DATABASE STARTUP
# ============================================

@app.on_event("startup")
def prepare_database():
    if config.RUN_MIGRATIONS:
        from admissions.db.migrate import run_migrations
        run_migrations()
    else:
        from admissions.db.init_db import init_db
        init_db()


@app.get("/")
def root():
    return {"status": "Admissions API running"}
