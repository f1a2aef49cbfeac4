import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.database import create_db_and_tables
from core.exceptions import AppException
from routes.auth import router as auth_router
from routes.projects import router as project_router
from routes.platforms import router as platform_router
from routes.users import router as users_router
from routes.invitation import router as invitation_router
from routes.appsumo import router as appsumo_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


# =========================================
# 🏁 Lifespan (DB initialization)
# =========================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("Database tables created on startup (edition=%s).", settings.EDITION.value)
    yield
    logger.info("Application shutting down.")


# =========================================
#  ✅ FastAPI App
# =========================================
app = FastAPI(lifespan=lifespan, title="TenantFlow Backend")

allowed_origins = [
    settings.FRONTEND_URL,
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =========================================
# ❗ Error taxonomy → JSON
# =========================================
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.error_code, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.error_code, "message": exc.message, "params": exc.details},
    )


# =========================================
# 📦 Routers
# =========================================
app.include_router(auth_router, prefix="/authentication", tags=["Authentication"])
app.include_router(project_router, prefix="/projects", tags=["Projects"])
app.include_router(platform_router, prefix="/platforms", tags=["Platforms"])
app.include_router(users_router, prefix="/users", tags=["Users"])
app.include_router(invitation_router, prefix="/invitations", tags=["Invitations"])
app.include_router(appsumo_router)


# =========================================
# 🩺 Health Check
# =========================================
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "Backend is running"}
