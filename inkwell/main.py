"""FastAPI application entry point"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from inkwell.api import articles, tags, users
from inkwell.config.database import SessionLocal, init_db
from inkwell.config.settings import settings
from inkwell.errors import PermissionDenied, RecordInvalid, RecordNotFound
from inkwell.services.user_service import UserService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def bootstrap_admin() -> None:
    """Create the configured admin account if it does not exist yet"""
    if not (settings.ADMIN_HANDLE and settings.ADMIN_PASSWORD):
        return
    db = SessionLocal()
    try:
        users = UserService(db)
        if users.find_by_handle(settings.ADMIN_HANDLE) is None:
            users.register(settings.ADMIN_HANDLE, settings.ADMIN_PASSWORD, admin=True)
            logger.info(f"Bootstrapped admin user {settings.ADMIN_HANDLE}")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    bootstrap_admin()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Article publishing service with tag and author search",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.include_router(articles.router)
app.include_router(users.router)
app.include_router(tags.router)


@app.exception_handler(RecordInvalid)
async def record_invalid_handler(_request: Request, exc: RecordInvalid):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "errors": dict(exc.errors)},
    )


@app.exception_handler(RecordNotFound)
async def record_not_found_handler(_request: Request, exc: RecordNotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(PermissionDenied)
async def permission_denied_handler(_request: Request, exc: PermissionDenied):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "inkwell",
        "version": settings.APP_VERSION,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "inkwell.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
