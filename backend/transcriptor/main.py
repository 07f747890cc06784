import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session

from transcriptor.api.auth import router as auth_router
from transcriptor.api.deps import get_store
from transcriptor.api.transcripts import router as transcripts_router
from transcriptor.api.users import router as users_router
from transcriptor.auth import hash_password
from transcriptor.config import settings
from transcriptor.database import engine, init_db
from transcriptor.errors import AppError, StorageError, UnexpectedError
from transcriptor.store import SqlStore, Store

logger = logging.getLogger(__name__)


def seed_admin(store: Store) -> None:
    if not settings.admin_password:
        return
    if store.find_user_by_username(settings.admin_username):
        return
    store.create_user(
        settings.admin_name,
        settings.admin_username,
        hash_password(settings.admin_password),
        "admin",
    )
    logger.info(f"Seeded admin user {settings.admin_username}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    with Session(engine) as session:
        seed_admin(SqlStore(session))
    logger.info("Transcriptor started")
    yield


app = FastAPI(title="Transcriptor", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = [
        f"{'.'.join(str(part) for part in err['loc'][1:]) or 'body'}: {err['msg']}"
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "; ".join(problems)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    error = UnexpectedError()
    return JSONResponse(status_code=error.status_code, content={"detail": error.message})


app.include_router(auth_router)
app.include_router(transcripts_router)
app.include_router(users_router)


@app.get("/health")
def health(store: Store = Depends(get_store)):
    try:
        store.ping()
    except StorageError:
        return JSONResponse(
            status_code=503, content={"status": "degraded", "database": "unavailable"}
        )
    return {"status": "ok", "database": "ok"}
