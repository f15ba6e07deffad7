import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.endpoints.admin import router as admin_router
from .api.endpoints.auth import router as auth_router
from .api.endpoints.interactions import router as interactions_router
from .api.endpoints.responses import router as responses_router
from .api.endpoints.search import router as search_router
from .api.endpoints.templates import router as templates_router
from .crud import crud_user
from .database import AsyncSessionFactory, create_db_and_tables, engine
from .exceptions import (
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ResponseValidationError,
    TemplateInactiveError,
)


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    print("Application starting...")
    await create_db_and_tables()
    async with AsyncSessionFactory() as session:
        await crud_user.ensure_default_admin(session)
    yield
    print("Application shutting down...")
    await engine.dispose()


app = FastAPI(title="QuizForm Backend", version=__version__, lifespan=lifespan)

# --- CORS middleware (needed for the frontend) ---
fallback_origins = [
    "http://127.0.0.1:3000",
    "http://localhost:3000",
]

env_origins = os.getenv("BACKEND_ALLOWED_ORIGINS")
origins = []

if env_origins:
    origins = [origin.strip() for origin in env_origins.split(",") if origin.strip()]
    print("CORS: allowed origins from environment:", origins)
if not origins:
    origins = fallback_origins
    print("CORS: using fallback origins:", fallback_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(templates_router)
app.include_router(responses_router)
app.include_router(interactions_router)
app.include_router(search_router)
app.include_router(admin_router)


# --- Exception handlers ---


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error_code": "not_found", "message": str(exc)},
    )


@app.exception_handler(TemplateInactiveError)
async def template_inactive_handler(request: Request, exc: TemplateInactiveError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error_code": "template_inactive", "message": str(exc)},
    )


@app.exception_handler(ResponseValidationError)
async def response_validation_handler(request: Request, exc: ResponseValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error_code": "validation_failed", "message": str(exc), "errors": exc.errors},
    )


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError):
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"error_code": "forbidden", "message": str(exc)},
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error_code": "persistence_error", "message": str(exc)},
    )


@app.get("/")
async def read_root():
    return {"message": "Welcome to the QuizForm backend!"}


def run():
    import uvicorn

    app_host = os.getenv("APP_HOST", "127.0.0.1")
    app_port = int(os.getenv("APP_PORT", "8000"))
    reload_app = os.getenv("RELOAD_APP", "True").lower() == "true"

    uvicorn.run("quizform.main:app", host=app_host, port=app_port, reload=reload_app)


if __name__ == "__main__":
    run()
