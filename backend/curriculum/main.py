import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from curriculum.core.config import settings
from curriculum.core.logging import setup_logging
from curriculum.core.request_id import RequestIdMiddleware
from curriculum.core.response import err
from curriculum.core.errors import AppError, missing_fields
from curriculum.db.session import Database
from curriculum.api.routes import alignment, auth, files, outcomes, programs, scores, stakeholders, study_plans, subjects

logger = logging.getLogger(__name__)


def _validation_details(exc: RequestValidationError) -> tuple[str, dict]:
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    missing = [str(e["loc"][-1]) for e in errors if e["type"] == "missing" and e["loc"]]
    if missing:
        error = missing_fields(*missing)
        return error.message, {**error.details, "errors": errors}
    return "Validation failed", {"errors": errors}


def create_app(database: Database | None = None) -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database(settings.DATABASE_URL, ssl_required=settings.DB_SSL_REQUIRED)
        db.create_all()
        app.state.db = db
        logger.info("%s started (%s)", settings.APP_NAME, db.dialect)
        try:
            yield
        finally:
            db.dispose()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    app.add_middleware(RequestIdMiddleware)

    origins = [x.strip() for x in settings.ALLOW_ORIGINS.split(",") if x.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["http://localhost:3000"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(programs.router)
    app.include_router(study_plans.router)
    app.include_router(subjects.router)
    app.include_router(outcomes.router)
    app.include_router(alignment.router)
    app.include_router(scores.router)
    app.include_router(stakeholders.router)
    app.include_router(files.router)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return err(request, exc.code, exc.message, exc.status_code, exc.details or {})

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        message, details = _validation_details(exc)
        return err(request, "VALIDATION_ERROR", message, 400, details)

    @app.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return err(request, "INTERNAL_ERROR", "Server error", 500)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    frontend = Path(settings.FRONTEND_DIR).resolve()

    # registered last so every API route and mount wins over it
    @app.get("/{full_path:path}", include_in_schema=False)
    def frontend_fallback(full_path: str, request: Request):
        if full_path == "api" or full_path.startswith("api/"):
            return err(request, "RESOURCE_NOT_FOUND", "Route not found", 404)
        if full_path:
            candidate = (frontend / full_path).resolve()
            if candidate.is_file() and candidate.is_relative_to(frontend):
                return FileResponse(candidate)
        entry = frontend / settings.FRONTEND_ENTRY
        if entry.is_file():
            return FileResponse(entry)
        return err(request, "RESOURCE_NOT_FOUND", "Front end not found", 404)

    return app


app = create_app()


def run():
    import uvicorn

    uvicorn.run("curriculum.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
