import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from schooldesk.api.accounts.router import router as accounts_router
from schooldesk.api.attendance.router import router as attendance_router
from schooldesk.api.auth.router import router as auth_router
from schooldesk.api.classes.router import router as classes_router
from schooldesk.api.dashboard.router import router as dashboard_router
from schooldesk.api.events.router import router as events_router
from schooldesk.api.fees.router import router as fees_router
from schooldesk.api.holidays.router import router as holidays_router
from schooldesk.api.notices.router import router as notices_router
from schooldesk.api.reports.router import router as reports_router
from schooldesk.api.salaries.router import router as salaries_router
from schooldesk.api.schools.router import router as schools_router
from schooldesk.api.staff.router import router as staff_router
from schooldesk.api.students.router import router as students_router
from schooldesk.api.subjects.router import router as subjects_router
from schooldesk.api.teachers.router import router as teachers_router
from schooldesk.api.timetables.router import router as timetables_router
from schooldesk.api.users.router import router as users_router
from schooldesk.core.config import Settings, settings
from schooldesk.core.exceptions import ServiceError
from schooldesk.core.logging import configure_logging
from schooldesk.db.session import build_engine, build_sessionmaker

logger = logging.getLogger(__name__)

_VALUE_ERROR_PREFIX = "Value error, "


def _validation_message(exc: RequestValidationError) -> str:
    """First validation problem as one line, e.g. ``amount: Input should be greater than or equal to 0``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    message = str(first.get("msg", "Invalid value"))
    if message.startswith(_VALUE_ERROR_PREFIX):
        # Raised by our own model validators; the message already reads as a sentence
        return message[len(_VALUE_ERROR_PREFIX):]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    if loc:
        return f"{'.'.join(loc)}: {message}"
    return message


def _register_exception_handlers(app: FastAPI) -> None:
    # Every error body is {"message": ...}

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings
    configure_logging(app_settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.engine.dispose()

    app = FastAPI(title="SchoolDesk", lifespan=lifespan)

    engine = build_engine(app_settings.database_url)
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    # Routers. auth goes before users so /api/users/me is not taken for /api/users/{user_id}
    app.include_router(auth_router)
    app.include_router(schools_router)
    app.include_router(users_router)
    app.include_router(classes_router)
    app.include_router(students_router)
    app.include_router(teachers_router)
    app.include_router(staff_router)
    app.include_router(subjects_router)
    app.include_router(timetables_router)
    app.include_router(attendance_router)
    app.include_router(fees_router)
    app.include_router(salaries_router)
    app.include_router(accounts_router)
    app.include_router(reports_router)
    app.include_router(notices_router)
    app.include_router(events_router)
    app.include_router(holidays_router)
    app.include_router(dashboard_router)

    logger.info("SchoolDesk app created")
    return app


app = create_app()
