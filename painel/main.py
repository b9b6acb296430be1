import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from painel.api.auth import router as auth_router
from painel.api.chamados import router as chamados_router
from painel.api.clientes import router as clientes_router
from painel.api.dashboard import router as dashboard_router
from painel.api.deps import get_context
from painel.core.config import settings
from painel.core.context import AppContext
from painel.core.errors import AuthRequiredError, BackendError, DocumentNotFoundError, FormValidationError
from painel.core.log import configure_logging

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "context", None) is None:
        app.state.context = AppContext.from_url(settings.DATABASE_URL)
    yield
    context = getattr(app.state, "context", None)
    if context is not None:
        context.close()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Ticket and client dashboard over live per-user collections.",
    version="1.0.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def _request_id(request: Request):
    return getattr(request.state, "request_id", None)


@app.exception_handler(FormValidationError)
async def validation_exception_handler(request: Request, exc: FormValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "field": exc.field, "request_id": _request_id(request)},
    )


@app.exception_handler(AuthRequiredError)
async def auth_required_exception_handler(request: Request, exc: AuthRequiredError):
    return JSONResponse(
        status_code=401,
        content={"detail": exc.message, "request_id": _request_id(request)},
    )


@app.exception_handler(BackendError)
async def backend_exception_handler(request: Request, exc: BackendError):
    not_found = isinstance(exc, DocumentNotFoundError) or isinstance(exc.__cause__, DocumentNotFoundError)
    return JSONResponse(
        status_code=404 if not_found else 502,
        content={"detail": exc.message, "request_id": _request_id(request)},
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    return JSONResponse(
        status_code=503,
        content={"detail": "Service Unavailable: Database connection or operational failure", "request_id": _request_id(request)},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error", "request_id": _request_id(request)},
    )


@app.get("/health", tags=["system"])
def health_check(ctx: AppContext = Depends(get_context)):
    return {
        "status": "ok",
        "database": "ok" if ctx.documents.ping() else "error",
        "session": ctx.session.current.status,
    }


app.include_router(auth_router)
app.include_router(chamados_router)
app.include_router(clientes_router)
app.include_router(dashboard_router)
