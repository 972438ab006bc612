"""
Storefront service entry point.

The storefront router is mounted twice:

    /                 stores addressed by subdomain (bombay.extendbee.com/...)
    /store/{slug}     stores addressed by path (extendbee.com/store/bombay/...)

Run with:
    uvicorn storefront.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .cart import JsonFileCartStorage, MemoryCartStorage
from .core.config import Settings, get_settings
from .core.db import AsyncSessionLocal, Base, engine as default_engine
from .core.responses import ErrorCodes, error_response
from .pages import PageCompositionEngine, PageResolver
from .routes_storefront import router as storefront_router
from .seed import seed_demo_data
from .sessions import SessionRegistry
from .tenancy import (
    HostResolver,
    PageNotFound,
    ResolutionSuperseded,
    SqlQueryClient,
    TenantConfigLoader,
    TenantDirectory,
    TenantNotFound,
    TransportError,
)

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────────
# Exception Handlers
# ────────────────────────────────────────────────────────────────

async def tenant_not_found_handler(request: Request, exc: TenantNotFound) -> JSONResponse:
    # Same answer for unknown, pending and suspended stores
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error_response(ErrorCodes.STORE_NOT_FOUND, "Store not found"),
    )


async def page_not_found_handler(request: Request, exc: PageNotFound) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error_response(ErrorCodes.PAGE_NOT_FOUND, "Page not found", {"slug": exc.slug}),
    )


async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
    logger.warning(f"Transport error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_response(
            ErrorCodes.TRANSPORT_ERROR,
            "The store is temporarily unavailable. Please try again.",
            {"retryable": True},
        ),
    )


async def superseded_handler(request: Request, exc: ResolutionSuperseded) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=error_response(
            ErrorCodes.NAVIGATION_SUPERSEDED,
            "A newer navigation replaced this request",
            {"slug": exc.slug},
        ),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response(
            ErrorCodes.VALIDATION_ERROR,
            "Request data failed validation",
            {"errors": [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]},
        ),
    )


# ────────────────────────────────────────────────────────────────
# Application Factory
# ────────────────────────────────────────────────────────────────

def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[AsyncEngine] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> FastAPI:
    settings = settings or get_settings()
    engine = engine or default_engine
    session_factory = session_factory or (
        AsyncSessionLocal if engine is default_engine else async_sessionmaker(engine, expire_on_commit=False)
    )

    client = SqlQueryClient(session_factory)
    directory = TenantDirectory(client)
    loader = TenantConfigLoader(client)
    cart_storage = (
        JsonFileCartStorage(settings.cart_storage_dir) if settings.cart_storage_dir else MemoryCartStorage()
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        if settings.seed_demo_data:
            async with session_factory() as session:
                await seed_demo_data(session)
            logger.info("Demo store data seeded")
        logger.info(f"Storefront ready: {app.state.host_resolver!r}")
        yield
        app.state.sessions.close_all()

    app = FastAPI(title="Storefront Backend", lifespan=lifespan)

    app.state.settings = settings
    app.state.host_resolver = HostResolver.from_settings(settings)
    app.state.sessions = SessionRegistry(directory, loader, cart_storage)
    app.state.page_resolver = PageResolver(client)
    app.state.composition = PageCompositionEngine.default()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TenantNotFound, tenant_not_found_handler)
    app.add_exception_handler(PageNotFound, page_not_found_handler)
    app.add_exception_handler(TransportError, transport_error_handler)
    app.add_exception_handler(ResolutionSuperseded, superseded_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.get("/health")
    async def healthcheck():
        return {"ok": True}

    # Path mode first so /store/{slug}/... is never taken for a root page
    app.include_router(storefront_router, prefix=f"{settings.path_prefix.rstrip('/')}/{{slug}}")
    app.include_router(storefront_router)

    return app


settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
app = create_app(settings)
