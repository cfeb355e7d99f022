from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from pocketbook.api.middleware.error_handler import (
    handle_generic_error,
    handle_integrity_error,
    handle_service_error,
    handle_validation_error,
)
from pocketbook.api.middleware.logging import RequestLoggingMiddleware
from pocketbook.api.v1 import router as v1_router
from pocketbook.api.v1.health import router as health_router
from pocketbook.categorization.backend import OpenAICompatibleBackend, TextGenerationBackend
from pocketbook.categorization.catalog import load_catalog
from pocketbook.categorization.memory import MerchantMemory, SqlAlchemyMerchantMemoryStore
from pocketbook.categorization.projector import TransactionProjector
from pocketbook.categorization.service import CategorizationService
from pocketbook.categorization.strategies import build_strategies
from pocketbook.config import Settings, settings
from pocketbook.core.exceptions import CategorizationServiceError
from pocketbook.core.logging_config import configure_logging
from pocketbook.core.tenancy import build_tenant_resolver
from pocketbook.db.session import AsyncSessionLocal, dispose_engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging(app.state.settings)
    yield
    # Shutdown
    aclose = getattr(app.state.backend, "aclose", None)
    if aclose is not None:
        await aclose()
    await dispose_engine()


def build_backend(app_settings: Settings) -> OpenAICompatibleBackend:
    return OpenAICompatibleBackend(
        base_url=app_settings.llm_base_url,
        api_key=app_settings.llm_api_key,
        model=app_settings.llm_model,
        temperature=app_settings.llm_temperature,
    )


def create_app(
    app_settings: Settings | None = None,
    backend: TextGenerationBackend | None = None,
) -> FastAPI:
    """Build the application and wire the categorization components.

    Args:
        app_settings: Settings to use (default: process settings)
        backend: Text-generation backend (default: OpenAI-compatible client from settings)
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Pocketbook Categorization API",
        description="Tenant-scoped merchant categorization for a personal-finance dashboard",
        version="0.1.0",
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    # Wire components once; strategy and tenant resolver choices are fixed here.
    catalog = load_catalog(app_settings.catalog_path)
    backend = backend or build_backend(app_settings)
    store = (
        SqlAlchemyMerchantMemoryStore(AsyncSessionLocal)
        if app_settings.merchant_memory_persist
        else None
    )
    memory = MerchantMemory(
        catalog,
        shards=app_settings.merchant_memory_shards,
        max_entries=app_settings.merchant_memory_max_entries,
        ttl_seconds=app_settings.merchant_memory_ttl_seconds,
        store=store,
    )

    app.state.settings = app_settings
    app.state.backend = backend
    app.state.catalog = catalog
    app.state.memory = memory
    app.state.tenant_resolver = build_tenant_resolver(
        app_settings.tenant_provider, app_settings.tenant_header
    )
    app.state.categorization_service = CategorizationService(
        catalog,
        memory,
        build_strategies(backend, app_settings.llm_timeout_seconds),
        default_suggestions=app_settings.suggestions_default_count,
    )
    app.state.projector = TransactionProjector(memory)

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers (order matters - most specific first)
    app.add_exception_handler(CategorizationServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_generic_error)

    # Register routers
    app.include_router(health_router)
    app.include_router(v1_router)

    return app


app = create_app()
