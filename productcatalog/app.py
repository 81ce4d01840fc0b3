from __future__ import annotations

import os
import random
from contextlib import asynccontextmanager
from typing import Callable, Iterable

from anyio import from_thread
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from opentelemetry import trace
from opentelemetry.trace import SpanKind

from .errors import CatalogError, ServiceUnavailable
from .faults import FailureConfig, FaultInjector, SimulatedCrash
from .flags import FlagClient, build_flag_client
from .health import HealthResponder
from .loader import read_product_files
from .log import get_logger
from .models import ErrorResponse, HealthCheckResponse, ListProductsResponse, Product, SearchProductsResponse
from .runtime import Lifecycle
from .service import CatalogService
from .settings import Settings, load_settings
from .store import CatalogStore

log = get_logger(__name__)
tracer = trace.get_tracer(__name__)

_RPC = "oteldemo.ProductCatalogService"

_GET_PRODUCT_ERRORS = {
    404: {"model": ErrorResponse, "description": "Product not found"},
    500: {"model": ErrorResponse, "description": "Flag-gated failure"},
}


def _disconnect_probe(request: Request) -> Callable[[], bool]:
    """Return a callable usable from a worker thread that reports client disconnect."""

    def probe() -> bool:
        return from_thread.run(request.is_disconnected)

    return probe


def create_app(
    settings: Settings | None = None,
    *,
    products: Iterable[Product] | None = None,
    flags: FlagClient | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    """Build the catalog application.

    ``products``, ``flags`` and ``rng`` replace the catalog files, the remote
    flag client and the random source (tests, embedding).
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        lifecycle: Lifecycle = app.state.lifecycle
        for warning in settings.warnings:
            log.error(warning)
        try:
            catalog = tuple(products) if products is not None else read_product_files(settings.products_dir)
        except Exception:
            lifecycle.stop()
            raise

        flag_client = flags or build_flag_client(settings.flagd_url, timeout_s=settings.flagd_timeout_s)
        config = FailureConfig(random_failure_rate_numerator=settings.fails_per_thousand)
        log.info(
            f"This service will fail on calls to getProduct approx {config.random_failure_rate_numerator} "
            "out of every thousand calls"
        )
        app.state.service = CatalogService(CatalogStore(catalog), FaultInjector(config, flag_client, rng=rng))
        app.state.health = HealthResponder()
        lifecycle.start_serving()
        try:
            yield
        finally:
            lifecycle.drain()
            flag_client.close()
            lifecycle.stop()

    app = FastAPI(title="Product Catalog Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.lifecycle = Lifecycle()
    app.state.exit_process = os._exit

    @app.middleware("http")
    async def serving_guard(request: Request, call_next):
        if request.url.path.startswith("/products") and not request.app.state.lifecycle.serving:
            err = ServiceUnavailable(f"Service is {request.app.state.lifecycle.state.value}")
            return JSONResponse(status_code=err.http_status, content=err.to_dict())
        return await call_next(request)

    @app.exception_handler(CatalogError)
    async def catalog_error(request: Request, exc: CatalogError) -> JSONResponse:
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    if settings.crash_mode == "process":

        @app.exception_handler(SimulatedCrash)
        async def simulated_crash(request: Request, exc: SimulatedCrash) -> JSONResponse:
            log.critical("Simulated crash, terminating process", error=str(exc), path=request.url.path)
            request.app.state.exit_process(1)
            return JSONResponse(status_code=500, content={"code": "INTERNAL", "message": str(exc)})

    # In "request" mode SimulatedCrash has no handler: it escapes the app as an
    # unhandled error of the one request and the server logs the traceback.

    @app.get("/products", response_model=ListProductsResponse)
    def list_products(request: Request) -> ListProductsResponse:
        with tracer.start_as_current_span(f"{_RPC}/ListProducts", kind=SpanKind.SERVER):
            return ListProductsResponse(products=request.app.state.service.list_products())

    @app.get("/products/search", response_model=SearchProductsResponse)
    def search_products(request: Request, query: str = "") -> SearchProductsResponse:
        with tracer.start_as_current_span(f"{_RPC}/SearchProducts", kind=SpanKind.SERVER):
            return SearchProductsResponse(results=request.app.state.service.search_products(query))

    @app.get("/products/{product_id}", response_model=Product, responses=_GET_PRODUCT_ERRORS)
    def get_product(request: Request, product_id: str) -> Product:
        with tracer.start_as_current_span(f"{_RPC}/GetProduct", kind=SpanKind.SERVER):
            return request.app.state.service.get_product(product_id, cancelled=_disconnect_probe(request))

    @app.get("/health", response_model=HealthCheckResponse)
    def health_check(request: Request) -> HealthCheckResponse:
        return HealthCheckResponse(status=request.app.state.health.check())

    @app.get("/health/watch", responses={501: {"model": ErrorResponse}})
    def health_watch(request: Request) -> None:
        request.app.state.health.watch()

    return app
