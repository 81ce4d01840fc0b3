from __future__ import annotations

from typing import Callable

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .errors import ProductFailure, ProductNotFound
from .faults import FaultInjector
from .log import get_logger, span_logger
from .models import Product
from .store import CatalogStore

log = get_logger(__name__)


class CatalogService:
    """Request handler for the catalog operations.

    Records span attributes on the caller's current span; the transport is
    responsible for opening one span per request.
    """

    def __init__(self, store: CatalogStore, faults: FaultInjector) -> None:
        self.store = store
        self.faults = faults

    def list_products(self) -> tuple[Product, ...]:
        products = self.store.list_all()
        trace.get_current_span().set_attribute("app.products.count", len(products))
        return products

    def get_product(self, product_id: str, cancelled: Callable[[], bool] | None = None) -> Product:
        """Look up one product, subject to fault injection.

        Order: random fatal fault, flag-gated failure (the cancellation probe
        runs right before the remote flag lookup), store lookup.
        Raises SimulatedCrash, RequestCancelled, ProductFailure or ProductNotFound.
        """
        span = trace.get_current_span()
        span.set_attribute("app.product.id", product_id)
        slog = span_logger(log, span)

        self.faults.check_random_failure()

        if self.faults.product_failure_enabled(product_id, cancelled=cancelled):
            msg = "Error: ProductCatalogService Fail Feature Flag Enabled"
            slog.error(f"Failed to LoadProduct id {product_id}.")
            span.set_status(Status(StatusCode.ERROR, msg))
            span.add_event(msg)
            raise ProductFailure(msg)

        found = self.store.find_by_id(product_id)
        if found is None:
            err = ProductNotFound(product_id)
            span.set_status(Status(StatusCode.ERROR, err.message))
            span.add_event(err.message)
            raise err

        msg = f"Product Found - ID: {product_id}, Name: {found.name}"
        span.add_event(msg)
        span.set_attribute("app.product.name", found.name)
        slog.info(msg)
        return found

    def search_products(self, query: str) -> list[Product]:
        results = self.store.search(query)
        trace.get_current_span().set_attribute("app.products_search.count", len(results))
        return results
