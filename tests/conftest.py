import sys
import os as _os
import random
from types import SimpleNamespace

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

# Ensure project root is importable (so `import main` / `import cli` work reliably across environments)
_project_root = _os.path.dirname(_os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from productcatalog.faults import SENTINEL_PRODUCT_ID, FailureConfig, FaultInjector  # noqa: E402
from productcatalog.flags import StaticFlags  # noqa: E402
from productcatalog.models import Money, Product  # noqa: E402
from productcatalog.service import CatalogService  # noqa: E402
from productcatalog.store import CatalogStore  # noqa: E402


def make_product(pid: str, name: str = "", description: str = "", **kwargs) -> Product:
    return Product(
        id=pid,
        name=name,
        description=description,
        picture=kwargs.pop("picture", f"{pid}.jpg"),
        price_usd=kwargs.pop("price_usd", Money(currency_code="USD", units=10, nanos=500000000)),
        categories=kwargs.pop("categories", ("mugs",)),
        **kwargs,
    )


@pytest.fixture
def products() -> list[Product]:
    return [
        make_product("A", "Red Mug", "A sturdy ceramic mug"),
        make_product("B", "Blue Mug", "Holds coffee or tea"),
        make_product(SENTINEL_PRODUCT_ID, "Explorascope", "Refractor telescope for the road", categories=("telescopes",)),
    ]


@pytest.fixture
def make_service(products):
    """Build a CatalogService with a controlled catalog, failure rate and flags."""

    def _make(rate: int = 0, flags: dict | None = None, catalog=None, seed: int = 1234) -> CatalogService:
        injector = FaultInjector(
            FailureConfig(random_failure_rate_numerator=rate),
            StaticFlags(flags),
            rng=random.Random(seed),
        )
        return CatalogService(CatalogStore(products if catalog is None else catalog), injector)

    return _make


@pytest.fixture
def spans():
    """Tracer backed by an in-memory exporter, independent of the global provider."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    yield SimpleNamespace(tracer=provider.get_tracer("tests"), finished=exporter.get_finished_spans)
    provider.shutdown()
