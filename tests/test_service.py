import pytest
from opentelemetry.trace import StatusCode
from structlog.testing import capture_logs

from productcatalog.errors import ProductFailure, ProductNotFound, RequestCancelled
from productcatalog.faults import SENTINEL_PRODUCT_ID, SimulatedCrash

FLAG_ON = {"productCatalogFailure": True}


def test_get_product_returns_every_catalog_entry(make_service, products):
    svc = make_service()
    for p in products:
        assert svc.get_product(p.id) == p


def test_get_product_not_found_carries_id(make_service):
    svc = make_service()
    with pytest.raises(ProductNotFound) as ei:
        svc.get_product("C")
    assert ei.value.product_id == "C"
    assert ei.value.message == "Product Not Found: C"
    assert ei.value.to_dict() == {"code": "NOT_FOUND", "message": "Product Not Found: C", "product_id": "C"}


def test_flag_gated_failure_on_sentinel(make_service):
    svc = make_service(flags=FLAG_ON)
    with pytest.raises(ProductFailure) as ei:
        svc.get_product(SENTINEL_PRODUCT_ID)
    assert ei.value.code == "INTERNAL"
    assert "Fail Feature Flag Enabled" in ei.value.message

    # Other products are unaffected by the flag.
    assert svc.get_product("A").id == "A"


def test_sentinel_served_when_flag_off(make_service):
    svc = make_service(flags={"productCatalogFailure": False})
    assert svc.get_product(SENTINEL_PRODUCT_ID).name == "Explorascope"


def test_flag_failure_short_circuits_lookup(make_service):
    # Sentinel absent from the catalog: the flag error wins over NotFound.
    svc = make_service(flags=FLAG_ON, catalog=[])
    with pytest.raises(ProductFailure):
        svc.get_product(SENTINEL_PRODUCT_ID)


def test_random_crash_runs_before_everything(make_service):
    svc = make_service(rate=1000, flags=FLAG_ON)
    with pytest.raises(SimulatedCrash):
        svc.get_product("does-not-exist")
    with pytest.raises(SimulatedCrash):
        svc.get_product(SENTINEL_PRODUCT_ID)


def test_rate_zero_never_crashes_over_many_calls(make_service):
    svc = make_service(rate=0)
    for _ in range(2000):
        svc.get_product("A")


def test_cancelled_before_flag_evaluation(make_service):
    svc = make_service(flags=FLAG_ON)
    with pytest.raises(RequestCancelled):
        svc.get_product(SENTINEL_PRODUCT_ID, cancelled=lambda: True)
    assert svc.get_product("A", cancelled=lambda: False).id == "A"


def test_list_and_search_never_fault(make_service, products):
    svc = make_service(rate=1000, flags=FLAG_ON)
    assert list(svc.list_products()) == products
    assert [p.id for p in svc.search_products("mug")] == ["A", "B"]
    assert svc.search_products("nothing matches") == []


def test_example_catalog():
    from productcatalog.faults import FailureConfig, FaultInjector
    from productcatalog.flags import StaticFlags
    from productcatalog.service import CatalogService
    from productcatalog.store import CatalogStore

    from conftest import make_product

    svc = CatalogService(
        CatalogStore([make_product("A", "Red Mug"), make_product("B", "Blue Mug")]),
        FaultInjector(FailureConfig(random_failure_rate_numerator=0), StaticFlags()),
    )
    assert [p.id for p in svc.search_products("mug")] == ["A", "B"]
    assert [p.id for p in svc.search_products("red")] == ["A"]
    with pytest.raises(ProductNotFound, match="C"):
        svc.get_product("C")


# ── Span attributes ──────────────────────────────────────────────────────────

def test_list_records_count(make_service, spans):
    svc = make_service()
    with spans.tracer.start_as_current_span("list"):
        svc.list_products()
    (span,) = spans.finished()
    assert span.attributes["app.products.count"] == 3


def test_search_records_result_count(make_service, spans):
    svc = make_service()
    with spans.tracer.start_as_current_span("search"):
        svc.search_products("blue")
    (span,) = spans.finished()
    assert span.attributes["app.products_search.count"] == 1


def test_get_hit_records_id_name_and_event(make_service, spans):
    svc = make_service()
    with spans.tracer.start_as_current_span("get"):
        svc.get_product("B")
    (span,) = spans.finished()
    assert span.attributes["app.product.id"] == "B"
    assert span.attributes["app.product.name"] == "Blue Mug"
    assert "Product Found - ID: B, Name: Blue Mug" in [e.name for e in span.events]
    assert span.status.status_code != StatusCode.ERROR


def test_get_miss_marks_span_error(make_service, spans):
    svc = make_service()
    with pytest.raises(ProductNotFound):
        with spans.tracer.start_as_current_span("get"):
            svc.get_product("C")
    (span,) = spans.finished()
    assert span.attributes["app.product.id"] == "C"
    assert "app.product.name" not in span.attributes
    assert span.status.status_code == StatusCode.ERROR
    assert "Product Not Found: C" in [e.name for e in span.events]


def test_flag_failure_marks_span_error_and_logs_with_trace(make_service, spans):
    svc = make_service(flags=FLAG_ON)
    with capture_logs() as logs:
        with pytest.raises(ProductFailure):
            with spans.tracer.start_as_current_span("get"):
                svc.get_product(SENTINEL_PRODUCT_ID)
    (span,) = spans.finished()
    assert span.status.status_code == StatusCode.ERROR
    assert "Error: ProductCatalogService Fail Feature Flag Enabled" in [e.name for e in span.events]

    errors = [entry for entry in logs if entry["log_level"] == "error"]
    assert errors
    assert errors[0]["event"] == f"Failed to LoadProduct id {SENTINEL_PRODUCT_ID}."
    assert errors[0]["trace_id"] == format(span.context.trace_id, "032x")
    assert errors[0]["span_id"] == format(span.context.span_id, "016x")


def test_random_crash_is_logged_at_error(make_service, spans):
    svc = make_service(rate=1000)
    with capture_logs() as logs:
        with pytest.raises(SimulatedCrash):
            svc.get_product("A")
    assert any(e["log_level"] == "error" and "Random fail" in e["event"] for e in logs)
