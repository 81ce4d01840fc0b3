from __future__ import annotations


class CatalogError(Exception):
    """Recoverable error returned to the caller as a structured response."""

    code = "UNKNOWN"
    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ProductNotFound(CatalogError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product Not Found: {product_id}")
        self.product_id = product_id

    def to_dict(self) -> dict[str, str]:
        return {**super().to_dict(), "product_id": self.product_id}


class ProductFailure(CatalogError):
    code = "INTERNAL"
    http_status = 500


class Unimplemented(CatalogError):
    code = "UNIMPLEMENTED"
    http_status = 501


class RequestCancelled(CatalogError):
    code = "CANCELLED"
    http_status = 499


class ServiceUnavailable(CatalogError):
    code = "UNAVAILABLE"
    http_status = 503


class CatalogLoadError(Exception):
    pass


class InvalidTransition(Exception):
    pass
