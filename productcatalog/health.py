from __future__ import annotations

from .errors import Unimplemented

SERVING = "SERVING"


class HealthResponder:
    """Liveness/readiness for the catalog service.

    Only constructed once the catalog is loaded, and the catalog never
    degrades after that, so there is no not-serving status.
    """

    def check(self) -> str:
        return SERVING

    def watch(self) -> None:
        raise Unimplemented("health check via Watch not implemented")
