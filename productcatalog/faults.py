"""Fault injection for GetProduct.

Two independent modes:
 - random fatal fault: roughly N of every 1000 calls abort the request
   (simulates a crashing container)
 - flag-gated failure: the sentinel product fails with an internal error while
   the remote feature flag is on
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable

from .errors import RequestCancelled
from .flags import FlagClient
from .log import get_logger, span_logger
from .settings import MAX_FAILS_PER_THOUSAND, MIN_FAILS_PER_THOUSAND

log = get_logger(__name__)

SENTINEL_PRODUCT_ID = "OLJCESPC7Z"
FAILURE_FLAG_KEY = "productCatalogFailure"


class SimulatedCrash(RuntimeError):
    """Injected fatal fault.

    Not a CatalogError: it must never be turned into a clean error response by
    the service itself.
    """


@dataclass(frozen=True)
class FailureConfig:
    random_failure_rate_numerator: int = 5
    sentinel_product_id: str = SENTINEL_PRODUCT_ID
    failure_flag_key: str = FAILURE_FLAG_KEY

    def __post_init__(self) -> None:
        n = self.random_failure_rate_numerator
        if not MIN_FAILS_PER_THOUSAND <= n <= MAX_FAILS_PER_THOUSAND:
            raise ValueError(f"random_failure_rate_numerator must be in [0, 1000], got {n}")


class FaultInjector:
    def __init__(
        self,
        config: FailureConfig,
        flags: FlagClient,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self._flags = flags
        # SystemRandom keeps no shared state, so concurrent draws are safe.
        self._rng = rng or random.SystemRandom()

    def check_random_failure(self) -> None:
        """Raise SimulatedCrash for roughly N of every 1000 calls."""
        rate = self.config.random_failure_rate_numerator
        if self._rng.randrange(1000) < rate:
            msg = f"Random fail to simulate container error. Fail rate is {rate} per thousand calls"
            span_logger(log).error(f"Error: {msg}")
            raise SimulatedCrash(msg)

    def product_failure_enabled(self, product_id: str, cancelled: Callable[[], bool] | None = None) -> bool:
        """True when ``product_id`` is the sentinel and the failure flag is on.

        ``cancelled`` is consulted right before the remote evaluation; a caller
        that went away gets RequestCancelled instead of a flag lookup.
        """
        if product_id != self.config.sentinel_product_id:
            return False
        if cancelled is not None and cancelled():
            raise RequestCancelled(f"GetProduct {product_id} cancelled by caller")
        try:
            return self._flags.get_boolean_value(self.config.failure_flag_key, False) is True
        except Exception as e:
            # A failed evaluation means the flag is off.
            log.warning("Flag evaluation raised", flag=self.config.failure_flag_key, error=f"{type(e).__name__}: {e}")
            return False
