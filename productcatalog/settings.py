from __future__ import annotations

import os
from dataclasses import dataclass, field

CRASH_MODES = ("request", "process")

# Bounds of the random failure numerator (failures per thousand calls).
MIN_FAILS_PER_THOUSAND = 0
MAX_FAILS_PER_THOUSAND = 1000


def _env_str(name: str, default: str | None = None) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Transport
    port: int | None = None
    products_dir: str = "./products"

    # Fault injection
    fails_per_thousand: int = 5
    crash_mode: str = "request"

    # Remote flag evaluation (optional)
    flagd_host: str | None = None
    flagd_ofrep_port: int = 8016
    flagd_timeout_s: float = 1.0

    log_level: str = "DEBUG"

    # Raw values that could not be used as-is, reported once logging is up.
    warnings: tuple[str, ...] = field(default=(), compare=False)

    @property
    def flagd_url(self) -> str | None:
        if not self.flagd_host:
            return None
        return f"http://{self.flagd_host}:{self.flagd_ofrep_port}"


def load_settings() -> Settings:
    """Read settings from the environment.

    Environment variables:
      - PRODUCT_CATALOG_SERVICE_PORT (required by the server entry point)
      - PRODUCT_CATALOG_PRODUCTS_DIR
      - PRODUCT_CATALOG_FAILS_PER_THOUSAND_CALLS
      - PRODUCT_CATALOG_CRASH_MODE=request|process
      - FLAGD_HOST / FLAGD_OFREP_PORT / FLAGD_TIMEOUT_S
      - PRODUCT_CATALOG_LOG_LEVEL
    """
    warnings: list[str] = []

    raw_port = _env_str("PRODUCT_CATALOG_SERVICE_PORT")
    port: int | None = None
    if raw_port is not None:
        try:
            port = int(raw_port)
        except ValueError:
            warnings.append(f"Invalid PRODUCT_CATALOG_SERVICE_PORT {raw_port!r}")

    raw_rate = _env_str("PRODUCT_CATALOG_FAILS_PER_THOUSAND_CALLS")
    rate = 5
    if raw_rate is not None:
        try:
            rate = int(raw_rate)
        except ValueError:
            warnings.append(f"Error converting string to integer: {raw_rate!r}, keeping {rate}")
    if not MIN_FAILS_PER_THOUSAND <= rate <= MAX_FAILS_PER_THOUSAND:
        clamped = min(max(rate, MIN_FAILS_PER_THOUSAND), MAX_FAILS_PER_THOUSAND)
        warnings.append(f"Failure rate {rate} out of range, using {clamped}")
        rate = clamped

    crash_mode = (_env_str("PRODUCT_CATALOG_CRASH_MODE", "request") or "request").lower()
    if crash_mode not in CRASH_MODES:
        warnings.append(f"Unknown crash mode {crash_mode!r}, using 'request'")
        crash_mode = "request"

    return Settings(
        port=port,
        products_dir=_env_str("PRODUCT_CATALOG_PRODUCTS_DIR", "./products") or "./products",
        fails_per_thousand=rate,
        crash_mode=crash_mode,
        flagd_host=_env_str("FLAGD_HOST"),
        flagd_ofrep_port=_env_int("FLAGD_OFREP_PORT", 8016),
        flagd_timeout_s=_env_float("FLAGD_TIMEOUT_S", 1.0),
        log_level=(_env_str("PRODUCT_CATALOG_LOG_LEVEL", "DEBUG") or "DEBUG").upper(),
        warnings=tuple(warnings),
    )
