from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from .errors import CatalogLoadError
from .log import get_logger
from .models import ListProductsResponse, Product

log = get_logger(__name__)


def read_product_files(products_dir: str | Path) -> tuple[Product, ...]:
    """Load every ``*.json`` file in ``products_dir`` into one catalog.

    Each file holds ``{"products": [...]}``. Files are read in name order and
    their products concatenated in that order.
    Raises CatalogLoadError on any unreadable directory, file or record.
    """
    root = Path(products_dir)
    try:
        files = sorted(p for p in root.iterdir() if p.name.endswith(".json") and p.is_file())
    except OSError as e:
        raise CatalogLoadError(f"Reading product directory {str(root)!r}: {e}") from e

    products: list[Product] = []
    for path in files:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            parsed = ListProductsResponse.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            raise CatalogLoadError(f"Reading product file {path.name!r}: {e}") from e
        products.extend(parsed.products)

    log.info(f"Loaded {len(products)} products", products_dir=str(root), files=len(files))
    return tuple(products)
