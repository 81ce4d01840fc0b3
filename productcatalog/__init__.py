"""Product Catalog Service.

Read-only product catalog served over HTTP/JSON:
 - list, get-by-id and text search over a catalog loaded once at startup
 - fault injection on GetProduct (random simulated crash, flag-gated failure)
 - health check endpoint

The catalog is immutable after load; request handlers share it without locks.
"""
