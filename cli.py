from __future__ import annotations

import argparse
import json
import sys

import requests


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Product Catalog Service CLI")
    p.add_argument("--api", default="http://localhost:8080", help="API base URL")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list", help="List all products")

    s_get = sub.add_parser("get", help="Get a product by id")
    s_get.add_argument("id")

    s_search = sub.add_parser("search", help="Search products by name or description")
    s_search.add_argument("query")

    sub.add_parser("health", help="Check service health")

    args = p.parse_args(argv)

    base = args.api.rstrip("/")

    if args.cmd == "list":
        r = requests.get(f"{base}/products", timeout=10)
    elif args.cmd == "get":
        r = requests.get(f"{base}/products/{args.id}", timeout=10)
    elif args.cmd == "search":
        r = requests.get(f"{base}/products/search", params={"query": args.query}, timeout=10)
    elif args.cmd == "health":
        r = requests.get(f"{base}/health", timeout=10)
    else:
        return 2

    try:
        _print(r.json())
    except ValueError:
        print(r.text)
    return 0 if r.ok else 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
