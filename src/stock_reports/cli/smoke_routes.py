"""CLI to smoke-test a running stock_reports API.

Usage:
  poetry run smoke-routes health
  poetry run smoke-routes analyses list --market KOSPI --limit 5
  poetry run smoke-routes analyses check-cache KOSPI 005930 삼성전자 --period 2024.06
  poetry run smoke-routes --token $SESSION_TOKEN user profile
"""
import argparse
import json
import os
import sys

import httpx

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_auth_providers(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/api/auth/providers")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_analyses_list(client: httpx.Client, args: argparse.Namespace) -> int:
    params = {"limit": args.limit, "offset": args.offset}
    if args.market:
        params["market"] = args.market
    r = client.get("/api/analyses", params=params)
    r.raise_for_status()
    data = r.json()
    print(f"Found {data['count']} analyses")
    print_json(data["data"] if not args.brief else [
        {k: a[k] for k in ("id", "market", "symbol", "name", "created_at")} for a in data["data"]
    ])
    return 0


def cmd_analyses_get(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get(f"/api/analyses/{args.analysis_id}")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_analyses_latest(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get(f"/api/analyses/latest/{args.symbol}")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_analyses_check_cache(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {
        "market": args.market,
        "symbol": args.symbol,
        "name": args.name,
        "compare_periods": args.period or [],
    }
    if args.model:
        body["model"] = args.model
    r = client.post("/api/analyses/check-cache", json=body)
    r.raise_for_status()
    data = r.json()
    print(f"Cached: {data['cached']}")
    if data["cached"]:
        print_json(data["data"])
    return 0


def cmd_user_profile(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/api/user/profile")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_user_providers(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/api/user/providers")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_user_history(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/api/user/analyses-history", params={"limit": args.limit})
    r.raise_for_status()
    data = r.json()
    print(f"Found {data['count']} history entries")
    print_json(data["data"])
    return 0


def cmd_payment_plans(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/api/payment/plans")
    r.raise_for_status()
    print_json(r.json())
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Smoke-test stock_reports API routes.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--base-url",
        default=API_BASE_URL,
        help=f"API base URL (default: {API_BASE_URL})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--token",
        default=os.getenv("SESSION_TOKEN"),
        help="Session token for signed-in routes (default: $SESSION_TOKEN)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    # health
    subparsers.add_parser("health", help="GET / health check")

    # auth
    auth = subparsers.add_parser("auth", help="Auth routes (/api/auth)")
    auth_sub = auth.add_subparsers(dest="auth_cmd", required=True)
    auth_sub.add_parser("providers", help="GET /api/auth/providers")

    # analyses
    analyses = subparsers.add_parser("analyses", help="Analysis routes (/api/analyses)")
    analyses_sub = analyses.add_subparsers(dest="analyses_cmd", required=True)
    p = analyses_sub.add_parser("list", help="GET /api/analyses")
    p.add_argument("--market", default=None, help="Filter by market (e.g. KOSPI)")
    p.add_argument("--limit", type=int, default=10, help="Max analyses (default: 10)")
    p.add_argument("--offset", type=int, default=0, help="Rows to skip (default: 0)")
    p.add_argument("--brief", action="store_true", help="Print ids and symbols only")
    p = analyses_sub.add_parser("get", help="GET /api/analyses/{id}")
    p.add_argument("analysis_id", type=int, help="Analysis id")
    p = analyses_sub.add_parser("latest", help="GET /api/analyses/latest/{symbol}")
    p.add_argument("symbol", help="Ticker (e.g. 005930, AAPL)")
    p = analyses_sub.add_parser("check-cache", help="POST /api/analyses/check-cache")
    p.add_argument("market", help="Market (e.g. KOSPI)")
    p.add_argument("symbol", help="Ticker")
    p.add_argument("name", help="Company name")
    p.add_argument("--period", action="append", help="Compare period (repeatable, e.g. 2024.06)")
    p.add_argument("--model", default=None, help="Model identifier")

    # user
    user = subparsers.add_parser("user", help="Signed-in user routes (/api/user)")
    user_sub = user.add_subparsers(dest="user_cmd", required=True)
    user_sub.add_parser("profile", help="GET /api/user/profile")
    user_sub.add_parser("providers", help="GET /api/user/providers")
    p = user_sub.add_parser("history", help="GET /api/user/analyses-history")
    p.add_argument("--limit", type=int, default=10, help="Max entries (default: 10)")

    # payment
    payment = subparsers.add_parser("payment", help="Payment routes (/api/payment)")
    payment_sub = payment.add_subparsers(dest="payment_cmd", required=True)
    payment_sub.add_parser("plans", help="GET /api/payment/plans")

    args = parser.parse_args()
    base_url = args.base_url.rstrip("/")

    handlers = {
        "health": cmd_health,
        "auth": {"providers": cmd_auth_providers},
        "analyses": {
            "list": cmd_analyses_list,
            "get": cmd_analyses_get,
            "latest": cmd_analyses_latest,
            "check-cache": cmd_analyses_check_cache,
        },
        "user": {
            "profile": cmd_user_profile,
            "providers": cmd_user_providers,
            "history": cmd_user_history,
        },
        "payment": {"plans": cmd_payment_plans},
    }

    cmd = args.command
    if cmd == "health":
        handler = handlers["health"]
    else:
        sub = getattr(args, f"{cmd}_cmd", None)
        if sub is None:
            parser.error(f"Missing subcommand for {cmd}")
        handler = handlers[cmd][sub]

    headers = {"Authorization": f"Bearer {args.token}"} if args.token else {}
    try:
        with httpx.Client(base_url=base_url, timeout=args.timeout, headers=headers) as client:
            return handler(client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        if e.response.content:
            try:
                print(e.response.json(), file=sys.stderr)
            except ValueError:
                print(e.response.text, file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
