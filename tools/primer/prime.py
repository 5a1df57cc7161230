#!/usr/bin/env python3
"""edgestats cache-priming load generator.

Requests a set of distinct routes through the edge, then reads /stats and
compares the recorded hit counts with what was actually sent. Any shortfall
comes from concurrent hits on the same route overwriting each other.

Usage:
    # 200 routes, 3 requests each
    python -m tools.primer.prime --server http://localhost:8000 --routes 200 --repeat 3

    # Hammer a handful of routes to make lost updates visible
    python -m tools.primer.prime --server http://localhost:8000 --routes 5 --repeat 50 --concurrency 50
"""

from __future__ import annotations

import argparse
import asyncio
import time
from dataclasses import dataclass, field

import httpx


@dataclass
class PrimeReport:
    sent: dict[str, int] = field(default_factory=dict)
    errors: int = 0

    @property
    def total_sent(self) -> int:
        return sum(self.sent.values())


def route_names(count: int, prefix: str) -> list[str]:
    width = len(str(max(count - 1, 0)))
    return [f"{prefix}{i:0{width}d}" for i in range(count)]


def compare_with_stats(report: PrimeReport, stats: dict) -> dict[str, int]:
    """Return route -> hits missing from the server's view (only shortfalls)."""
    routes = stats.get("routes", {})
    missing = {}
    for route, sent in report.sent.items():
        recorded = routes.get(route, {}).get("hits", 0)
        if recorded < sent:
            missing[route] = sent - recorded
    return missing


async def hit_route(
    client: httpx.AsyncClient,
    server_url: str,
    route: str,
    report: PrimeReport,
    limiter: asyncio.Semaphore,
) -> None:
    async with limiter:
        try:
            resp = await client.get(f"{server_url}/{route}")
        except httpx.RequestError:
            report.errors += 1
            return
    if resp.status_code == 200:
        report.sent[route] = report.sent.get(route, 0) + 1
    else:
        report.errors += 1


async def run_priming(args: argparse.Namespace) -> None:
    """Run the full priming pass and print a summary."""
    routes = route_names(args.routes, args.prefix)
    report = PrimeReport()
    limiter = asyncio.Semaphore(args.concurrency)

    print(f"Priming {len(routes)} routes x {args.repeat} requests")
    print(f"  Server: {args.server}")
    print(f"  Concurrency: {args.concurrency}")
    print()

    start = time.monotonic()
    async with httpx.AsyncClient(timeout=10.0) as client:
        tasks = [
            hit_route(client, args.server, route, report, limiter)
            for _ in range(args.repeat)
            for route in routes
        ]
        await asyncio.gather(*tasks)

        elapsed = time.monotonic() - start
        print(f"Priming complete in {elapsed:.1f}s")
        print(f"  Requests OK: {report.total_sent}")
        print(f"  Errors: {report.errors}")
        print(f"  Throughput: {report.total_sent / elapsed:.1f} req/sec")

        try:
            resp = await client.get(f"{args.server}/stats", params={"window": args.window})
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            print(f"\nCould not read stats: {exc}")
            return

    stats = resp.json()
    missing = compare_with_stats(report, stats)
    print("\nServer stats:")
    print(f"  Total calls: {stats['totalCalls']}")
    print(f"  Routes: {stats['routesCount']}")
    print(f"  Routes undercounted: {len(missing)} ({sum(missing.values())} hits lost)")


def main():
    parser = argparse.ArgumentParser(description="edgestats cache-priming load generator")
    parser.add_argument("--server", default="http://localhost:8000", help="Server URL")
    parser.add_argument("--routes", type=int, default=200, help="Number of distinct routes")
    parser.add_argument("--repeat", type=int, default=1, help="Requests per route")
    parser.add_argument("--concurrency", type=int, default=20, help="Max in-flight requests")
    parser.add_argument("--prefix", default="route-", help="Route name prefix")
    parser.add_argument("--window", type=int, default=300_000,
                        help="Stats window in ms (default: 5 min)")

    args = parser.parse_args()
    asyncio.run(run_priming(args))


if __name__ == "__main__":
    main()
