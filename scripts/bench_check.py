#!/usr/bin/env python3
"""Benchmark permission checks: latency (p50, p95, p99) and QPS.

Usage:
  export API_URL=http://localhost:8000 OIDC_AUTHORITY=http://localhost:5000
  export BENCH_CLIENT_ID=... BENCH_CLIENT_SECRET=... BENCH_USER=... BENCH_PASSWORD=...
  python scripts/bench_check.py --resource payroll --num-requests 200
"""
from __future__ import annotations

import argparse
import os
import statistics
import sys
import time

import httpx


def get_tokens(
    authority: str,
    client_id: str,
    client_secret: str,
    username: str,
    password: str,
) -> tuple[str, str]:
    """Access and id token from the identity provider's password grant."""
    r = httpx.post(
        f"{authority.rstrip('/')}/connect/token",
        data={
            "grant_type": "password",
            "client_id": client_id,
            "client_secret": client_secret,
            "username": username,
            "password": password,
            "scope": "openid profile",
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=30.0,
    )
    r.raise_for_status()
    body = r.json()
    return body["access_token"], body.get("id_token", "")


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark permission checks")
    parser.add_argument("--resource", type=str, required=True, help="Resource code to check")
    parser.add_argument("--scopes", type=str, default="@r@c@u@d@e", help="Requested scopes")
    parser.add_argument("--num-requests", type=int, default=100, help="Number of check requests")
    parser.add_argument("--output", type=str, default="/results/bench_check.txt", help="Output file path")
    args = parser.parse_args()

    api_url = os.environ.get("API_URL", "http://localhost:8000").rstrip("/")
    authority = os.environ.get("OIDC_AUTHORITY", "http://localhost:5000")
    client_id = os.environ.get("BENCH_CLIENT_ID", "bench-client")
    client_secret = os.environ.get("BENCH_CLIENT_SECRET", "bench-secret")
    user = os.environ.get("BENCH_USER", "testuser")
    password = os.environ.get("BENCH_PASSWORD", "testpass")

    print("Getting tokens...")
    access_token, id_token = get_tokens(authority, client_id, client_secret, user, password)
    payload = {
        "clientId": client_id,
        "clientSecret": client_secret,
        "idToken": id_token or access_token,
        "accessToken": access_token,
        "resource": args.resource,
        "scopes": args.scopes,
    }

    latencies: list[float] = []
    errors = 0
    print(f"Running {args.num_requests} check requests...")
    start_total = time.perf_counter()
    with httpx.Client(timeout=30.0) as client:
        for _ in range(args.num_requests):
            t0 = time.perf_counter()
            r = client.post(f"{api_url}/v1/permissions/check", json=payload)
            elapsed = time.perf_counter() - t0
            if r.status_code == 200:
                latencies.append(elapsed)
            else:
                errors += 1
    total_elapsed = time.perf_counter() - start_total

    n = len(latencies)
    if n == 0:
        print("No successful checks.")
        return 1

    qps = n / total_elapsed
    ordered = sorted(latencies)
    p50 = statistics.median(latencies) * 1000
    p95 = ordered[int(n * 0.95) - 1] * 1000 if n >= 20 else p50
    p99 = ordered[int(n * 0.99) - 1] * 1000 if n >= 100 else p95

    summary = (
        f"Check benchmark (resource={args.resource}, requests={n}, errors={errors})\n"
        f"  QPS: {qps:.2f}\n"
        f"  Latency: p50={p50:.1f} ms, p95={p95:.1f} ms, p99={p99:.1f} ms\n"
        f"  Total time: {total_elapsed:.2f} s\n"
    )
    print(summary)

    try:
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(summary)
        print(f"Wrote {args.output}")
    except OSError as e:
        print(f"Could not write {args.output}: {e}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
