"""
Integration test script: hits all endpoints of a running API and verifies responses.

Usage:
    # offline (mock capture, mock vision, sample facts, no audio):
    CAPTURE_ADAPTER=mock VISION_ADAPTER=mock FACTS_ADAPTER=sample AUDIO_PLAYER=null \
        python -m arfacts.services.api
    python -m arfacts.scripts.integration_test

    # against the fake vendor endpoints: see fake_services_server.py
"""

import os
import sys
import time
import httpx

BASE = os.getenv("ARFACTS_API", "http://localhost:8000")
TIMEOUT = 60.0
results: list[tuple[str, bool]] = []


def record(name: str, ok: bool, detail: str = "") -> bool:
    results.append((name, ok))
    print(f"  {'OK  ' if ok else 'FAIL'}  {name}" + (f" — {detail}" if detail else ""))
    return ok


def call(client: httpx.Client, name: str, method: str, path: str, expect: dict | None = None) -> dict | None:
    try:
        r = client.request(method, path)
    except httpx.ConnectError:
        record(name, False, "connection refused (is the server running?)")
        return None
    except httpx.HTTPError as e:
        record(name, False, f"{type(e).__name__}: {e}")
        return None

    if r.status_code != 200:
        record(name, False, f"HTTP {r.status_code}")
        return None
    data = r.json()
    wrong = {k: data.get(k) for k, v in (expect or {}).items() if data.get(k) != v}
    record(name, not wrong, ", ".join(f"{k}={v!r}" for k, v in wrong.items()))
    return data


def wait_for_rest(client: httpx.Client) -> dict | None:
    deadline = time.time() + TIMEOUT
    status = None
    while time.time() < deadline:
        status = client.get("/status").json()
        if not status["busy"]:
            return status
        time.sleep(0.5)
    return status


def main():
    print(f"\nIntegration tests against {BASE}\n")
    with httpx.Client(base_url=BASE, timeout=TIMEOUT) as client:
        print("--- Health & Status ---")
        call(client, "GET /health", "GET", "/health", {"api": True})
        call(client, "GET /status", "GET", "/status")

        print("\n--- Blocking scan ---")
        data = call(client, "POST /scan", "POST", "/scan")
        if data:
            print(f"        ok={data.get('ok')} code={data.get('error_code')} facts={data.get('facts')!r}")

        print("\n--- Background scans ---")
        first = call(client, "POST /trigger", "POST", "/trigger", {"ok": True})
        second = call(client, "POST /trigger (supersede)", "POST", "/trigger", {"ok": True})
        if first and second:
            # the first scan may already be done on a fast mock stack
            superseded = second.get("superseded")
            ok = superseded in (None, first["scan_id"])
            record("supersede", ok, "" if ok else f"expected {first['scan_id']}, got {superseded}")

            status = wait_for_rest(client)
            ok = bool(status) and not status["busy"] and status["scan_id"] == second["scan_id"]
            record("final state", ok, f"{status['state']} for scan {status['scan_id']}" if status else "no status")

    passed = sum(1 for _, ok in results if ok)
    print(f"\n{'='*40}")
    print(f"  {passed}/{len(results)} passed")
    print(f"{'='*40}\n")
    sys.exit(0 if passed == len(results) else 1)


if __name__ == "__main__":
    main()
