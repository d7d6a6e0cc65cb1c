"""
Integration test script — hits all endpoints and verifies responses.

Usage:
    # Mock camera + mock models:
    CAMERA_ADAPTER=mock VISION_ADAPTER=mock TICK_MS=200 python -m reefid.web.app  (terminal 1)
    python reefid/scripts/integration_test.py                                      (terminal 2)
"""

import sys
import time
import httpx

BASE = "http://localhost:8000"
TIMEOUT = 30.0
passed = 0
failed = 0


def test(name: str, method: str, path: str, checks: dict | None = None, expect_status: int = 200):
    global passed, failed
    url = f"{BASE}{path}"
    checks = checks or {}
    try:
        if method == "GET":
            r = httpx.get(url, timeout=TIMEOUT)
        else:
            r = httpx.post(url, json={}, timeout=TIMEOUT)

        if r.status_code != expect_status:
            print(f"  FAIL  {name} — HTTP {r.status_code}")
            failed += 1
            return None

        data = r.json() if r.headers.get("content-type", "").startswith("application/json") else {}
        for key, expected in checks.items():
            actual = data.get(key)
            if actual != expected:
                print(f"  FAIL  {name} — {key}: expected {expected!r}, got {actual!r}")
                failed += 1
                return None

        print(f"  OK    {name}")
        passed += 1
        return r

    except httpx.ConnectError:
        print(f"  FAIL  {name} — connection refused (is the server running?)")
        failed += 1
    except Exception as e:
        print(f"  FAIL  {name} — {type(e).__name__}: {e}")
        failed += 1
    return None


def check_detections(name: str):
    global passed, failed
    r = httpx.get(f"{BASE}/detections", timeout=TIMEOUT)
    dets = r.json()["detections"]
    confs = [d["confidence"] for d in dets]
    if len(dets) <= 5 and confs == sorted(confs, reverse=True):
        print(f"  OK    {name} ({len(dets)} detections)")
        passed += 1
    else:
        print(f"  FAIL  {name} — unranked or too long: {confs}")
        failed += 1


def main():
    print(f"\nIntegration tests against {BASE}\n")
    print("--- Health & Status ---")
    test("GET /health", "GET", "/health", {"api": True})
    test("GET /status", "GET", "/status", {"view": "main", "facing_mode": "environment"})

    print("\n--- Frames ---")
    test("GET /frame.jpg", "GET", "/frame.jpg")

    print("\n--- Detections ---")
    time.sleep(3)  # let models load and a few ticks run
    check_detections("GET /detections ranked")
    test("POST /clear_detections", "POST", "/clear_detections", {"ok": True, "detections": []})

    print("\n--- Camera ---")
    test("POST /toggle_facing (user)", "POST", "/toggle_facing", {"facing_mode": "user"})
    test("GET /status (mirrored)", "GET", "/status", {"mirrored": True})
    test("POST /toggle_facing (environment)", "POST", "/toggle_facing", {"facing_mode": "environment"})

    print("\n--- Final Status ---")
    test("GET /status (final)", "GET", "/status")

    total = passed + failed
    print(f"\n{'='*40}")
    print(f"  {passed}/{total} passed, {failed} failed")
    print(f"{'='*40}\n")

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
