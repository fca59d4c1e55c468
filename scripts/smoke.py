#!/usr/bin/env python3
"""
Smoke test for a running pulse-api using urllib.request (no external deps)

    PULSE_URL=http://127.0.0.1:3000 PULSE_TOKEN=demo python scripts/smoke.py
"""
import urllib.request
import urllib.error
import json
import os
import sys

BASE_URL = os.getenv("PULSE_URL", "http://127.0.0.1:3000")
TOKEN = os.getenv("PULSE_TOKEN", "demo")

def check(method, path, expected_status=200, body=None, headers=None, check_json=None):
    """Call an endpoint and return success status"""
    url = f"{BASE_URL}{path}"
    data = json.dumps(body).encode("utf-8") if body is not None else None
    req = urllib.request.Request(url, data=data, method=method, headers={
        "Content-Type": "application/json", **(headers or {})
    })
    try:
        with urllib.request.urlopen(req, timeout=5) as response:
            status = response.status
            payload = json.loads(response.read().decode("utf-8"))
    except urllib.error.HTTPError as e:
        status = e.code
        payload = json.loads(e.read().decode("utf-8") or "{}")
    except (urllib.error.URLError, OSError) as e:
        print(f"❌ {method} {path}: error - {e}")
        return False

    if status != expected_status:
        print(f"❌ {method} {path}: expected status {expected_status}, got {status}")
        return False
    for key, expected_value in (check_json or {}).items():
        if key not in payload:
            print(f"❌ {method} {path}: missing key '{key}' in response")
            return False
        if expected_value is not None and payload[key] != expected_value:
            print(f"❌ {method} {path}: expected {key}={expected_value}, got {payload[key]}")
            return False

    print(f"✅ {method} {path}: status {status}")
    return True

def main():
    """Run all smoke tests"""
    print("🚀 Running smoke tests against", BASE_URL)
    auth = {"Authorization": f"Bearer {TOKEN}"}

    results = [
        check("GET", "/", 200, check_json={"ok": True}),
        check("GET", "/stats/today", 401, check_json={"ok": False}),
        check("GET", f"/stats/today?token={TOKEN}", 200, check_json={"ok": True, "totalAmount": None}),
        check("POST", "/ingest/tx", 400, body={"amount": 0}, headers=auth, check_json={"ok": False}),
        check("POST", "/ingest/tx", 200, body={"amount": 1, "item": "smoke"}, headers=auth,
              check_json={"ok": True}),
        check("GET", f"/stats/reservations?token={TOKEN}", 200, check_json={"ok": True, "count": None}),
    ]

    failed = results.count(False)
    if failed > 0:
        print(f"\n❌ {failed} test(s) failed")
        sys.exit(1)
    else:
        print("\n✅ All smoke tests passed")

if __name__ == "__main__":
    main()
