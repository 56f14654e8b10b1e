#!/usr/bin/env python3
"""
Smoke check for a running HTTP Status Code Teacher deployment.

This script exercises the public endpoints:
1. Health check
2. Agent card
3. REST explanation (valid and out-of-range codes)
4. A2A JSON-RPC webhook (success and error envelopes)

Usage:
    python scripts/smoke_check.py [SERVICE_URL]
"""

import os
import sys
import time

import requests

A2A_PATH = "/api/v1/a2a/status-code-teacher"


def check_health(service_url: str) -> bool:
    """Check the health endpoint."""
    print("\n[1] Checking /api/v1/health ...")
    try:
        response = requests.get(f"{service_url}/api/v1/health", timeout=10)
        response.raise_for_status()

        data = response.json()
        print(f"    Status: {data.get('status')}")
        print(f"    Version: {data.get('version')}")
        print(f"    Provider: {data.get('ai_provider')}, cache: {data.get('cache_type')}")
        return data.get("status") == "healthy"
    except Exception as e:
        print(f"    ✗ Health check failed: {e}")
        return False


def check_agent_card(service_url: str) -> bool:
    """Check the agent card endpoint."""
    print("\n[2] Checking /.well-known/agent.json ...")
    try:
        response = requests.get(f"{service_url}/.well-known/agent.json", timeout=10)
        response.raise_for_status()

        data = response.json()
        print(f"    Agent id: {data.get('id')}")
        print(f"    Agent name: {data.get('name')}")
        print(f"    Webhook: {[node.get('url') for node in data.get('nodes', [])]}")
        return bool(data.get("nodes"))
    except Exception as e:
        print(f"    ✗ Agent card request failed: {e}")
        return False


def check_explain(service_url: str) -> bool:
    """Check /api/v1/explain with a valid and an invalid code."""
    print("\n[3] Checking /api/v1/explain ...")
    try:
        start_time = time.time()
        response = requests.get(f"{service_url}/api/v1/explain", params={"code": 404}, timeout=120)
        elapsed = time.time() - start_time
        print(f"    code=404 -> {response.status_code} in {elapsed:.1f}s")
        if response.status_code != 200:
            print(f"    Response: {response.text}")
            return False
        explanation = response.json().get("explanation", {})
        print(f"    Name: {explanation.get('name')} ({explanation.get('category')})")

        response = requests.get(f"{service_url}/api/v1/explain", params={"code": 999}, timeout=10)
        print(f"    code=999 -> {response.status_code}")
        return response.status_code == 400
    except requests.exceptions.Timeout:
        print("    ✗ Request timeout")
        return False
    except Exception as e:
        print(f"    ✗ Explain request failed: {e}")
        return False


def check_a2a(service_url: str) -> bool:
    """Check the A2A webhook with a valid and an invalid envelope."""
    print(f"\n[4] Checking {A2A_PATH} ...")
    payload = {
        "jsonrpc": "2.0",
        "id": "smoke-check-1",
        "method": "message/send",
        "params": {
            "message": {
                "kind": "message",
                "role": "user",
                "parts": [{"kind": "text", "text": "<p>explain 404 please</p>"}],
            }
        },
    }
    try:
        response = requests.post(f"{service_url}{A2A_PATH}", json=payload, timeout=120)
        data = response.json()
        text = data.get("result", {}).get("parts", [{}])[0].get("text", "")
        print(f"    message/send -> {response.status_code}, reply starts with: {text[:40]!r}")
        if data.get("id") != "smoke-check-1" or not text.startswith("**HTTP 404"):
            return False

        payload["jsonrpc"] = "1.0"
        response = requests.post(f"{service_url}{A2A_PATH}", json=payload, timeout=10)
        error_code = response.json().get("error", {}).get("code")
        print(f"    jsonrpc=1.0 -> error code {error_code}")
        return error_code == -32600
    except Exception as e:
        print(f"    ✗ A2A request failed: {e}")
        return False


def main():
    """Run all smoke checks."""
    print("=" * 50)
    print("HTTP Status Code Teacher Smoke Check")
    print("=" * 50)

    service_url = (sys.argv[1] if len(sys.argv) > 1 else os.environ.get("SERVICE_URL", "http://localhost:8080")).rstrip("/")
    print(f"\nTarget service: {service_url}")

    results = {
        "Health check": check_health(service_url),
        "Agent card": check_agent_card(service_url),
        "REST explain": check_explain(service_url),
        "A2A webhook": check_a2a(service_url),
    }

    print("\n" + "=" * 50)
    print("Summary")
    print("=" * 50)
    for name, ok in results.items():
        print(f"{name + ':':<16} {'✓' if ok else '✗'}")

    if all(results.values()):
        print("\n✓ All checks passed!")
        return 0
    print("\n✗ Some checks failed")
    return 1


if __name__ == "__main__":
    sys.exit(main())
