"""Smoke checks against a running server.

    python -m crossroads.tools.probe http://127.0.0.1:3001 "any congestion?"
"""
import sys
from typing import Optional

import requests

DEFAULT_BASE_URL = "http://127.0.0.1:3001"

def probe_traffic(base_url: str = DEFAULT_BASE_URL, session: Optional[requests.Session] = None) -> dict:
    http = session or requests.Session()
    response = http.get(f"{base_url}/api/traffic", timeout=5)
    response.raise_for_status()
    return response.json()

def probe_density(direction: str, density: float, base_url: str = DEFAULT_BASE_URL,
                  session: Optional[requests.Session] = None) -> dict:
    http = session or requests.Session()
    response = http.post(f"{base_url}/api/density/{direction}", json={"density": density}, timeout=5)
    response.raise_for_status()
    return response.json()

def probe_assistant(prompt: str = "", base_url: str = DEFAULT_BASE_URL,
                    session: Optional[requests.Session] = None) -> dict:
    http = session or requests.Session()
    response = http.post(f"{base_url}/api/assistant", json={"prompt": prompt}, timeout=5)
    response.raise_for_status()
    return response.json()

def run_probe(base_url: str = DEFAULT_BASE_URL, prompt: str = "", session: Optional[requests.Session] = None) -> bool:
    print("--- Probing Crossroads Live ---")
    try:
        status = probe_traffic(base_url, session)
        print(f"Directions: {', '.join(status)}")

        reply = probe_assistant(prompt, base_url, session)
        print("\nAssistant says:")
        print(reply["reply"])
    except requests.RequestException as e:
        print(f"FAIL: {e}")
        return False

    if "reply" in reply and "statusSnapshot" in reply:
        print("\nPASS: Assistant endpoint returns valid structure.")
        return True
    print(f"\nFAIL: Invalid assistant structure. Received keys: {list(reply)}")
    return False

if __name__ == "__main__":
    args = sys.argv[1:]
    ok = run_probe(args[0] if args else DEFAULT_BASE_URL, args[1] if len(args) > 1 else "")
    sys.exit(0 if ok else 1)
