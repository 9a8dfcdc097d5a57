#!/usr/bin/env python3
"""
AgentOS — Interactive Setup Wizard.

Probes local inference servers and generates profile.yaml for the kernel.
Run: python scripts/setup.py
"""

from pathlib import Path

import httpx
import yaml

PROJECT_ROOT = Path(__file__).parent.parent
PROFILE_PATH = PROJECT_ROOT / "profile.yaml"


def _input(prompt: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    result = input(f"{prompt}{suffix}: ").strip()
    return result or default


def _yes_no(prompt: str, default: bool = False) -> bool:
    suffix = " [Y/n]" if default else " [y/N]"
    result = input(f"{prompt}{suffix}: ").strip().lower()
    if not result:
        return default
    return result in ("y", "yes")


def _probe_backend(endpoint: str) -> list[dict]:
    """Probe an inference backend for available models."""
    models = []
    try:
        resp = httpx.get(f"{endpoint}/v1/models", timeout=5)
        if resp.status_code == 200:
            for m in resp.json().get("data", []):
                models.append({"id": m.get("id", ""), "backend_type": "openai"})
            return models
    except Exception:
        pass

    # Try Ollama
    try:
        resp = httpx.get(f"{endpoint}/api/tags", timeout=5)
        if resp.status_code == 200:
            for m in resp.json().get("models", []):
                models.append({"id": m.get("name", ""), "backend_type": "ollama"})
            return models
    except Exception:
        pass

    return models


def _discover_backends() -> list[dict]:
    """Auto-detect LLM backends on common ports."""
    endpoints = [
        ("http://localhost:1234", "LM Studio / vLLM"),
        ("http://localhost:11434", "Ollama"),
        ("http://localhost:8080", "llama.cpp server"),
    ]
    found = []
    for endpoint, label in endpoints:
        print(f"  Probing {endpoint} ({label})...", end=" ")
        models = _probe_backend(endpoint)
        if models:
            print(f"found {len(models)} model(s)")
            found.append({
                "type": models[0]["backend_type"],
                "endpoint": endpoint,
                "models": models,
            })
        else:
            print("not found")
    return found


def _select(options: list[str], label: str) -> int:
    """Let user pick one option. Returns its index, or -1 to skip."""
    print(f"\n  Available {label}:")
    for i, opt in enumerate(options):
        print(f"    [{i + 1}] {opt}")
    print("    [0] Skip")
    while True:
        choice = input(f"  Select {label}: ").strip()
        if choice == "0" or not choice:
            return -1
        try:
            idx = int(choice) - 1
            if 0 <= idx < len(options):
                return idx
        except ValueError:
            pass
        print("  Invalid choice, try again.")


def main():
    print("=" * 60)
    print("  AgentOS — Setup Wizard")
    print("=" * 60)
    print()

    print("Step 1: System Identity")
    print("-" * 40)
    system_name = _input("System name", "AgentOS")
    print()

    print("Step 2: Discovering LLM Backends")
    print("-" * 40)
    backends = _discover_backends()
    inference = {"type": "openai", "endpoint": "http://localhost:1234", "model_id": ""}
    if backends:
        idx = _select([f"{b['endpoint']} ({b['type']})" for b in backends], "backend")
        if idx >= 0:
            backend = backends[idx]
            inference["type"] = backend["type"]
            inference["endpoint"] = backend["endpoint"]
            model_idx = _select([m["id"] for m in backend["models"]], "model")
            if model_idx >= 0:
                inference["model_id"] = backend["models"][model_idx]["id"]
    else:
        print("\n  No backends detected.")
        inference["endpoint"] = _input("  Enter a custom endpoint URL", inference["endpoint"])
        inference["model_id"] = _input("  Model id", "")
    inference["max_tokens"] = 2048
    inference["temperature"] = 0.7
    print()

    print("Step 3: Kernel Limits")
    print("-" * 40)
    kernel = {
        "drift_increment": 0.05,
        "drift_threshold": float(_input("  Drift threshold for sync pulses", "0.5")),
        "max_interrupt_passes": int(_input("  Max tool-call passes per task", "3")),
        "tcb_ttl_seconds": int(_input("  Idle TCB time-to-live (seconds)", "900")),
        "release_on_complete": _yes_no("  Release TCBs when a task completes?", default=True),
    }
    print()

    print("Step 4: Tools")
    print("-" * 40)
    tools = {
        "timeout_seconds": float(_input("  Per-tool timeout (seconds)", "30")),
        "search_endpoint": _input("  SearXNG search endpoint", "http://localhost:8888/search"),
        "search_max_results": 10,
    }
    print()

    profile = {
        "system": {"name": system_name, "description": ""},
        "inference": inference,
        "kernel": kernel,
        "memory": {"l1_limit": 5, "l2_limit": 20, "importance_keyword": "axiom"},
        "tools": tools,
        "logging": {"level": "INFO"},
    }

    print("=" * 60)
    print("  Writing configuration...")
    print("-" * 40)
    PROFILE_PATH.write_text(yaml.dump(profile, default_flow_style=False, sort_keys=False))
    print(f"  Profile written to {PROFILE_PATH}")
    print()
    print(f"  Backend: {inference['type']} at {inference['endpoint']}")
    print(f"  Model: {inference['model_id'] or '(not set)'}")
    print("  Set AGENTOS_API_KEY for hosted OpenAI-compatible backends.")
    print()
    print("  To run a task:")
    print("    python scripts/run_task.py agentA \"your query\"")
    print("=" * 60)


if __name__ == "__main__":
    main()
