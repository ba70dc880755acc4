#!/usr/bin/env python3
"""
Production startup script.

1. Runs migrations + seed (release.py)
2. Starts gunicorn (replaces this process via os.execvp)

Usage:
    python scripts/start.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def validate_port(raw: str | None) -> str:
    port = (raw or "").strip()
    if not port:
        print("WARNING: PORT not set, using default 8080", flush=True)
        return "8080"
    try:
        port_int = int(port)
    except ValueError:
        raise ValueError(f"Invalid PORT value '{port}'. Must be integer 1-65535.")
    if port_int < 1 or port_int > 65535:
        raise ValueError(f"Invalid PORT value '{port}'. Must be integer 1-65535.")
    return port


def gunicorn_argv(port: str) -> list[str]:
    workers = (os.environ.get("WEB_CONCURRENCY") or "2").strip() or "2"
    return [
        "gunicorn",
        "app.wsgi:app",
        "--bind", f"0.0.0.0:{port}",
        "--workers", workers,
        "--timeout", "60",
        "--preload",
        "--access-logfile", "-",
        "--error-logfile", "-",
    ]


def main() -> None:
    try:
        port = validate_port(os.environ.get("PORT"))
    except ValueError as e:
        print(f"ERROR: {e}", flush=True)
        sys.exit(1)
    print(f"PORT={port} validated", flush=True)

    print("=== Running release phase ===", flush=True)
    from scripts.release import run_release
    try:
        run_release()
    except Exception as e:
        print(f"Release failed: {e}", flush=True)
        sys.exit(1)

    print("=== Starting gunicorn ===", flush=True)
    print(f"Gunicorn binding to 0.0.0.0:{port}", flush=True)
    print("Health check endpoint ready at /healthz", flush=True)

    # exec keeps gunicorn as PID 1 so it receives signals directly
    argv = gunicorn_argv(port)
    os.execvp(argv[0], argv)


if __name__ == "__main__":
    main()
