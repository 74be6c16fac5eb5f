#!/usr/bin/env python3
"""Start uvicorn for the booking API (replaces the current process)."""
import os
import sys

port = os.environ.get("PORT", "8000")
os.execv(
    sys.executable,
    [sys.executable, "-m", "uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", port],
)
