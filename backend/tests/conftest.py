"""
Root conftest for backend tests.

Adds the backend directory to sys.path so tests can import
``yieldwatch`` without installing the project first.
"""
import sys
from pathlib import Path

# backend/ directory  (supports `from yieldwatch.services...`)
backend_dir = str(Path(__file__).resolve().parents[1])
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)
