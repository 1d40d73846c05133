"""Pytest config: PYTHONPATH and env for tests."""
import os
import sys
from pathlib import Path

root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(root))
os.environ.setdefault("BRAVE_API_KEY", "test-brave-key")
