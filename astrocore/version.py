# astrocore/version.py
from __future__ import annotations

# Single place to bump the library version (read by pyproject.toml)
VERSION = "0.1.0"
