#!/usr/bin/env python3
"""
Extraction Accuracy Launcher

Usage:
    python run_accuracy.py --compare            # Compare every strategy
    python run_accuracy.py --strategy hybrid    # Run one strategy
    python run_accuracy.py --help               # All options

Loads .env from the project root, then hands off to accuracy.main.
"""

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent

# Load .env file
env_path = PROJECT_ROOT / ".env"
if env_path.exists():
    with open(env_path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                os.environ.setdefault(key.strip(), value.strip())

# Force UTF-8 on Windows
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        sys.stderr.reconfigure(encoding="utf-8", errors="replace")

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from accuracy.main import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main())
