"""Pytest configuration for line-dedup tests."""

import os
import sys
from pathlib import Path

# Keep test runs from writing log files
os.environ["LOG_DIR"] = ""

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
