"""
Test suite for the storefront API gateway client.

This package contains unit and integration tests for the gateway, the token
store, the typed domain services and the mock storefront APIs.
"""

import sys
from pathlib import Path

# Add the project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
