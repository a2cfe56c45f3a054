"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import logging
import sys
from pathlib import Path

import pytest
import structlog

# Insert local src directory at the beginning of sys.path
# This ensures that the local sigdelta package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of sigdelta modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("sigdelta"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def _reset_structlog() -> None:
    """Each test starts from structlog's default configuration."""
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
