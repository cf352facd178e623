"""Global configuration and constants for the feature tour engine."""

from __future__ import annotations

import os
from typing import Final

LOGGER_NAME: Final = "featuretour"
DEFAULT_LOCALE: Final = os.environ.get("FEATURETOUR_LOCALE", "en")
DIAGNOSTICS_CAPACITY: Final = int(os.environ.get("FEATURETOUR_DIAGNOSTICS_CAPACITY", "500"))

# Window id under which the host's main window is registered
MAIN_WINDOW_ID: Final = "main"
