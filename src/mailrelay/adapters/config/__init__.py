"""Configuration adapter - layered settings, overrides, display, credentials.

Contents:
    * :mod:`.loader` - ``lib_layered_config`` loading with caching
    * :mod:`.overrides` - CLI ``--set`` override parsing and application
    * :mod:`.display` - Human/JSON configuration display
    * :mod:`.credentials` - API key discovery from env and key files
"""

from __future__ import annotations

from .credentials import Credentials, discover_credentials, parse_key
from .display import display_config
from .loader import get_config, get_default_config_path
from .overrides import apply_overrides

__all__ = [
    "Credentials",
    "apply_overrides",
    "discover_credentials",
    "display_config",
    "get_config",
    "get_default_config_path",
    "parse_key",
]
