"""
Entrypoint Config - compiles compact listener expressions into typed
entry point configuration for a reverse proxy.
"""

from .const import APP_VERSION

__version__ = APP_VERSION
