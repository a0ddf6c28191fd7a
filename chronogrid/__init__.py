"""chronogrid Python package.

Public API:
  - import from `chronogrid.api` (preferred) or `import chronogrid` (re-export)
"""

from __future__ import annotations

from .api import *  # noqa: F401,F403
from . import api as _api

__all__ = list(_api.__all__)
