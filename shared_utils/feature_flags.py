"""
Runtime toggles for the optional pipeline stages.

Settings are cached for the process lifetime, so the flags re-read their
environment variables on every check; flipping ``SEARCH_ENABLED`` or
``ANALYTICS_EXPORT_ENABLED`` takes effect on the next transcript.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from shared_utils.constants import Features

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_flag(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


class FeatureFlags:
    """Per-call evaluation of the search and analytics-export toggles."""

    def __init__(
        self,
        search_default: bool = False,
        analytics_export_default: bool = False,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._search_default = search_default
        self._analytics_default = analytics_export_default
        self._environ = environ if environ is not None else os.environ

    def is_search_enabled(self) -> bool:
        return _parse_flag(
            self._environ.get(Features.SEARCH_ENABLED_ENV), self._search_default
        )

    def is_analytics_export_enabled(self) -> bool:
        return _parse_flag(
            self._environ.get(Features.ANALYTICS_EXPORT_ENABLED_ENV),
            self._analytics_default,
        )
