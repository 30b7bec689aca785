"""
Tests for shared_utils.feature_flags.FeatureFlags.
"""

import os
from unittest.mock import patch

import pytest

from shared_utils.feature_flags import FeatureFlags


class TestDefaults:
    def test_defaults_apply_when_unset(self) -> None:
        flags = FeatureFlags(search_default=True, analytics_export_default=False, environ={})
        assert flags.is_search_enabled() is True
        assert flags.is_analytics_export_enabled() is False


class TestEnvironmentOverrides:
    @pytest.mark.parametrize("raw", ["1", "true", "TRUE", " yes ", "on"])
    def test_truthy(self, raw: str) -> None:
        flags = FeatureFlags(environ={"SEARCH_ENABLED": raw})
        assert flags.is_search_enabled() is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off"])
    def test_falsy(self, raw: str) -> None:
        flags = FeatureFlags(analytics_export_default=True, environ={"ANALYTICS_EXPORT_ENABLED": raw})
        assert flags.is_analytics_export_enabled() is False

    def test_unrecognised_value_keeps_default(self) -> None:
        flags = FeatureFlags(search_default=True, environ={"SEARCH_ENABLED": "maybe"})
        assert flags.is_search_enabled() is True


class TestReadOnEveryCheck:
    def test_mapping_changes_are_seen(self) -> None:
        environ = {"SEARCH_ENABLED": "false"}
        flags = FeatureFlags(environ=environ)
        assert flags.is_search_enabled() is False

        environ["SEARCH_ENABLED"] = "true"
        assert flags.is_search_enabled() is True

    def test_process_environment_used_by_default(self) -> None:
        flags = FeatureFlags()
        with patch.dict(os.environ, {"ANALYTICS_EXPORT_ENABLED": "true"}):
            assert flags.is_analytics_export_enabled() is True
        assert flags.is_analytics_export_enabled() is False
