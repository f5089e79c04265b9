"""
Unit tests for configuration loading and validation.

These tests ensure:
  1. Config loads from environment variables correctly
  2. Type conversions work (e.g., strings to ints)
  3. Inconsistent settings are rejected with helpful messages
"""

import pytest
from pydantic import ValidationError
from unittest.mock import patch
from flatmatch.config import Config, validate_config


class TestConfigLoading:
    """Test configuration loading from environment."""

    @patch.dict("os.environ", {
        "REPOSITORY_BACKEND": "firestore",
        "FIREBASE_PROJECT_ID": "test-project",
    })
    def test_firestore_config_loads(self):
        """Firestore settings should load from environment."""
        config = Config(_env_file=None)
        assert config.REPOSITORY_BACKEND == "firestore"
        assert config.FIREBASE_PROJECT_ID == "test-project"

    @patch.dict("os.environ", {
        "FEED_LIMIT": "50",
        "FEED_MAX_WORKERS": "4",
    })
    def test_integer_config_conversion(self):
        """Integer environment variables should be converted to int."""
        config = Config(_env_file=None)
        assert isinstance(config.FEED_LIMIT, int)
        assert config.FEED_LIMIT == 50
        assert config.FEED_MAX_WORKERS == 4

    @patch.dict("os.environ", {"DEMO_MODE": "true"})
    def test_boolean_config_conversion(self):
        """Boolean environment variables should be converted correctly."""
        config = Config(_env_file=None)
        assert config.DEMO_MODE is True

    def test_optional_config_defaults(self):
        """Optional config should have sensible defaults."""
        config = Config(_env_file=None)
        assert config.REPORT_THRESHOLD == 2
        assert config.MAX_GROUP_SIZE == 5
        assert config.GRAPH_TIMEOUT == 30
        # Note: DEBUG is set to True by test setup, so we just check it's a bool
        assert isinstance(config.DEBUG, bool)

    @patch.dict("os.environ", {"REPOSITORY_BACKEND": "postgres"})
    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            Config(_env_file=None)


class TestConfigValidation:
    """Test configuration validation function."""

    def _valid(self, mock_config):
        mock_config.REPOSITORY_BACKEND = "memory"
        mock_config.FIREBASE_PROJECT_ID = None
        mock_config.FEED_MAX_WORKERS = 8
        mock_config.FEED_LIMIT = 20
        mock_config.MAX_CANDIDATES = 500
        mock_config.MAX_GROUP_SIZE = 5
        mock_config.DEMO_MODE = False

    @patch("flatmatch.config.config")
    def test_memory_backend_needs_no_firebase(self, mock_config):
        self._valid(mock_config)
        result = validate_config()
        assert result["repository"] == "memory"
        assert result["firebase"] == "✗ Not set"

    @patch("flatmatch.config.config")
    def test_firestore_backend_requires_project(self, mock_config):
        """Firestore backend must name a Firebase project."""
        self._valid(mock_config)
        mock_config.REPOSITORY_BACKEND = "firestore"

        with pytest.raises(ValueError, match="FIREBASE_PROJECT_ID"):
            validate_config()

    @patch("flatmatch.config.config")
    def test_workers_must_be_positive(self, mock_config):
        self._valid(mock_config)
        mock_config.FEED_MAX_WORKERS = 0

        with pytest.raises(ValueError, match="FEED_MAX_WORKERS"):
            validate_config()

    @patch("flatmatch.config.config")
    def test_all_errors_reported_together(self, mock_config):
        self._valid(mock_config)
        mock_config.FEED_LIMIT = 0
        mock_config.MAX_GROUP_SIZE = 1

        with pytest.raises(ValueError) as excinfo:
            validate_config()
        assert "FEED_LIMIT" in str(excinfo.value)
        assert "MAX_GROUP_SIZE" in str(excinfo.value)

    @patch("flatmatch.config.config")
    def test_validate_success_returns_status(self, mock_config):
        """Successful validation should return status dict."""
        self._valid(mock_config)
        mock_config.REPOSITORY_BACKEND = "firestore"
        mock_config.FIREBASE_PROJECT_ID = "test"
        mock_config.DEMO_MODE = True

        result = validate_config()
        assert isinstance(result, dict)
        assert result["firebase"] == "✓ Configured"
        assert result["demo_mode"] == "✓ Enabled"
