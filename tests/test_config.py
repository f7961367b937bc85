# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for configuration module."""

import logging

import pytest
from pydantic import ValidationError

from arraystore import DataStore
from arraystore.config import StoreSettings, configure_logging, settings


class TestStoreSettings:
    def test_defaults(self, monkeypatch):
        for var in ("DEFAULT_SECTION_SIZE", "DEBUG", "LOG_LEVEL"):
            monkeypatch.delenv(f"ARRAYSTORE_{var}", raising=False)
        s = StoreSettings(_env_file=None)
        assert s.DEFAULT_SECTION_SIZE == 10
        assert s.DEBUG is False
        assert s.LOG_LEVEL == "WARNING"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("ARRAYSTORE_DEFAULT_SECTION_SIZE", "25")
        monkeypatch.setenv("ARRAYSTORE_DEBUG", "true")
        monkeypatch.setenv("ARRAYSTORE_LOG_LEVEL", "debug")
        s = StoreSettings(_env_file=None)
        assert s.DEFAULT_SECTION_SIZE == 25
        assert s.DEBUG is True
        assert s.LOG_LEVEL == "DEBUG"

    def test_invalid_values(self, monkeypatch):
        monkeypatch.setenv("ARRAYSTORE_DEFAULT_SECTION_SIZE", "0")
        with pytest.raises(ValidationError):
            StoreSettings(_env_file=None)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            StoreSettings(_env_file=None, LOG_LEVEL="loud")

    def test_frozen(self):
        with pytest.raises(ValidationError):
            settings.DEBUG = True

    def test_store_default_reads_module_settings(self, monkeypatch):
        monkeypatch.setattr(
            "arraystore.store.settings",
            StoreSettings(_env_file=None, DEBUG=True),
        )
        assert DataStore().debug is True


class TestConfigureLogging:
    def test_sets_level_and_single_handler(self):
        logger = configure_logging("DEBUG")
        configure_logging(logging.INFO)
        assert logger.name == "arraystore"
        assert logger.level == logging.INFO
        handlers = [h for h in logger.handlers if getattr(h, "_arraystore", False)]
        assert len(handlers) == 1
