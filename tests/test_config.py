"""Unit tests for direnv_action.runtime.config module."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from direnv_action.runtime.config import (
    DEFAULT_NIX_CHANNEL,
    FALSE_VALUES,
    TRUE_VALUES,
    get_boolean_input,
    get_input,
    input_env_name,
    load_install_config,
    resolve_channel,
)
from direnv_action.runtime.models import InputValidationAbort, InstallConfig


class TestInputEnvName:
    """Tests for input_env_name."""

    def test_upper_cases_and_prefixes(self):
        assert input_env_name("use_nix_profile") == "INPUT_USE_NIX_PROFILE"

    def test_replaces_spaces(self):
        assert input_env_name("nix channel") == "INPUT_NIX_CHANNEL"


class TestGetInput:
    """Tests for get_input."""

    def test_trims_whitespace(self):
        assert get_input("nix_channel", {"INPUT_NIX_CHANNEL": "  unstable \n"}) == "unstable"

    def test_missing_returns_empty(self):
        assert get_input("nix_channel", {}) == ""

    def test_reads_process_environment_by_default(self):
        with patch.dict(os.environ, {"INPUT_NIX_CHANNEL": "from-env"}):
            assert get_input("nix_channel") == "from-env"


class TestGetBooleanInput:
    """Tests for get_boolean_input."""

    @pytest.mark.parametrize("raw", TRUE_VALUES)
    def test_true_spellings(self, raw):
        assert get_boolean_input("use_nix_profile", environ={"INPUT_USE_NIX_PROFILE": raw}) is True

    @pytest.mark.parametrize("raw", FALSE_VALUES)
    def test_false_spellings(self, raw):
        assert get_boolean_input("use_nix_profile", environ={"INPUT_USE_NIX_PROFILE": raw}) is False

    def test_empty_uses_default(self):
        assert get_boolean_input("use_nix_profile", environ={}) is False
        assert get_boolean_input("use_nix_profile", default=True, environ={}) is True

    def test_rejects_unknown_spelling(self):
        with pytest.raises(InputValidationAbort) as exc_info:
            get_boolean_input("use_nix_profile", environ={"INPUT_USE_NIX_PROFILE": "yes"})
        assert "use_nix_profile" in str(exc_info.value)
        assert "`yes`" in str(exc_info.value)


class TestResolveChannel:
    """Tests for resolve_channel."""

    def test_none_defaults_to_nixpkgs(self):
        assert resolve_channel(None) == DEFAULT_NIX_CHANNEL

    def test_strips_value(self):
        assert resolve_channel(" myChannel ") == "myChannel"

    def test_blank_is_rejected(self):
        with pytest.raises(InputValidationAbort):
            resolve_channel("   ")


class TestLoadInstallConfig:
    """Tests for load_install_config."""

    def test_defaults(self):
        assert load_install_config({}) == InstallConfig(use_nix_profile=False, channel="nixpkgs")

    def test_reads_inputs(self):
        config = load_install_config(
            {"INPUT_USE_NIX_PROFILE": "true", "INPUT_NIX_CHANNEL": "myChannel"}
        )
        assert config == InstallConfig(use_nix_profile=True, channel="myChannel")

    def test_blank_channel_falls_back_to_default(self):
        config = load_install_config({"INPUT_NIX_CHANNEL": "  "})
        assert config.channel == "nixpkgs"
