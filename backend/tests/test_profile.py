"""
Tests for profile loading.
"""

import pytest


class TestProfileParsing:

    def test_defaults(self):
        """Defaults match the documented kernel and memory limits."""
        from agentos.profile import Profile

        profile = Profile()
        assert profile.kernel.drift_increment == 0.05
        assert profile.kernel.drift_threshold == 0.5
        assert profile.kernel.max_interrupt_passes == 3
        assert profile.memory.l1_limit == 5
        assert profile.memory.l2_limit == 20

    def test_unknown_keys_ignored(self):
        """Unknown keys and non-mapping sections are ignored."""
        from agentos.profile import _load_profile_from_dict

        profile = _load_profile_from_dict({
            "kernel": {"drift_threshold": 0.8, "warp_factor": 9},
            "memory": "not a mapping",
        })
        assert profile.kernel.drift_threshold == 0.8
        assert profile.kernel.drift_increment == 0.05
        assert profile.memory.l1_limit == 5

    def test_api_key_comes_from_environment(self, monkeypatch):
        """AGENTOS_API_KEY overrides any key in the file."""
        from agentos.profile import _load_profile_from_dict

        monkeypatch.setenv("AGENTOS_API_KEY", "sk-env")
        profile = _load_profile_from_dict({"inference": {"type": "ollama", "api_key": "sk-file"}})

        assert profile.inference.api_key == "sk-env"
        assert profile.inference.type == "ollama"

    def test_example_profile_loads(self):
        """The shipped example profile loads."""
        from agentos.profile import get_profile

        profile = get_profile()
        assert profile.system.name == "AgentOS"
        assert profile.tools.timeout_seconds == 30
        assert profile.kernel.release_on_complete is True


class TestConfig:

    def test_constants_follow_profile(self):
        """Config constants come from the loaded profile."""
        from agentos import config

        assert config.DRIFT_THRESHOLD == 0.5
        assert config.TOOL_RESULT_PREFIX == "TOOL_RESULT: "
        assert config.NO_CONTEXT_PLACEHOLDER == "No prior semantic context found."

    @pytest.mark.parametrize("level", ["debug", "WARNING"])
    def test_configure_logging_accepts_level_names(self, level):
        """Level names are accepted in any case."""
        from agentos.config import configure_logging

        configure_logging(level)
