"""
Profile System — loads profile.yaml and provides validated configuration.

The profile is the single source of truth for all user-configurable settings:
system name, inference backend and model, kernel drift/interrupt limits,
memory tier sizes, tool endpoints and timeouts, and logging level.

Usage:
    from agentos.profile import get_profile
    profile = get_profile()
    print(profile.kernel.drift_threshold)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

# ── Profile Path Resolution ──
_PROFILE_PATH_ENV = os.environ.get("AGENTOS_PROFILE_PATH")
_PROJECT_ROOT = Path(__file__).parent.parent.parent
_DEFAULT_PROFILE_PATH = _PROJECT_ROOT / "profile.yaml"


# ── Dataclasses ──

@dataclass
class SystemConfig:
    name: str = "AgentOS"
    description: str = ""


@dataclass
class InferenceConfig:
    type: str = "openai"  # openai | ollama
    endpoint: str = "http://localhost:1234"
    model_id: str = ""
    api_key: str = ""  # loaded from AGENTOS_API_KEY env var
    max_tokens: int = 2048
    temperature: float = 0.7
    timeout: float = 120


@dataclass
class KernelConfig:
    drift_increment: float = 0.05
    drift_threshold: float = 0.5
    max_interrupt_passes: int = 3
    tcb_ttl_seconds: int = 900
    release_on_complete: bool = True


@dataclass
class MemoryConfig:
    l1_limit: int = 5
    l2_limit: int = 20
    importance_keyword: str = "axiom"


@dataclass
class ToolsConfig:
    timeout_seconds: float = 30.0
    search_endpoint: str = "http://localhost:8888/search"
    search_max_results: int = 10


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class Profile:
    system: SystemConfig = field(default_factory=SystemConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    kernel: KernelConfig = field(default_factory=KernelConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def get_default_endpoint(self) -> str:
        """Get the endpoint URL for the generation backend."""
        return self.inference.endpoint or "http://localhost:1234"


# ── Parsing ──

def _parse_dict(data: dict, cls, **overrides):
    """Create a dataclass instance from a dict, ignoring unknown keys."""
    import dataclasses
    field_names = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in field_names}
    filtered.update(overrides)
    return cls(**filtered)


def _load_profile_from_dict(raw: dict) -> Profile:
    """Parse a raw YAML dict into a Profile dataclass."""
    profile = Profile()

    if "system" in raw and isinstance(raw["system"], dict):
        profile.system = _parse_dict(raw["system"], SystemConfig)

    # Inference: API key comes from the environment, never the file
    if "inference" in raw and isinstance(raw["inference"], dict):
        inf_data = raw["inference"].copy()
        inf_data["api_key"] = os.environ.get("AGENTOS_API_KEY", inf_data.get("api_key", ""))
        profile.inference = _parse_dict(inf_data, InferenceConfig)

    if "kernel" in raw and isinstance(raw["kernel"], dict):
        profile.kernel = _parse_dict(raw["kernel"], KernelConfig)

    if "memory" in raw and isinstance(raw["memory"], dict):
        profile.memory = _parse_dict(raw["memory"], MemoryConfig)

    if "tools" in raw and isinstance(raw["tools"], dict):
        profile.tools = _parse_dict(raw["tools"], ToolsConfig)

    if "logging" in raw and isinstance(raw["logging"], dict):
        profile.logging = _parse_dict(raw["logging"], LoggingConfig)

    return profile


def _load_profile() -> Profile:
    """Load profile from YAML file. Falls back to defaults if missing."""
    profile_path = Path(_PROFILE_PATH_ENV) if _PROFILE_PATH_ENV else _DEFAULT_PROFILE_PATH

    if not profile_path.exists():
        logger.info("No profile.yaml found at %s — using defaults", profile_path)
        return Profile()

    try:
        raw = yaml.safe_load(profile_path.read_text()) or {}
        if not isinstance(raw, dict):
            logger.warning("profile.yaml is not a valid YAML mapping — using defaults")
            return Profile()
        profile = _load_profile_from_dict(raw)
        logger.info("Profile loaded: system=%s, backend=%s (%s)",
                    profile.system.name, profile.inference.type,
                    profile.get_default_endpoint())
        return profile
    except Exception as e:
        logger.error("Failed to load profile.yaml: %s — using defaults", e)
        return Profile()


# ── Singleton ──

_profile: Optional[Profile] = None


def get_profile() -> Profile:
    """Return the validated profile singleton. Loads on first call."""
    global _profile
    if _profile is None:
        _profile = _load_profile()
    return _profile


def reload_profile() -> Profile:
    """Force reload of the profile from disk."""
    global _profile
    _profile = _load_profile()
    return _profile
