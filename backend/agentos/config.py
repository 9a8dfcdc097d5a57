"""
Configuration — centralized settings for the kernel.
All user-configurable values come from profile.yaml via get_profile().
Wire markers and placeholder strings remain as code constants.
"""

import logging
import os

from agentos.profile import get_profile

_profile = get_profile()

# ── Generation Backend ──
INFERENCE_TYPE = _profile.inference.type
API_BASE = os.environ.get("AGENTOS_API_BASE", _profile.get_default_endpoint())
API_KEY = _profile.inference.api_key
MODEL_ID = _profile.inference.model_id
MAX_TOKENS = _profile.inference.max_tokens or 2048
TEMPERATURE = _profile.inference.temperature
GENERATION_TIMEOUT = _profile.inference.timeout or 120

# ── Kernel (drift + interrupt limits) ──
DRIFT_INCREMENT = _profile.kernel.drift_increment
DRIFT_THRESHOLD = _profile.kernel.drift_threshold
MAX_INTERRUPT_PASSES = _profile.kernel.max_interrupt_passes
TCB_TTL_SECONDS = _profile.kernel.tcb_ttl_seconds
RELEASE_ON_COMPLETE = _profile.kernel.release_on_complete

# Drift values are rounded on every update so repeated increments compare exactly
DRIFT_PRECISION = 6

# ── Memory ──
L1_LIMIT = _profile.memory.l1_limit
L2_LIMIT = _profile.memory.l2_limit
IMPORTANCE_KEYWORD = _profile.memory.importance_keyword
IMPORTANCE_KEYWORD_BONUS = 20
IMPORTANCE_MAX = 100
CONTEXT_KEY_PREFIX = "ctx_"
NO_CONTEXT_PLACEHOLDER = "No prior semantic context found."

# ── Tools ──
TOOL_TIMEOUT = _profile.tools.timeout_seconds
SEARCH_ENDPOINT = _profile.tools.search_endpoint
SEARCH_MAX_RESULTS = _profile.tools.search_max_results

# ── Wire Format ──
TOOL_CALL_OPEN = "<tool_call>"
TOOL_CALL_CLOSE = "</tool_call>"
TOOL_RESPONSE_OPEN = "<tool_response>"
TOOL_RESPONSE_CLOSE = "</tool_response>"
TOOL_RESULT_PREFIX = "TOOL_RESULT: "

# ── Scheduler ──
SYNC_PLACEHOLDER = "Unified Latent Schema [Aligned]"

# ── Logging ──
LOG_LEVEL = _profile.logging.level
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = None):
    """Apply the standard log format. Intended for host processes and scripts."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
