import os
from typing import Mapping, Optional

from easydict import EasyDict as edict

from ..core.risk.estimator import DEFAULT_ENDPOINT, DEFAULT_MODEL_NAME
from .env import load_cfg_from_env


def default_config() -> edict:
    cfg = edict()
    cfg.tool_name = "AIProbe"
    cfg.legacy_tool_name = "Probe"

    cfg.risk = edict()
    cfg.risk.endpoint = DEFAULT_ENDPOINT
    cfg.risk.model_name = DEFAULT_MODEL_NAME
    cfg.risk.timeout = None
    cfg.risk.label_length = 5
    cfg.risk.calculating_label = "calculating..."
    cfg.risk.fallback_label = "error"

    cfg.interaction = edict()
    cfg.interaction.hit_radius = 5.0
    cfg.interaction.fid_mode = "live_count"

    cfg.render = edict()
    cfg.render.stats_throttle_ms = 110
    cfg.render.label_offset = 3.0
    cfg.render.tool_color = "white"
    cfg.render.active_color = "greenyellow"
    cfg.render.font_size = 15
    cfg.render.handle_radius = 6
    return cfg


def load_config(env: Optional[Mapping[str, str]] = None, **overrides) -> edict:
    """Default configuration, then ``PROBE_*`` environment entries, then overrides."""
    cfg = load_cfg_from_env(default_config(), os.environ if env is None else env)
    for key, value in overrides.items():
        *parts, last = key.split(".")
        this_cfg = cfg
        for part in parts:
            if this_cfg.get(part) is None:
                this_cfg[part] = edict()
            this_cfg = this_cfg[part]
        this_cfg[last] = value
    return cfg
