# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
KopiRush terminal harness.

Features:
- Play sessions in the terminal with the stall's keyboard shortcuts
- YAML configuration for pacing, lives, regulars and the shift table
- Session logs (config, per-step events, score card) on local disk
"""

from .config import (
    EXAMPLE_CONFIG,
    VALID_POOLS,
    config_from_dict,
    config_to_dict,
    create_example_config,
    load_config,
    save_config,
)
from .runner import (
    SessionLogger,
    VerboseCallback,
    action_to_dict,
    observation_to_dict,
)

__all__ = [
    # Config
    "EXAMPLE_CONFIG",
    "VALID_POOLS",
    "config_from_dict",
    "config_to_dict",
    "create_example_config",
    "load_config",
    "save_config",
    # Runner
    "SessionLogger",
    "VerboseCallback",
    "action_to_dict",
    "observation_to_dict",
]
