"""Cruise price watch package exposing reusable workflows."""
from .config import WatchConfig, create_config, create_config_from_env, create_config_from_form
from .workflow import WatchResult, build_result, run_watch_workflow

__all__ = [
    "WatchConfig",
    "WatchResult",
    "build_result",
    "create_config",
    "create_config_from_env",
    "create_config_from_form",
    "run_watch_workflow",
]
