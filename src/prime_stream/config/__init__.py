from .loader import ConfigError, build_config, load_config, load_raw_config, merge_overrides

# Config exports are intentionally small.
__all__ = ["ConfigError", "build_config", "load_config", "load_raw_config", "merge_overrides"]
