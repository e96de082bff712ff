"""Site configuration loaded from jen.yaml.

Example:
    from jen.config import load_config

    config = load_config("jen.yaml")
    print(config.root, config.entries)
"""

from .parser import (
    DEFAULT_CONFIG_FILE,
    SiteConfig,
    build_config,
    load_config,
    parse_config_file,
    parse_config_string,
)

__all__ = [
    'DEFAULT_CONFIG_FILE',
    'SiteConfig',
    'build_config',
    'load_config',
    'parse_config_file',
    'parse_config_string',
]
