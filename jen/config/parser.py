"""YAML parsing and validation for jen site configuration.

This module handles parsing jen.yaml files and validating their structure.

Example jen.yaml:

    config:
      root: site
      output: build
      follow_remote_references: false
      ignore_not_found: true
      cycle_policy: prune
    entries:
      - index.html
      - "pages/*.html"
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from jen.exceptions import ConfigError
from jen.walker import CyclePolicy, WalkOptions

DEFAULT_CONFIG_FILE = 'jen.yaml'

_BOOLEAN_OPTIONS = ('follow_remote_references', 'ignore_not_found')
_STRING_OPTIONS = ('root', 'output', 's3_profile', 's3_region')


@dataclass
class SiteConfig:
    """Validated site configuration with absolute paths."""

    root: Path
    """Site root; entry globs and root-relative references start here."""

    output: Path
    """Directory the built site is written to."""

    entries: List[str] = field(default_factory=list)
    """Glob patterns, relative to root, naming the entry pages."""

    cycle_policy: CyclePolicy = CyclePolicy.PRUNE
    follow_remote_references: bool = False
    ignore_not_found: bool = True
    s3_profile: Optional[str] = None
    s3_region: Optional[str] = None

    def walk_options(self, **kwargs) -> WalkOptions:
        """WalkOptions carrying this configuration's traversal settings."""
        return WalkOptions(
            cycle_policy=self.cycle_policy,
            follow_remote_references=self.follow_remote_references,
            ignore_not_found=self.ignore_not_found,
            **kwargs,
        )


def parse_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Parse and validate a jen.yaml file.

    Args:
        path: Path to the YAML file

    Returns:
        The validated document as a dictionary

    Raises:
        ConfigError: If the file is invalid or missing required fields
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding='utf-8') as f:
        return parse_config_string(f.read())


def parse_config_string(content: str) -> Dict[str, Any]:
    """Parse configuration from a YAML string.

    Args:
        content: YAML content as string

    Returns:
        The validated document as a dictionary
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping")

    _validate_config_data(data)
    return data


def load_config(path: Union[str, Path] = DEFAULT_CONFIG_FILE) -> SiteConfig:
    """Load a jen.yaml file into a SiteConfig.

    Relative root and output paths are taken relative to the directory
    holding the file.
    """
    path = Path(path)
    data = parse_config_file(path)
    return build_config(data, path.parent)


def build_config(data: Dict[str, Any], base_path: Union[str, Path]) -> SiteConfig:
    """Turn a validated document into a SiteConfig.

    Args:
        data: Result of parse_config_string / parse_config_file
        base_path: Directory that relative paths are resolved against
    """
    base_path = Path(base_path).resolve()
    options = data.get('config') or {}

    root = (base_path / options.get('root', '.')).resolve()
    output = (base_path / options.get('output', 'build')).resolve()

    return SiteConfig(
        root=root,
        output=output,
        entries=list(data['entries']),
        cycle_policy=CyclePolicy(options.get('cycle_policy', CyclePolicy.PRUNE.value)),
        follow_remote_references=options.get('follow_remote_references', False),
        ignore_not_found=options.get('ignore_not_found', True),
        s3_profile=options.get('s3_profile'),
        s3_region=options.get('s3_region'),
    )


def _validate_config_data(data: Dict[str, Any]) -> None:
    """Validate parsed YAML data structure.

    Raises:
        ConfigError: If validation fails
    """
    options = data.get('config', {})
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise ConfigError("'config' must be a mapping")

    for name in _STRING_OPTIONS:
        if name in options and not isinstance(options[name], str):
            raise ConfigError(f"'config.{name}' must be a string")

    for name in _BOOLEAN_OPTIONS:
        if name in options and not isinstance(options[name], bool):
            raise ConfigError(f"'config.{name}' must be true or false")

    if 'cycle_policy' in options:
        _validate_cycle_policy(options['cycle_policy'])

    if 'entries' not in data:
        raise ConfigError("Missing required field 'entries'")
    entries = data['entries']
    if not isinstance(entries, list) or not entries:
        raise ConfigError("'entries' must be a non-empty list")
    for i, pattern in enumerate(entries):
        if not isinstance(pattern, str) or not pattern.strip():
            raise ConfigError(f"Entry {i} must be a non-empty string")


def _validate_cycle_policy(value: Any) -> None:
    valid = [policy.value for policy in CyclePolicy]
    if value not in valid:
        raise ConfigError(
            f"'config.cycle_policy' has invalid value {value!r}. "
            f"Valid values: {valid}"
        )
