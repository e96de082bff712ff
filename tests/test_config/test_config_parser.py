"""Tests for jen.yaml parsing."""

import asyncio

import pytest

from jen.config import (
    SiteConfig,
    build_config,
    load_config,
    parse_config_file,
    parse_config_string,
)
from jen.exceptions import ConfigError
from jen.walker import CyclePolicy


class TestParseConfigString:
    """Tests for parse_config_string function."""

    def test_entries_only(self):
        data = parse_config_string("""
entries:
  - index.html
""")
        assert data == {'entries': ['index.html']}

    def test_full_document(self):
        data = parse_config_string("""
config:
  root: site
  output: public
  cycle_policy: fail
  follow_remote_references: true
  ignore_not_found: false
entries:
  - index.html
  - "pages/*.html"
""")
        assert data['config']['cycle_policy'] == 'fail'
        assert data['entries'] == ['index.html', 'pages/*.html']

    def test_empty_document_needs_entries(self):
        """Test an empty file is a mapping without entries."""
        with pytest.raises(ConfigError, match="Missing required field 'entries'"):
            parse_config_string("")

    def test_invalid_yaml(self):
        with pytest.raises(ConfigError, match="Invalid YAML syntax"):
            parse_config_string("entries: [index.html")

    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigError, match="YAML root must be a mapping"):
            parse_config_string("- index.html\n")

    def test_config_must_be_mapping(self):
        with pytest.raises(ConfigError, match="'config' must be a mapping"):
            parse_config_string("config: [1]\nentries: [index.html]\n")

    def test_null_config_allowed(self):
        data = parse_config_string("config:\nentries: [index.html]\n")
        assert data['config'] is None

    @pytest.mark.parametrize("document", [
        "entries: index.html\n",
        "entries: []\n",
    ])
    def test_entries_must_be_non_empty_list(self, document):
        with pytest.raises(ConfigError, match="'entries' must be a non-empty list"):
            parse_config_string(document)

    @pytest.mark.parametrize("entry", ["''", "3", "{a: b}"])
    def test_entry_must_be_string(self, entry):
        with pytest.raises(ConfigError, match="Entry 1 must be a non-empty string"):
            parse_config_string(f"entries:\n  - index.html\n  - {entry}\n")

    def test_string_option_type(self):
        with pytest.raises(ConfigError, match="'config.root' must be a string"):
            parse_config_string("config:\n  root: 5\nentries: [index.html]\n")

    def test_boolean_option_type(self):
        """Test quoted booleans are rejected."""
        with pytest.raises(ConfigError, match="'config.ignore_not_found' must be true or false"):
            parse_config_string("config:\n  ignore_not_found: 'yes'\nentries: [index.html]\n")

    def test_invalid_cycle_policy(self):
        with pytest.raises(ConfigError, match="invalid value 'sometimes'"):
            parse_config_string("config:\n  cycle_policy: sometimes\nentries: [index.html]\n")


class TestParseConfigFile:
    """Tests for parse_config_file function."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_config_file(tmp_path / "jen.yaml")

    def test_reads_file(self, tmp_path):
        path = tmp_path / "jen.yaml"
        path.write_text("entries:\n  - index.html\n")
        assert parse_config_file(str(path)) == {'entries': ['index.html']}


class TestBuildConfig:
    """Tests for building SiteConfig objects."""

    def test_defaults(self, tmp_path):
        config = build_config({'entries': ['index.html']}, tmp_path)
        assert config.root == tmp_path.resolve()
        assert config.output == (tmp_path / "build").resolve()
        assert config.cycle_policy is CyclePolicy.PRUNE
        assert config.follow_remote_references is False
        assert config.ignore_not_found is True
        assert config.s3_profile is None
        assert config.s3_region is None

    def test_explicit_values(self, tmp_path):
        config = build_config({
            'config': {
                'root': 'site',
                'output': '/srv/www',
                'cycle_policy': 'allow',
                'follow_remote_references': True,
                's3_region': 'eu-west-1',
            },
            'entries': ['*.html'],
        }, tmp_path)
        assert config.root == (tmp_path / "site").resolve()
        assert str(config.output) == "/srv/www"
        assert config.cycle_policy is CyclePolicy.ALLOW
        assert config.follow_remote_references is True
        assert config.s3_region == 'eu-west-1'
        assert config.entries == ['*.html']

    def test_load_config_relative_to_file(self, tmp_path):
        """Test relative paths start at the directory holding jen.yaml."""
        project = tmp_path / "project"
        project.mkdir()
        (project / "jen.yaml").write_text(
            "config:\n  root: site\n  output: ../out\nentries: [index.html]\n")

        config = load_config(project / "jen.yaml")

        assert isinstance(config, SiteConfig)
        assert config.root == (project / "site").resolve()
        assert config.output == (tmp_path / "out").resolve()


class TestWalkOptions:
    """Tests for SiteConfig.walk_options."""

    def test_carries_settings(self, tmp_path):
        config = SiteConfig(root=tmp_path, output=tmp_path / "build",
                            entries=['index.html'],
                            cycle_policy=CyclePolicy.FAIL,
                            follow_remote_references=True,
                            ignore_not_found=False)
        cancel = asyncio.Event()
        observed = []

        options = config.walk_options(observe=observed.append, cancel=cancel)

        assert options.cycle_policy is CyclePolicy.FAIL
        assert options.follow_remote_references is True
        assert options.ignore_not_found is False
        assert options.cancel is cancel
        options.observe("ref")
        assert observed == ["ref"]
