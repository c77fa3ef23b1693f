"""Tests for configuration management."""

import logging

import pytest

from onetime.config import (
    Config, ConfigManager, DisplayConfig, FilesConfig, RuleOptions, parse_option_value,
)


class TestRuleOptions:
    """Rule options and their camelCase form."""

    def test_defaults(self):
        """Defaults match the rule's documented defaults."""
        options = RuleOptions()

        assert options.ignored_variables == set()
        assert options.ignore_function_variables is True
        assert options.ignore_array_variables is False
        assert options.ignore_exported_variables is True
        assert options.allow_inside_callback is True
        assert options.max_initializer_length == 80
        assert options.max_object_properties == 3
        assert options.max_property_length == 40

    def test_from_dict_camel_case(self):
        """ESLint-style keys map onto attributes."""
        options = RuleOptions.from_dict({
            "ignoredVariables": ["self", "that"],
            "ignoreArrayVariables": 3,
            "allowInsideCallback": False,
        })

        assert options.ignored_variables == {"self", "that"}
        assert options.ignore_array_variables == 3
        assert options.allow_inside_callback is False

    def test_from_dict_legacy_and_snake_case(self):
        """The legacy callback key and attribute names are accepted too."""
        options = RuleOptions.from_dict({
            "allowInsideFunctions": False,
            "max_initializer_length": 10,
        })

        assert options.allow_inside_callback is False
        assert options.max_initializer_length == 10

    def test_from_dict_ignores_unknown(self):
        """Unknown keys leave defaults alone."""
        assert RuleOptions.from_dict({"bogus": 1}) == RuleOptions()
        assert RuleOptions.from_dict(None) == RuleOptions()

    def test_to_dict_sorted_names(self):
        """Ignored names serialize as a sorted list."""
        data = RuleOptions(ignored_variables={"that", "self"}).to_dict()

        assert data["ignoredVariables"] == ["self", "that"]
        assert data["allowInsideCallback"] is True

    @pytest.mark.parametrize("changes, fragment", [
        ({"allow_inside_callback": "yes"}, "allow_inside_callback"),
        ({"max_object_properties": -1}, "max_object_properties"),
        ({"max_property_length": True}, "max_property_length"),
        ({"ignore_array_variables": -2}, "ignore_array_variables"),
        ({"ignored_variables": {1}}, "ignored_variables"),
    ])
    def test_validate_errors(self, changes, fragment):
        """Wrongly typed options are rejected."""
        error = RuleOptions(**changes).validate()

        assert error is not None
        assert fragment in error

    @pytest.mark.parametrize("limit", [True, False, 0, 5])
    def test_array_limit_accepts_bool_or_count(self, limit):
        """ignoreArrayVariables is a boolean or a count."""
        assert RuleOptions(ignore_array_variables=limit).validate() is None


class TestSections:
    """Display and files sections."""

    def test_display_validation(self):
        assert DisplayConfig(symbols="emoji").validate() is not None
        assert "Unknown format" in DisplayConfig(format="xml").validate()
        assert DisplayConfig().validate() is None

    def test_files_validation(self):
        assert FilesConfig(max_file_size=0).validate() is not None
        assert FilesConfig(max_file_size=1024).validate() is None

    def test_round_trip_through_dict(self):
        """to_dict() output loads back into an equal config."""
        config = Config(
            rule=RuleOptions(ignored_variables={"self"}, max_initializer_length=20),
            display=DisplayConfig(symbols="ascii", format="json"),
            files=FilesConfig(exclude=["**/legacy/*"], include_tests=False),
        )

        assert Config.from_dict(config.to_dict()) == config


class TestParseOptionValue:
    """Command-line value parsing."""

    @pytest.mark.parametrize("raw, expected", [
        ("true", True),
        ("Off", False),
        ("12", 12),
        ("self, that", ["self", "that"]),
        ("self", "self"),
        ("-1", "-1"),
    ])
    def test_values(self, raw, expected):
        assert parse_option_value(raw) == expected


class TestConfigManager:
    """Configuration loading and saving."""

    def test_load_defaults(self, tmp_path):
        """Loads defaults when no config files exist."""
        config = ConfigManager(tmp_path, user_config_dir=tmp_path / "user").load()

        assert config == Config()

    def test_save_and_load_project(self, tmp_path):
        """Saves and loads project config."""
        manager = ConfigManager(tmp_path, user_config_dir=tmp_path / "user")
        manager.save_project(Config(rule=RuleOptions(allow_inside_callback=False)))

        loaded = ConfigManager(tmp_path, user_config_dir=tmp_path / "user").load()

        assert loaded.rule.allow_inside_callback is False
        assert manager.project_config_path.exists()

    def test_project_overrides_user(self, lint_factory):
        """Project config takes priority over user config."""
        lint_factory.write_config("rule:\n  maxInitializerLength: 10\n  ignoredVariables: [self]\n", user=True)
        lint_factory.write_config("rule:\n  maxInitializerLength: 20\n")

        config = lint_factory.config_manager().load()

        assert config.rule.max_initializer_length == 20
        # Sections merge key by key
        assert config.rule.ignored_variables == {"self"}

    def test_environment_overrides_files(self, lint_factory, monkeypatch):
        """Environment variables override config files."""
        lint_factory.write_config("display:\n  format: summary\n")
        monkeypatch.setenv("ONETIME_FORMAT", "json")
        monkeypatch.setenv("ONETIME_IGNORED_VARIABLES", "self, that")

        config = lint_factory.config_manager().load()

        assert config.display.format == "json"
        assert config.rule.ignored_variables == {"self", "that"}

    def test_bad_yaml_is_skipped(self, lint_factory, caplog):
        """A malformed file is ignored with a warning."""
        lint_factory.write_config("rule: [unclosed\n")

        with caplog.at_level(logging.WARNING, logger="onetime.config"):
            config = lint_factory.config_manager().load()

        assert config == Config()
        assert "Ignoring unreadable config" in caplog.text

    def test_non_mapping_is_skipped(self, lint_factory, caplog):
        """A YAML list at the top level is ignored."""
        lint_factory.write_config("- a\n- b\n")

        with caplog.at_level(logging.WARNING, logger="onetime.config"):
            config = lint_factory.config_manager().load()

        assert config == Config()
        assert "must be a mapping" in caplog.text

    def test_set_rule_option(self, lint_factory):
        """Rule options are set by camelCase key and persisted."""
        manager = lint_factory.config_manager()

        assert manager.set("rule.ignoredVariables", "self,that") is None
        assert manager.set("rule.allowInsideFunctions", "false") is None

        reloaded = lint_factory.config_manager()
        assert reloaded.get("rule.ignoredVariables") == "self,that"
        assert reloaded.get("rule.allowInsideCallback") == "false"
        assert reloaded.get("rule.allow_inside_callback") == "false"

    def test_set_user_scope(self, lint_factory):
        """User scope writes the user config file."""
        manager = lint_factory.config_manager()

        assert manager.set("display.symbols", "ascii", scope="user") is None
        assert manager.user_config_path.exists()
        assert not manager.project_config_path.exists()

    @pytest.mark.parametrize("key, value, fragment", [
        ("invalid", "value", "Invalid key format"),
        ("rule.nope", "1", "Unknown rule option"),
        ("rule.maxInitializerLength", "-1", "non-negative integer"),
        ("display.format", "xml", "Unknown format"),
        ("display.colour", "red", "Unknown display setting"),
        ("files.max_file_size", "0", "positive integer"),
        ("llm.provider", "x", "Unknown section"),
    ])
    def test_set_errors(self, lint_factory, key, value, fragment):
        """Set returns an error and writes nothing for bad input."""
        manager = lint_factory.config_manager()

        error = manager.set(key, value)

        assert error is not None
        assert fragment in error
        assert not manager.project_config_path.exists()

    def test_get_unknown(self, lint_factory):
        """Unknown keys read as None."""
        manager = lint_factory.config_manager()

        assert manager.get("rule.nope") is None
        assert manager.get("nope") is None
        assert manager.get("files.max_file_size") is None

    def test_display_lists_everything(self, lint_factory):
        """display() shows options, sections and file locations."""
        manager = lint_factory.config_manager()
        text = manager.display()

        assert "Rule options (no-one-time-vars):" in text
        assert "  maxInitializerLength: 80" in text
        assert "  ignoredVariables: (none)" in text
        assert str(manager.project_config_path) in text
