"""
Routing rules component entry point and configuration tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from src.app_shell.config import (
    DEFAULT_ROUTING_RULES_PATH,
    RoutingRulesSettings,
    load_settings,
)
from src.components.routing_rules import (
    ListRulesInput,
    RoutingRule,
    RoutingRulesStore,
    UpdateRuleInput,
    YamlDocumentStreamCodec,
    create_store,
    run_list,
    run_update,
)


class TestRunList:
    """Test the list entry point."""

    def test_success(self, store: RoutingRulesStore) -> None:
        result = run_list(ListRulesInput(), store=store)
        assert result.success
        assert result.errors == []
        assert [r.name for r in result.rules] == ["default", "analytics", "batch"]

    def test_missing_file_reported(self, tmp_path: Path) -> None:
        """IO failures become io_error entries with the path."""
        path = tmp_path / "missing.yaml"
        result = run_list(ListRulesInput(), store=RoutingRulesStore(path))

        assert not result.success
        assert result.rules == []
        assert result.errors[0].code == "io_error"
        assert result.errors[0].path == str(path)

    def test_parse_failure_reported(self, tmp_path: Path) -> None:
        """Parse failures return no partial rules."""
        path = tmp_path / "rules.yaml"
        path.write_text("---\nname: ok\n---\nname: [\n", encoding="utf-8")

        result = run_list(ListRulesInput(), store=RoutingRulesStore(path))

        assert not result.success
        assert result.rules == []
        assert result.errors[0].code == "parse_error"
        assert str(path) in result.errors[0].message


class TestRunUpdate:
    """Test the update entry point."""

    def test_update_from_model(self, store: RoutingRulesStore) -> None:
        result = run_update(
            UpdateRuleInput(rule=RoutingRule(name="analytics", priority=5)), store=store
        )
        assert result.success
        assert result.matched == 1
        assert result.rules[1].priority == 5

    def test_update_from_mapping(self, store: RoutingRulesStore) -> None:
        """A plain mapping is validated into a rule."""
        result = run_update(
            UpdateRuleInput(rule={"name": "batch", "priority": 8, "owner": "etl"}),
            store=store,
        )
        assert result.success
        assert result.rules[2].model_extra == {"owner": "etl"}

    def test_miss_reports_zero_matches(self, store: RoutingRulesStore) -> None:
        result = run_update(UpdateRuleInput(rule={"name": "nope"}), store=store)
        assert result.success
        assert result.matched == 0
        assert len(result.rules) == 3

    @pytest.mark.parametrize(
        "rule", [{"name": ""}, {"priority": 1}, {"name": "a", "priority": "x"}]
    )
    def test_invalid_input(self, rules_file: Path, store: RoutingRulesStore, rule: dict) -> None:
        """Invalid rules are rejected without touching the file."""
        original = rules_file.read_bytes()

        result = run_update(UpdateRuleInput(rule=rule), store=store)

        assert not result.success
        assert result.errors[0].code == "invalid_input"
        assert rules_file.read_bytes() == original

    def test_unvalidated_empty_name_reported(
        self, rules_file: Path, store: RoutingRulesStore
    ) -> None:
        """A constructed rule that skipped validation is reported, not raised."""
        original = rules_file.read_bytes()

        result = run_update(UpdateRuleInput(rule=RoutingRule.model_construct(name="")), store=store)

        assert not result.success
        assert result.errors[0].code == "invalid_input"
        assert "non-empty" in result.errors[0].message
        assert rules_file.read_bytes() == original

    def test_parse_failure_reported(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("name: [\n", encoding="utf-8")

        result = run_update(
            UpdateRuleInput(rule={"name": "a"}), store=RoutingRulesStore(path)
        )

        assert not result.success
        assert result.errors[0].code == "parse_error"
        assert result.errors[0].path == str(path)


class TestYamlDocumentStreamCodec:
    """Test the document stream codec."""

    def test_round_trip(self) -> None:
        """Encoded documents decode to equal values in the same order."""
        codec = YamlDocumentStreamCodec()
        documents = [
            {"name": "a", "priority": 1, "actions": ["x", "y"]},
            {"name": "b", "nested": {"k": [1, 2, {"deep": True}]}},
            {"name": "c", "condition": "true"},
        ]
        assert codec.decode(codec.encode(documents)) == documents

    def test_empty_stream(self) -> None:
        codec = YamlDocumentStreamCodec()
        assert codec.encode([]) == ""
        assert codec.decode("") == []

    def test_each_document_has_marker(self) -> None:
        text = YamlDocumentStreamCodec().encode([{"name": "a"}, {"name": "b"}])
        assert text.count("---") == 2
        assert text.startswith("---")

    def test_scalar_document_rejected(self) -> None:
        with pytest.raises(TypeError):
            YamlDocumentStreamCodec().decode("--- 42\n")


class TestConfiguration:
    """Test resolving the store configuration."""

    def test_path_from_environment(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        settings = load_settings({"ROUTING_RULES_PATH": str(path)})
        assert settings.rules_path == path
        assert settings.lock_timeout is None

    def test_default_path_under_project_root(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        settings = load_settings({})

        assert settings.rules_path == tmp_path / DEFAULT_ROUTING_RULES_PATH

    def test_lock_timeout_from_environment(self, tmp_path: Path) -> None:
        settings = load_settings(
            {"ROUTING_RULES_PATH": str(tmp_path / "r.yaml"), "ROUTING_RULES_LOCK_TIMEOUT": "2.5"}
        )
        assert settings.lock_timeout == 2.5

    @pytest.mark.parametrize("value", ["soon", "0", "-1"])
    def test_invalid_lock_timeout(self, tmp_path: Path, value: str) -> None:
        with pytest.raises(ValueError, match="Invalid routing rules configuration"):
            load_settings(
                {
                    "ROUTING_RULES_PATH": str(tmp_path / "r.yaml"),
                    "ROUTING_RULES_LOCK_TIMEOUT": value,
                }
            )

    def test_create_store_from_settings(self, rules_file: Path) -> None:
        """The store built from settings reads the configured file."""
        store = create_store(RoutingRulesSettings(rules_path=rules_file, lock_timeout=1.0))
        assert store.path == rules_file
        assert len(store.list_rules()) == 3
