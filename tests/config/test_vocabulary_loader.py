"""Tests for YAML vocabulary loading (status_recorder/config/loader.py)."""

import pytest
import yaml

from status_recorder.config import load_lifecycles
from status_recorder.config.loader import (
    compute_checksum,
    load_vocabularies,
    load_yaml_file,
    parse_vocabularies,
)
from status_recorder.domain.hooks import HookRegistry
from status_recorder.domain.vocabulary import StatusRule
from status_recorder.exceptions import VocabularyError

ORDERS_YAML = """
entity_types:
  Order:
    statuses:
      placed:
      paid: {from: placed}
      shipped: {from: [paid]}
      cancelled: {not-from: [shipped, cancelled]}
"""

INVOICES_YAML = """
entity_types:
  Invoice:
    statuses:
      draft: {}
      issued: {from: draft}
"""


@pytest.fixture
def orders_file(tmp_path):
    path = tmp_path / "orders.yaml"
    path.write_text(ORDERS_YAML)
    return path


class TestLoadYamlFile:
    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_file(path) == {}

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(VocabularyError):
            load_yaml_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml_file(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("entity_types: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_yaml_file(path)


class TestParseVocabularies:
    def test_parses_rules_in_declaration_order(self):
        vocabularies = parse_vocabularies(yaml.safe_load(ORDERS_YAML))

        order = vocabularies["Order"]
        assert order.names() == ("placed", "paid", "shipped", "cancelled")
        assert order.rules_for("placed").is_unconstrained
        assert order.rules_for("paid") == StatusRule(allowed_from=frozenset({"placed"}))
        assert order.rules_for("cancelled").denied_from == frozenset({"shipped", "cancelled"})

    def test_entity_type_needs_statuses(self):
        with pytest.raises(VocabularyError):
            parse_vocabularies({"entity_types": {"Order": {"states": {}}}})

    def test_entity_types_must_be_mapping(self):
        with pytest.raises(VocabularyError):
            parse_vocabularies({"entity_types": ["Order"]})

    def test_bad_rule_rejected(self):
        with pytest.raises(VocabularyError):
            parse_vocabularies(
                {"entity_types": {"Order": {"statuses": {"paid": {"after": "placed"}}}}}
            )

    def test_missing_entity_types_is_empty(self):
        assert parse_vocabularies({}) == {}


class TestLoadVocabularies:
    def test_single_file(self, orders_file):
        assert list(load_vocabularies(orders_file)) == ["Order"]

    def test_directory_merge(self, tmp_path):
        (tmp_path / "a_orders.yaml").write_text(ORDERS_YAML)
        (tmp_path / "b_invoices.yml").write_text(INVOICES_YAML)
        (tmp_path / "notes.txt").write_text("not a vocabulary")

        vocabularies = load_vocabularies(tmp_path)

        assert list(vocabularies) == ["Order", "Invoice"]

    def test_duplicate_entity_type_across_files(self, tmp_path):
        (tmp_path / "one.yaml").write_text(ORDERS_YAML)
        (tmp_path / "two.yaml").write_text(ORDERS_YAML)

        with pytest.raises(VocabularyError) as exc_info:
            load_vocabularies(tmp_path)

        assert exc_info.value.status == "Order"
        assert "one.yaml" in exc_info.value.reason

    def test_file_load_logged_with_checksum(self, orders_file, captured_logs):
        load_vocabularies(orders_file)

        records = [r for r in captured_logs() if r["message"] == "vocabulary_file_loaded"]
        assert len(records) == 1
        assert records[0]["checksum"] == compute_checksum(yaml.safe_load(ORDERS_YAML))


class TestComputeChecksum:
    def test_key_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_content_sensitive(self):
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})


class TestLoadLifecycles:
    def test_builds_lifecycle_per_entity_type(self, tmp_path):
        (tmp_path / "orders.yaml").write_text(ORDERS_YAML)
        (tmp_path / "invoices.yaml").write_text(INVOICES_YAML)

        lifecycles = load_lifecycles(tmp_path)

        assert set(lifecycles) == {"Order", "Invoice"}
        assert lifecycles["Invoice"].statuses() == ("draft", "issued")

    def test_hooks_attached_by_entity_type(self, orders_file):
        hooks = HookRegistry({"shipped": print})

        lifecycles = load_lifecycles(orders_file, hooks={"Order": hooks})

        assert lifecycles["Order"].hooks is hooks

    def test_hooks_for_unknown_entity_type(self, orders_file):
        with pytest.raises(VocabularyError) as exc_info:
            load_lifecycles(orders_file, hooks={"Invoice": HookRegistry()})
        assert exc_info.value.status == "Invoice"

    def test_hook_for_unknown_status(self, orders_file):
        with pytest.raises(VocabularyError):
            load_lifecycles(orders_file, hooks={"Order": HookRegistry({"refunded": print})})

    def test_load_logged(self, orders_file, captured_logs):
        load_lifecycles(orders_file)

        records = [r for r in captured_logs() if r["message"] == "status_config_loaded"]
        assert records[0]["entity_types"] == {"Order": 4}
