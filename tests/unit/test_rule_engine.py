"""
Unit tests for the rule engine and cleaning rule configuration.
"""

from pathlib import Path

import pytest

from src.core.cleaners import DuplicateResolver, PartitionedMeanImputer, ValueStandardizer
from src.core.models import StageResult
from src.core.rules import (
    STAGE_ORDER,
    CleaningConfig,
    CleaningStage,
    RuleConfigBuilder,
    RuleConfigLoader,
    RuleEngine,
)

RULES_PATH = Path(__file__).resolve().parents[2] / "config" / "cleaning_rules.yaml"


class TestRuleConfigLoader:
    """Tests for RuleConfigLoader"""

    def test_shipped_rules_match_defaults(self):
        """Test config/cleaning_rules.yaml describes the default workflow"""
        config = RuleConfigLoader(RULES_PATH).load_config()
        assert config == CleaningConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuleConfigLoader(tmp_path / "absent.yaml")

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("")
        assert RuleConfigLoader(path).load_config() == CleaningConfig()

    def test_partial_file_overrides_section(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("defaults:\n  payment_method: Unknown\n")
        config = RuleConfigLoader(path).load_config()
        assert config.defaults == {"payment_method": "Unknown"}
        assert config.dedup_keys == ["transaction_id", "customer_id"]

    def test_unknown_section_rejected(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("validation_rules: []\n")
        with pytest.raises(ValueError, match="Unknown configuration sections"):
            RuleConfigLoader(path).load_config()

    def test_malformed_rule_rejected(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(
            "imputation:\n"
            "  - field_name: price\n"
            "    strategy: partitioned_mean\n"
        )
        with pytest.raises(ValueError, match="Invalid cleaning configuration"):
            RuleConfigLoader(path).load_config()

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            RuleConfigLoader(path).load_config()


class TestCleaningConfig:
    """Tests for CleaningConfig validation"""

    def test_derived_rule_not_allowed_in_imputation(self):
        with pytest.raises(ValueError):
            CleaningConfig(imputation=[{
                "field_name": "total_amount",
                "strategy": "derived",
                "inputs": ["price", "quantity"],
            }])

    def test_derived_section_requires_derived_strategy(self):
        with pytest.raises(ValueError):
            CleaningConfig(derived=[{
                "field_name": "price",
                "strategy": "constant",
                "value": 0,
            }])

    def test_field_types_must_cover_schema(self):
        with pytest.raises(ValueError, match="missing columns"):
            CleaningConfig(field_types={"transaction_id": "int"})


class TestRuleConfigBuilder:
    """Tests for RuleConfigBuilder"""

    def test_builder_starts_from_defaults(self):
        assert RuleConfigBuilder().build() == CleaningConfig()

    def test_builder_chain(self):
        config = (
            RuleConfigBuilder()
            .with_dedup_keys("transaction_id")
            .add_default("customer_name", "Guest")
            .add_standardization("payment_method", "Debit Card", ["debit", "DC"])
            .set_partitioned_mean("price", "product_id", fallback="error")
            .set_pattern("customer_address", r"\d+")
            .set_date_format("purchase_date", "%Y-%m-%d")
            .build()
        )

        assert config.dedup_keys == ["transaction_id"]
        assert config.defaults["customer_name"] == "Guest"
        assert config.standardize["payment_method"].mapping["Debit Card"] == ["debit", "DC"]
        assert config.standardize["payment_method"].mapping["Credit Card"] == ["creditcard", "CC", "credit"]
        assert len(config.imputation) == 1
        assert config.imputation[0].partition_field == "product_id"
        assert config.imputation[0].fallback == "error"
        assert config.patterns["customer_address"] == r"\d+"
        assert config.date_fields["purchase_date"] == "%Y-%m-%d"

    def test_builder_does_not_mutate_base(self):
        base = CleaningConfig()
        RuleConfigBuilder(base).add_default("category", "Misc").build()
        assert "category" not in base.defaults


class TestRuleEngine:
    """Tests for RuleEngine"""

    def test_stages_in_fixed_order(self):
        engine = RuleEngine(CleaningConfig())
        assert [stage.name for stage in engine.stages] == STAGE_ORDER

    def test_standardize_runs_before_defaults(self):
        """Test standardization precedes default fill so variants are not re-defaulted"""
        assert STAGE_ORDER.index("standardize_values") < STAGE_ORDER.index("fill_defaults")
        assert STAGE_ORDER.index("correct_negative_values") < STAGE_ORDER.index("derive_fields")
        assert STAGE_ORDER.index("impute_numeric") < STAGE_ORDER.index("normalize_types")

    def test_cleaners_built_from_config(self):
        engine = RuleEngine(CleaningConfig())
        by_name = {stage.name: stage for stage in engine.stages}

        assert isinstance(by_name["deduplicate"].cleaners[0], DuplicateResolver)
        assert isinstance(by_name["standardize_values"].cleaners[0], ValueStandardizer)
        assert isinstance(by_name["impute_numeric"].cleaners[0], PartitionedMeanImputer)
        assert len(by_name["fill_defaults"].cleaners) == 4
        assert len(by_name["normalize_types"].cleaners) == 13

    def test_derived_inputs_use_decimal_precision(self):
        config = CleaningConfig(decimal_precision=3)
        by_name = {stage.name: stage for stage in RuleEngine(config).stages}

        derived = by_name["derive_fields"].cleaners[0]
        assert derived.input_precision == {"price": 3}
        price_type = next(c for c in by_name["normalize_types"].cleaners if c.field_name == "price")
        assert price_type.precision == 3

    def test_rule_summary(self):
        summary = RuleEngine(CleaningConfig()).get_rule_summary()
        assert summary["stages"] == STAGE_ORDER
        assert summary["rules_by_type"]["constant"] == 5
        assert summary["rules_by_type"]["type"] == 13
        assert summary["total_rules"] == sum(summary["rules_by_type"].values())

    def test_empty_sections_give_empty_stages(self):
        config = CleaningConfig(defaults={}, patterns={}, standardize={})
        by_name = {stage.name: stage for stage in RuleEngine(config).stages}
        assert by_name["fill_defaults"].cleaners == []
        assert by_name["fill_defaults"].run([{"x": 1}]).rows_affected == 0


class TestCleaningStage:
    """Tests for CleaningStage"""

    def test_rows_affected_is_union_across_cleaners(self):
        """Test a row touched by two cleaners counts once"""
        from src.core.cleaners import ConstantImputer

        stage = CleaningStage("fill_defaults", [
            ConstantImputer("a", {"value": "x"}),
            ConstantImputer("b", {"value": "y"}),
        ])
        records = [{"a": None, "b": None}, {"a": "1", "b": None}, {"a": "1", "b": "2"}]

        result = stage.run(records)

        assert isinstance(result, StageResult)
        assert result.rows_affected == 2
        assert result.details["a"]["filled"] == 1
        assert result.details["b"]["filled"] == 2
        assert result.duration_seconds >= 0
