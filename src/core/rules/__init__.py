"""
Cleaning rule engine and configuration management.
"""

from .rule_config import CleaningConfig, RuleConfigBuilder, RuleConfigLoader, StandardizationRule
from .rule_engine import STAGE_ORDER, CleaningStage, RuleEngine

__all__ = [
    "RuleEngine",
    "CleaningStage",
    "STAGE_ORDER",
    "CleaningConfig",
    "StandardizationRule",
    "RuleConfigLoader",
    "RuleConfigBuilder",
]
