"""Rules - the student status transition graph and its validator."""

from registrar.rules.loader import RuleSetConfig, load_rules_file
from registrar.rules.rule_store import EdgeSet, RuleStore
from registrar.rules.validator import StatusTransitionValidator, StudentStatusService

__all__ = [
    "EdgeSet",
    "RuleSetConfig",
    "RuleStore",
    "StatusTransitionValidator",
    "StudentStatusService",
    "load_rules_file",
]
