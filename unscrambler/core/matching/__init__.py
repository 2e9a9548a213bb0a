"""Proposal state, matching rules and trooper assignment."""
from .proposal import MatchProposal
from .rules import (
    MatchOrder,
    MatchRule,
    RuleSet,
    build_default_ruleset,
    first_match,
    run_rules,
)
from .troopers import assign_troopers

__all__ = [
    "MatchProposal",
    "MatchOrder",
    "MatchRule",
    "RuleSet",
    "build_default_ruleset",
    "first_match",
    "run_rules",
    "assign_troopers",
]
