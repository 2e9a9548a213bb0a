"""Ordered matching rules that claim slots for unmapped parts.

Responsibilities:
  - Implement the four matching heuristics as (proposal, part) -> bool functions.
  - Bundle them into a RuleSet and run them in a configurable MatchOrder.

Invariants:
  - A rule only claims slots the proposal reports as available for the part.
  - Pool searches never claim destroyed slots.
  - Searches take the first eligible slot in pool insertion order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional

from unscrambler.core.domain.enums import MatchRuleId, PartFlavor
from unscrambler.core.domain.parts import part_flavor
from unscrambler.core.ports.unit_port import AmmoBinRecord, PartRecord, SlotView
from .proposal import MatchProposal

RuleFn = Callable[[MatchProposal, PartRecord], bool]


class MatchOrder(Enum):
    BY_RULE = "by_rule"
    BY_PART = "by_part"


@dataclass(frozen=True)
class MatchRule:
    rule_id: MatchRuleId
    fn: RuleFn

    def __call__(self, proposal: MatchProposal, part: PartRecord) -> bool:
        return self.fn(proposal, part)


@dataclass(frozen=True)
class RuleSet:
    rules: List[MatchRule]


def _can_switch_to(part: AmmoBinRecord, slot: SlotView) -> bool:
    return slot.is_ammo and part.can_change_munition(slot.type)


def rule_exact_match(proposal: MatchProposal, part: PartRecord) -> bool:
    if part_flavor(part) is None:
        return False
    index = proposal.original_index(part)
    slot = proposal.available_slot(index, part)
    if slot is None or slot.type != part.type:
        return False
    proposal.propose_with_slot(part, index, slot, MatchRuleId.EXACT_MATCH)
    return True


def rule_approximate_match(proposal: MatchProposal, part: PartRecord) -> bool:
    if part_flavor(part) is not PartFlavor.AMMO_BIN:
        return False
    index = proposal.original_index(part)
    slot = proposal.available_slot(index, part)
    if slot is None or not _can_switch_to(part, slot):
        return False
    proposal.propose_with_slot(part, index, slot, MatchRuleId.APPROXIMATE_MATCH)
    return True


def rule_moved_equipment(proposal: MatchProposal, part: PartRecord) -> bool:
    if part_flavor(part) is None:
        return False
    for index, slot in proposal.pool_items():
        if slot.destroyed or slot.type != part.type:
            continue
        if not proposal.is_available(index, part):
            continue
        proposal.propose_with_slot(part, index, slot, MatchRuleId.MOVED_EQUIPMENT)
        return True
    return False


def rule_moved_ammo_bin(proposal: MatchProposal, part: PartRecord) -> bool:
    if part_flavor(part) is not PartFlavor.AMMO_BIN:
        return False
    for index, slot in proposal.pool_items():
        if slot.destroyed or not _can_switch_to(part, slot):
            continue
        if not proposal.is_available(index, part):
            continue
        proposal.propose_with_slot(part, index, slot, MatchRuleId.MOVED_AMMO_BIN)
        return True
    return False


def build_default_ruleset() -> RuleSet:
    return RuleSet(
        rules=[
            MatchRule(MatchRuleId.EXACT_MATCH, rule_exact_match),
            MatchRule(MatchRuleId.APPROXIMATE_MATCH, rule_approximate_match),
            MatchRule(MatchRuleId.MOVED_EQUIPMENT, rule_moved_equipment),
            MatchRule(MatchRuleId.MOVED_AMMO_BIN, rule_moved_ammo_bin),
        ]
    )


def first_match(
    rules: Iterable[MatchRule], proposal: MatchProposal, part: PartRecord
) -> Optional[MatchRuleId]:
    for rule in rules:
        if rule(proposal, part):
            return rule.rule_id
    return None


def run_rules(
    proposal: MatchProposal,
    ruleset: RuleSet,
    order: MatchOrder = MatchOrder.BY_RULE,
    on_match: Optional[Callable[[MatchRuleId, PartRecord], None]] = None,
) -> None:
    if order == MatchOrder.BY_PART:
        for part in proposal.unmapped_parts():
            rule_id = first_match(ruleset.rules, proposal, part)
            if rule_id is not None and on_match is not None:
                on_match(rule_id, part)
        return

    # Each rule sees every still-unmapped part before a lower-priority rule runs.
    for rule in ruleset.rules:
        for part in proposal.unmapped_parts():
            if rule(proposal, part) and on_match is not None:
                on_match(rule.rule_id, part)
