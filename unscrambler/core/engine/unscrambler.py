"""Equipment unscrambling for a single unit.

Responsibilities:
  - Build a MatchProposal from the unit's parts and live slots.
  - Run the matching rules, then seat squad troopers for squad-shaped units.
  - Commit the mapping onto part records and return an UnscrambleResult.

Inputs/Outputs:
  - Inputs: a unit exposing name, shape, slots and parts; optional RuleSet/MatchOrder.
  - Outputs: UnscrambleResult with success flag, failure message and diagnostics.

Invariants:
  - The unit's shape must match the unscrambler's shape; checked at construction.
  - Unresolved parts never raise; they are reported.
  - Slots are read only; part records change only inside MatchProposal.apply().
"""

from __future__ import annotations

from typing import Callable, Optional

from ..domain.enums import MatchRuleId
from ..domain.models import UnitShape
from ..matching.proposal import MatchProposal
from ..matching.rules import MatchOrder, RuleSet, build_default_ruleset, run_rules
from ..matching.troopers import assign_troopers
from ..ports.unit_port import UnitView
from .report import build_report, format_report
from .result import UnscrambleResult

_DEBUG_FN: Callable[[str], None] | None = None


def set_unscrambler_debug(fn: Callable[[str], None] | None) -> None:
    global _DEBUG_FN
    _DEBUG_FN = fn


def _debug(msg: str) -> None:
    if _DEBUG_FN is not None:
        _DEBUG_FN(msg)


class EquipmentUnscrambler:
    def __init__(
        self,
        unit: UnitView,
        shape: UnitShape,
        ruleset: Optional[RuleSet] = None,
        match_order: MatchOrder = MatchOrder.BY_RULE,
    ) -> None:
        if unit.shape != shape:
            raise ValueError(
                f"Unit {unit.name} has shape {unit.shape.kind.value} (size {unit.shape.squad_size}), "
                f"cannot unscramble it as {shape.kind.value} (size {shape.squad_size})"
            )
        self._unit = unit
        self._shape = shape
        self._ruleset = ruleset or build_default_ruleset()
        self._match_order = match_order

    @property
    def unit(self) -> UnitView:
        return self._unit

    @property
    def shape(self) -> UnitShape:
        return self._shape

    def build_proposal(self) -> MatchProposal:
        proposal = MatchProposal(self._shape)
        for part in self._unit.parts:
            proposal.consider(part)
        for slot in self._unit.slots:
            proposal.include_slot(slot.index, slot)
        return proposal

    def unscramble(self) -> UnscrambleResult:
        unit_name = self._unit.name
        proposal = self.build_proposal()

        def on_match(rule_id: MatchRuleId, part: object) -> None:
            _debug(
                f"UNSCRAMBLE_MATCH unit={unit_name} rule={rule_id.value} "
                f"part={part.name} from={proposal.original_index(part)} "
                f"to={proposal.mapped_index(part)}"
            )

        run_rules(proposal, self._ruleset, self._match_order, on_match=on_match)

        if self._shape.is_squad:
            for part in assign_troopers(proposal):
                _debug(
                    f"UNSCRAMBLE_TROOPER_OVERFLOW unit={unit_name} part={part.name} "
                    f"squad_size={self._shape.squad_size}"
                )

        report = build_report(unit_name, proposal)
        proposal.apply()

        succeeded = proposal.is_fully_resolved()
        _debug(
            f"UNSCRAMBLE_DONE unit={unit_name} succeeded={succeeded} "
            f"parts={len(report.parts)} unmapped={len(report.unmapped_parts)}"
        )
        return UnscrambleResult(
            unit_name=unit_name,
            succeeded=succeeded,
            message=None if succeeded else format_report(report),
            report=report,
        )
