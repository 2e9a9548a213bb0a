"""Working state of one reconciliation pass.

Responsibilities:
  - Track original and tentative part -> slot mappings and the unclaimed slot pool.
  - Enforce claim bookkeeping: exclusive claims leave the pool, shared squad
    claims stay until the squad is full.
  - Write the final mapping back onto part records in apply().

Inputs/Outputs:
  - Inputs: parts via consider(), live slots via include_slot(), claims from rules.
  - Outputs: mapping queries for rules/reports, and apply() side effects on parts.

Invariants:
  - A part is tracked iff it was registered via consider(); it is never dropped.
  - An exclusively claimed index is never claimed again within the pass.
  - apply() touches every considered part; unmapped parts get UNSET_INDEX.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from unscrambler.core.domain.enums import MatchRuleId, PartFlavor
from unscrambler.core.domain.models import EquipmentSlot, UnitShape
from unscrambler.core.domain.parts import UNSET_INDEX, part_flavor
from unscrambler.core.ports.unit_port import PartRecord


class MatchProposal:
    def __init__(self, shape: Optional[UnitShape] = None) -> None:
        self._shape = shape or UnitShape.ordinary()
        self._slots: Dict[int, EquipmentSlot] = {}
        self._pool: Dict[int, EquipmentSlot] = {}
        self._original: Dict[PartRecord, int] = {}
        self._tentative: Dict[PartRecord, Optional[int]] = {}
        self._committed: Dict[int, List[PartRecord]] = {}
        self._matched_by: Dict[PartRecord, MatchRuleId] = {}
        self._troopers: Dict[PartRecord, int] = {}

    @property
    def shape(self) -> UnitShape:
        return self._shape

    def consider(self, part: object) -> bool:
        if part_flavor(part) is None:
            return False
        if part in self._tentative:
            return True
        self._original[part] = getattr(part, "equipment_index", UNSET_INDEX)
        self._tentative[part] = None
        return True

    def include_slot(self, index: int, slot: EquipmentSlot) -> None:
        self._slots[index] = slot
        self._pool[index] = slot

    def shares_slots(self, part: object) -> bool:
        return self._shape.is_squad and part_flavor(part) is PartFlavor.SQUAD_EQUIPMENT

    def is_available(self, index: int, part: PartRecord) -> bool:
        if index not in self._pool:
            return False
        claims = self._committed.get(index, [])
        if not self.shares_slots(part):
            return not claims
        if any(not self.shares_slots(other) for other in claims):
            return False
        return len(claims) < self._shape.squad_size

    def available_slot(self, index: int, part: PartRecord) -> Optional[EquipmentSlot]:
        if not self.is_available(index, part):
            return None
        return self._pool[index]

    def pool_items(self) -> List[Tuple[int, EquipmentSlot]]:
        """Snapshot of the unclaimed pool in slot insertion order."""
        return list(self._pool.items())

    def propose(self, part: PartRecord, index: int, rule_id: Optional[MatchRuleId] = None) -> None:
        slot = self._pool.get(index)
        if slot is None:
            return
        self.propose_with_slot(part, index, slot, rule_id)

    def propose_with_slot(
        self,
        part: PartRecord,
        index: int,
        slot: EquipmentSlot,
        rule_id: Optional[MatchRuleId] = None,
    ) -> None:
        # Callers check availability first; a vanished index is ignored.
        if index not in self._pool or part not in self._tentative:
            return
        if not self.shares_slots(part):
            del self._pool[index]
        self._tentative[part] = index
        self._committed.setdefault(index, []).append(part)
        if rule_id is not None:
            self._matched_by[part] = rule_id

    def reject(self, part: PartRecord) -> None:
        index = self._tentative.get(part)
        if index is None:
            return
        claims = self._committed.get(index, [])
        if part in claims:
            claims.remove(part)
        if not claims:
            self._committed.pop(index, None)
            if index in self._slots:
                self._pool[index] = self._slots[index]
        self._tentative[part] = None
        self._matched_by.pop(part, None)
        self._troopers.pop(part, None)

    def assign_trooper(self, part: PartRecord, trooper: int) -> None:
        self._troopers[part] = trooper

    def trooper_of(self, part: PartRecord) -> Optional[int]:
        return self._troopers.get(part)

    def parts(self) -> List[PartRecord]:
        return list(self._tentative.keys())

    def unmapped_parts(self) -> List[PartRecord]:
        return [part for part, index in self._tentative.items() if index is None]

    def slots(self) -> List[EquipmentSlot]:
        return list(self._slots.values())

    def claimants(self, index: int) -> List[PartRecord]:
        """Parts holding a claim on index, in part registration order."""
        claims = self._committed.get(index, [])
        return [part for part in self._tentative if part in claims]

    def claimed_indices(self) -> List[int]:
        return [index for index in self._slots if self._committed.get(index)]

    def is_mapped(self, part: PartRecord) -> bool:
        return self._tentative.get(part) is not None

    def mapped_index(self, part: PartRecord) -> int:
        index = self._tentative.get(part)
        return UNSET_INDEX if index is None else index

    def mapped_slot(self, part: PartRecord) -> Optional[EquipmentSlot]:
        index = self._tentative.get(part)
        if index is None:
            return None
        return self._slots.get(index)

    def matched_by(self, part: PartRecord) -> Optional[MatchRuleId]:
        return self._matched_by.get(part)

    def original_index(self, part: PartRecord) -> int:
        return self._original.get(part, UNSET_INDEX)

    def is_fully_resolved(self) -> bool:
        return all(index is not None for index in self._tentative.values())

    def apply(self) -> None:
        for part, index in self._tentative.items():
            part.equipment_index = UNSET_INDEX if index is None else index
            if self.shares_slots(part):
                part.trooper = self._troopers.get(part) if index is not None else None
