"""Domain enums for part flavors, unit shapes and matching rules.

Responsibilities:
  - Define PartFlavor and UnitShapeKind identifiers used to dispatch matching.
  - Provide stable rule identifiers and their audit metadata.

Invariants:
  - Enum values must remain stable; they appear in reports and loadout files.
  - MatchRuleId metadata must be complete and deterministic.
"""

from __future__ import annotations

from enum import Enum


class PartFlavor(Enum):
    EQUIPMENT = "equipment"
    AMMO_BIN = "ammo_bin"
    SQUAD_EQUIPMENT = "squad_equipment"


class UnitShapeKind(Enum):
    ORDINARY = "ordinary"
    SQUAD = "squad"


# Value is the code shown in reports; order of declaration is the default priority.
class MatchRuleId(Enum):
    EXACT_MATCH = "EXACT_MATCH"
    APPROXIMATE_MATCH = "APPROXIMATE_MATCH"
    MOVED_EQUIPMENT = "MOVED_EQUIPMENT"
    MOVED_AMMO_BIN = "MOVED_AMMO_BIN"


RULE_METADATA: dict[MatchRuleId, dict[str, object]] = {
    MatchRuleId.EXACT_MATCH: {
        "message": "Stored index still points at a slot of the same type.",
    },
    MatchRuleId.APPROXIMATE_MATCH: {
        "message": "Stored index points at ammo the bin can switch its munitions to.",
    },
    MatchRuleId.MOVED_EQUIPMENT: {
        "message": "Equipment of the same type found at another slot.",
    },
    MatchRuleId.MOVED_AMMO_BIN: {
        "message": "Compatible ammo found at another slot.",
    },
}


def rule_message(rule_id: MatchRuleId | None) -> str:
    if rule_id is None:
        return "No rule matched."
    return str(RULE_METADATA[rule_id]["message"])


_missing = [r for r in MatchRuleId if r not in RULE_METADATA]
if _missing:
    raise RuntimeError(f"Missing RULE_METADATA for: {[m.value for m in _missing]}")

_extra = [k for k in RULE_METADATA.keys() if k not in set(MatchRuleId)]
if _extra:
    raise RuntimeError(f"Extra RULE_METADATA keys: {[e.value for e in _extra]}")
