"""Result payload for a single unscramble pass.

Responsibilities:
  - Capture the success flag, failure message and itemized diagnostics.

Inputs/Outputs:
  - Inputs: produced by EquipmentUnscrambler.unscramble.
  - Outputs: dataclasses consumed by CLIs and reporting layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..domain.enums import MatchRuleId, PartFlavor


@dataclass(frozen=True)
class PartDiagnostic:
    name: str
    location: str
    flavor: PartFlavor
    original_index: int
    resolved_index: int
    mapped: bool
    rule: Optional[MatchRuleId] = None
    trooper: Optional[int] = None
    missing: bool = False

    @property
    def shown_index(self) -> int:
        return self.resolved_index if self.mapped else self.original_index


@dataclass(frozen=True)
class SlotDiagnostic:
    index: int
    name: str
    type_name: str
    destroyed: bool
    claimed: bool
    claim_count: int = 0


@dataclass(frozen=True)
class UnscrambleReport:
    unit_name: str
    parts: list[PartDiagnostic] = field(default_factory=list)
    slots: list[SlotDiagnostic] = field(default_factory=list)

    @property
    def unmapped_parts(self) -> list[PartDiagnostic]:
        return [p for p in self.parts if not p.mapped]


@dataclass
class UnscrambleResult:
    unit_name: str
    succeeded: bool
    message: Optional[str]
    report: UnscrambleReport
