"""Port definitions for the unit and part records the engine reconciles.

Responsibilities:
  - Define the contracts external units, slots and part records must satisfy.
Must not:
  - Implement logic; interfaces only.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from unscrambler.core.domain.enums import PartFlavor
from unscrambler.core.domain.models import EquipmentType, UnitShape


class SlotView(Protocol):
    index: int
    type: EquipmentType
    destroyed: bool

    @property
    def name(self) -> str:
        ...

    @property
    def is_ammo(self) -> bool:
        ...


class PartRecord(Protocol):
    name: str
    location: str
    type: EquipmentType
    equipment_index: int
    flavor: Optional[PartFlavor]


class AmmoBinRecord(PartRecord, Protocol):
    def can_change_munition(self, ammo_type: EquipmentType) -> bool:
        ...


class SquadPartRecord(PartRecord, Protocol):
    trooper: Optional[int]


class UnitView(Protocol):
    name: str
    shape: UnitShape

    @property
    def slots(self) -> Sequence[SlotView]:
        ...

    @property
    def parts(self) -> Sequence[object]:
        ...
