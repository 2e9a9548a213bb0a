"""In-memory campaign part records.

Responsibilities:
  - Provide the three part flavors the unscrambler reconciles plus a plain Part
    for everything it ignores.
  - Tag each record class with its PartFlavor so matching dispatches on the flavor,
    not on the concrete class.

Invariants:
  - Records compare by identity; two parts with equal fields are still distinct.
  - equipment_index == UNSET_INDEX means the part is not linked to a slot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

from .enums import PartFlavor
from .models import AmmoType, EquipmentType

UNSET_INDEX = -1


@dataclass(eq=False)
class Part:
    name: str
    location: str

    flavor: ClassVar[Optional[PartFlavor]] = None


@dataclass(eq=False)
class EquipmentPart(Part):
    type: EquipmentType
    equipment_index: int = UNSET_INDEX
    missing: bool = False

    flavor: ClassVar[Optional[PartFlavor]] = PartFlavor.EQUIPMENT


@dataclass(eq=False)
class AmmoBin(EquipmentPart):
    type: AmmoType

    flavor: ClassVar[Optional[PartFlavor]] = PartFlavor.AMMO_BIN

    def can_change_munition(self, ammo_type: EquipmentType) -> bool:
        return self.type.is_compatible_with(ammo_type)


@dataclass(eq=False)
class SquadEquipmentPart(EquipmentPart):
    trooper: Optional[int] = None

    flavor: ClassVar[Optional[PartFlavor]] = PartFlavor.SQUAD_EQUIPMENT


def part_flavor(part: object) -> Optional[PartFlavor]:
    flavor = getattr(part, "flavor", None)
    return flavor if isinstance(flavor, PartFlavor) else None
