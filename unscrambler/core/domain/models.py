"""Domain models for equipment types, live slots and units.

Responsibilities:
  - Define immutable descriptors for equipment and ammunition types.
  - Define read-only EquipmentSlot and the UnitShape used to pick an unscrambler.

Invariants:
  - Type descriptors compare by value; equality is the basis of an exact match.
  - Slots are never mutated by the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .enums import UnitShapeKind


@dataclass(frozen=True)
class EquipmentType:
    internal_name: str
    name: str


@dataclass(frozen=True)
class AmmoType(EquipmentType):
    ammo_family: str
    rack_size: int
    munition: str = "Standard"

    def is_compatible_with(self, other: EquipmentType) -> bool:
        """Same ammo family and rack size; munition may differ."""
        return (
            isinstance(other, AmmoType)
            and other.ammo_family == self.ammo_family
            and other.rack_size == self.rack_size
        )


@dataclass(frozen=True)
class EquipmentSlot:
    index: int
    type: EquipmentType
    destroyed: bool = False
    location: Optional[str] = None

    @property
    def name(self) -> str:
        return self.type.name

    @property
    def is_ammo(self) -> bool:
        return isinstance(self.type, AmmoType)


@dataclass(frozen=True)
class UnitShape:
    kind: UnitShapeKind
    squad_size: int = 1

    @classmethod
    def ordinary(cls) -> UnitShape:
        return cls(kind=UnitShapeKind.ORDINARY, squad_size=1)

    @classmethod
    def squad(cls, squad_size: int) -> UnitShape:
        if squad_size < 1:
            raise ValueError("squad_size must be >= 1")
        return cls(kind=UnitShapeKind.SQUAD, squad_size=squad_size)

    @property
    def is_squad(self) -> bool:
        return self.kind == UnitShapeKind.SQUAD


@dataclass
class Unit:
    name: str
    shape: UnitShape
    slots: list[EquipmentSlot] = field(default_factory=list)
    parts: list = field(default_factory=list)
