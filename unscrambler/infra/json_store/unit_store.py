"""JSON loadout files for units and their part records.

Responsibilities:
  - Parse a unit loadout (shape, equipment types, live slots, part records).
  - Serialize a unit back so applied equipment indices persist.
Must not:
  - Run any matching; storage only.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from unscrambler.core.domain.enums import PartFlavor, UnitShapeKind
from unscrambler.core.domain.models import AmmoType, EquipmentSlot, EquipmentType, Unit, UnitShape
from unscrambler.core.domain.parts import (
    UNSET_INDEX,
    AmmoBin,
    EquipmentPart,
    Part,
    SquadEquipmentPart,
    part_flavor,
)


def _require(payload: dict[str, Any], key: str, expected_type: type, where: str) -> Any:
    if key not in payload:
        raise ValueError(f"Missing required field '{key}' in {where}")
    value = payload[key]
    if expected_type is int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Field '{key}' in {where} must be int")
        return value
    if not isinstance(value, expected_type):
        raise ValueError(f"Field '{key}' in {where} must be {expected_type.__name__}")
    return value


def _optional(payload: dict[str, Any], key: str, expected_type: type, where: str, default: Any) -> Any:
    if payload.get(key) is None:
        return default
    return _require(payload, key, expected_type, where)


def _parse_shape(raw: Any) -> UnitShape:
    if raw is None or raw == UnitShapeKind.ORDINARY.value:
        return UnitShape.ordinary()
    if raw == UnitShapeKind.SQUAD.value:
        raise ValueError("Squad shape requires squad_size")
    if not isinstance(raw, dict):
        raise ValueError("Field 'shape' must be a string or object")
    kind = _require(raw, "kind", str, "shape")
    if kind == UnitShapeKind.ORDINARY.value:
        return UnitShape.ordinary()
    if kind == UnitShapeKind.SQUAD.value:
        return UnitShape.squad(_require(raw, "squad_size", int, "shape"))
    raise ValueError(f"Unknown unit shape kind: {kind}")


def _parse_types(raw: Any) -> dict[str, EquipmentType]:
    if not isinstance(raw, dict):
        raise ValueError("Field 'equipment_types' must be a JSON object")
    types: dict[str, EquipmentType] = {}
    for internal_name, entry in raw.items():
        where = f"equipment type '{internal_name}'"
        if not isinstance(entry, dict):
            raise ValueError(f"{where} must be a JSON object")
        name = _optional(entry, "name", str, where, internal_name)
        ammo = entry.get("ammo")
        if ammo is None:
            types[internal_name] = EquipmentType(internal_name=internal_name, name=name)
            continue
        if not isinstance(ammo, dict):
            raise ValueError(f"Field 'ammo' in {where} must be a JSON object")
        types[internal_name] = AmmoType(
            internal_name=internal_name,
            name=name,
            ammo_family=_require(ammo, "family", str, where),
            rack_size=_require(ammo, "rack_size", int, where),
            munition=_optional(ammo, "munition", str, where, "Standard"),
        )
    return types


def _lookup_type(types: dict[str, EquipmentType], payload: dict[str, Any], where: str) -> EquipmentType:
    type_name = _require(payload, "type", str, where)
    if type_name not in types:
        raise ValueError(f"Unknown equipment type '{type_name}' in {where}")
    return types[type_name]


def _parse_slot(raw: Any, types: dict[str, EquipmentType], position: int) -> EquipmentSlot:
    where = f"slot #{position}"
    if not isinstance(raw, dict):
        raise ValueError(f"{where} must be a JSON object")
    return EquipmentSlot(
        index=_require(raw, "index", int, where),
        type=_lookup_type(types, raw, where),
        destroyed=_optional(raw, "destroyed", bool, where, False),
        location=_optional(raw, "location", str, where, None),
    )


def _parse_part(raw: Any, types: dict[str, EquipmentType], position: int) -> Part:
    where = f"part #{position}"
    if not isinstance(raw, dict):
        raise ValueError(f"{where} must be a JSON object")
    name = _require(raw, "name", str, where)
    location = _optional(raw, "location", str, where, "")
    flavor_value = raw.get("flavor")
    if flavor_value is None or flavor_value == "other":
        return Part(name=name, location=location)
    try:
        flavor = PartFlavor(flavor_value)
    except ValueError:
        raise ValueError(f"Unknown part flavor '{flavor_value}' in {where}") from None

    equipment_type = _lookup_type(types, raw, where)
    equipment_index = _optional(raw, "equipment_index", int, where, UNSET_INDEX)
    missing = _optional(raw, "missing", bool, where, False)
    if flavor == PartFlavor.AMMO_BIN:
        if not isinstance(equipment_type, AmmoType):
            raise ValueError(f"Ammo bin {where} must reference an ammo type")
        return AmmoBin(
            name=name,
            location=location,
            type=equipment_type,
            equipment_index=equipment_index,
            missing=missing,
        )
    if flavor == PartFlavor.SQUAD_EQUIPMENT:
        return SquadEquipmentPart(
            name=name,
            location=location,
            type=equipment_type,
            equipment_index=equipment_index,
            missing=missing,
            trooper=_optional(raw, "trooper", int, where, None),
        )
    return EquipmentPart(
        name=name,
        location=location,
        type=equipment_type,
        equipment_index=equipment_index,
        missing=missing,
    )


def unit_from_payload(payload: Any) -> Unit:
    if not isinstance(payload, dict):
        raise ValueError("Unit loadout must be a JSON object")
    types = _parse_types(payload.get("equipment_types", {}))
    slots_raw = _require(payload, "slots", list, "unit")
    parts_raw = _require(payload, "parts", list, "unit")
    slots = [_parse_slot(raw, types, i) for i, raw in enumerate(slots_raw)]
    indices = [slot.index for slot in slots]
    if len(set(indices)) != len(indices):
        raise ValueError("Duplicate slot index in unit loadout")
    return Unit(
        name=_require(payload, "name", str, "unit"),
        shape=_parse_shape(payload.get("shape")),
        slots=slots,
        parts=[_parse_part(raw, types, i) for i, raw in enumerate(parts_raw)],
    )


def load_unit(path: str | Path) -> Unit:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return unit_from_payload(payload)


def _type_payload(equipment_type: EquipmentType) -> dict[str, Any]:
    entry: dict[str, Any] = {"name": equipment_type.name}
    if isinstance(equipment_type, AmmoType):
        entry["ammo"] = {
            "family": equipment_type.ammo_family,
            "rack_size": equipment_type.rack_size,
            "munition": equipment_type.munition,
        }
    return entry


def _part_payload(part: Part) -> dict[str, Any]:
    flavor = part_flavor(part)
    entry: dict[str, Any] = {
        "flavor": flavor.value if flavor else "other",
        "name": part.name,
        "location": part.location,
    }
    if flavor is None:
        return entry
    entry["type"] = part.type.internal_name
    entry["equipment_index"] = part.equipment_index
    if part.missing:
        entry["missing"] = True
    if flavor == PartFlavor.SQUAD_EQUIPMENT:
        entry["trooper"] = part.trooper
    return entry


def unit_to_payload(unit: Unit) -> dict[str, Any]:
    types: dict[str, Any] = {}
    for slot in unit.slots:
        types.setdefault(slot.type.internal_name, _type_payload(slot.type))
    for part in unit.parts:
        if part_flavor(part) is not None:
            types.setdefault(part.type.internal_name, _type_payload(part.type))

    if unit.shape.is_squad:
        shape: Any = {"kind": UnitShapeKind.SQUAD.value, "squad_size": unit.shape.squad_size}
    else:
        shape = UnitShapeKind.ORDINARY.value

    slots = []
    for slot in unit.slots:
        entry: dict[str, Any] = {"index": slot.index, "type": slot.type.internal_name}
        if slot.destroyed:
            entry["destroyed"] = True
        if slot.location is not None:
            entry["location"] = slot.location
        slots.append(entry)

    return {
        "name": unit.name,
        "shape": shape,
        "equipment_types": types,
        "slots": slots,
        "parts": [_part_payload(part) for part in unit.parts],
    }


def save_unit(unit: Unit, path: str | Path) -> None:
    text = json.dumps(unit_to_payload(unit), indent=2, sort_keys=False)
    Path(path).write_text(text + "\n", encoding="utf-8")
