from __future__ import annotations

import pytest

from unscrambler.core.domain.enums import MatchRuleId, PartFlavor
from unscrambler.core.domain.models import AmmoType, EquipmentSlot, EquipmentType, Unit, UnitShape
from unscrambler.core.domain.parts import AmmoBin, EquipmentPart, Part, SquadEquipmentPart
from unscrambler.core.engine.factory import unscramble
from unscrambler.core.engine.report import format_report
from unscrambler.core.engine.unscrambler import EquipmentUnscrambler, set_unscrambler_debug
from unscrambler.core.matching.rules import MatchOrder

LASER = EquipmentType("ISMediumLaser", "Medium Laser")
PPC = EquipmentType("ISPPC", "PPC")
LRM10 = AmmoType("ISLRM10 Ammo", "LRM 10 Ammo", ammo_family="LRM", rack_size=10)
LRM10_INFERNO = AmmoType(
    "ISLRM10 Inferno Ammo", "LRM 10 Inferno Ammo", ammo_family="LRM", rack_size=10, munition="Inferno"
)
SRM6 = AmmoType("ISSRM6 Ammo", "SRM 6 Ammo", ammo_family="SRM", rack_size=6)
CLAW = EquipmentType("BABattleClaw", "Battle Claw")


def mk_unit(slots: list[EquipmentSlot], parts: list, shape: UnitShape | None = None) -> Unit:
    return Unit(name="Atlas AS7-D", shape=shape or UnitShape.ordinary(), slots=slots, parts=parts)


def mk_laser(index: int, location: str = "RA") -> EquipmentPart:
    return EquipmentPart(name="Medium Laser", location=location, type=LASER, equipment_index=index)


def test_unchanged_laser_keeps_its_index():
    laser = mk_laser(3)
    result = unscramble(mk_unit([EquipmentSlot(3, LASER)], [laser]))
    assert result.succeeded is True
    assert result.message is None
    assert laser.equipment_index == 3
    assert result.report.parts[0].rule == MatchRuleId.EXACT_MATCH


def test_laser_moved_to_another_slot():
    laser = mk_laser(3)
    unit = mk_unit([EquipmentSlot(3, PPC), EquipmentSlot(7, LASER)], [laser])
    result = unscramble(unit)
    assert result.succeeded is True
    assert laser.equipment_index == 7
    assert result.report.parts[0].rule == MatchRuleId.MOVED_EQUIPMENT


def test_ammo_bin_moves_to_compatible_ammo():
    bin_ = AmmoBin(name="LRM 10 Ammo", location="LT", type=LRM10, equipment_index=2)
    unit = mk_unit([EquipmentSlot(2, SRM6), EquipmentSlot(5, LRM10_INFERNO)], [bin_])
    result = unscramble(unit)
    assert result.succeeded is True
    assert bin_.equipment_index == 5
    assert result.report.parts[0].rule == MatchRuleId.MOVED_AMMO_BIN
    # Munition choice belongs to the campaign, not to the unscrambler.
    assert bin_.type == LRM10


def test_ammo_bin_with_new_munition_in_same_slot():
    bin_ = AmmoBin(name="LRM 10 Ammo", location="LT", type=LRM10, equipment_index=2)
    result = unscramble(mk_unit([EquipmentSlot(2, LRM10_INFERNO)], [bin_]))
    assert result.succeeded is True
    assert bin_.equipment_index == 2
    assert result.report.parts[0].rule == MatchRuleId.APPROXIMATE_MATCH


def test_report_lines_explain_which_rule_mapped_each_part():
    laser = mk_laser(3)
    ppc = EquipmentPart(name="PPC", location="LA", type=PPC, equipment_index=1)
    result = unscramble(mk_unit([EquipmentSlot(3, LASER), EquipmentSlot(5, PPC)], [laser, ppc]))
    text = format_report(result.report)
    assert (
        "[OK] Medium Laser (RA) equipment 3 via EXACT_MATCH: "
        "Stored index still points at a slot of the same type." in text
    )
    assert (
        "[OK] PPC (LA) equipment 5 via MOVED_EQUIPMENT: "
        "Equipment of the same type found at another slot." in text
    )


def test_part_with_vanished_type_is_reported_not_raised():
    ppc = EquipmentPart(name="PPC", location="LA", type=PPC, equipment_index=4)
    laser = mk_laser(3)
    unit = mk_unit([EquipmentSlot(3, LASER)], [laser, ppc])

    result = unscramble(unit)

    assert result.succeeded is False
    assert ppc.equipment_index == -1
    assert laser.equipment_index == 3
    [gap] = result.report.unmapped_parts
    assert gap.name == "PPC"
    assert gap.location == "LA"
    assert gap.original_index == 4
    assert gap.shown_index == 4
    assert "Unable to map parts to equipment for Atlas AS7-D" in result.message
    assert "[UNMAPPED] PPC (LA) equipment 4" in result.message
    assert " - 3: Medium Laser [ISMediumLaser] claimed" in result.message


def test_non_equipment_parts_are_ignored():
    armor = Part(name="Armor", location="CT")
    laser = mk_laser(3)
    result = unscramble(mk_unit([EquipmentSlot(3, LASER)], [armor, laser]))
    assert result.succeeded is True
    assert [p.name for p in result.report.parts] == ["Medium Laser"]


def test_missing_placeholder_is_matched_and_flagged():
    missing = EquipmentPart(name="Medium Laser", location="RA", type=LASER, equipment_index=9, missing=True)
    result = unscramble(mk_unit([EquipmentSlot(2, LASER)], [missing]))
    assert result.succeeded is True
    assert missing.equipment_index == 2
    assert result.report.parts[0].missing is True


def test_rule_priority_exact_wins_over_moved_across_parts():
    drifted = mk_laser(9, location="LA")
    settled = mk_laser(3, location="RA")
    unit = mk_unit([EquipmentSlot(3, LASER), EquipmentSlot(7, LASER)], [drifted, settled])

    result = unscramble(unit)

    assert result.succeeded is True
    assert settled.equipment_index == 3
    assert drifted.equipment_index == 7


def test_by_part_order_runs_whole_chain_per_part():
    drifted = mk_laser(9, location="LA")
    settled = mk_laser(3, location="RA")
    unit = mk_unit([EquipmentSlot(3, LASER), EquipmentSlot(7, LASER)], [drifted, settled])

    result = EquipmentUnscrambler(unit, UnitShape.ordinary(), match_order=MatchOrder.BY_PART).unscramble()

    assert result.succeeded is True
    assert drifted.equipment_index == 3
    assert settled.equipment_index == 7


def test_slot_uniqueness_with_more_parts_than_slots():
    lasers = [mk_laser(-1, location=f"L{i}") for i in range(4)]
    slots = [EquipmentSlot(1, LASER), EquipmentSlot(2, LASER), EquipmentSlot(5, LASER, destroyed=True)]

    result = unscramble(mk_unit(slots, lasers))

    mapped = [p.equipment_index for p in lasers if p.equipment_index != -1]
    assert mapped == [1, 2]
    assert len(set(mapped)) == len(mapped)
    assert result.succeeded is False
    assert len(result.report.unmapped_parts) == 2


def test_exact_index_on_destroyed_slot_is_kept():
    laser = mk_laser(4)
    result = unscramble(mk_unit([EquipmentSlot(4, LASER, destroyed=True)], [laser]))
    assert result.succeeded is True
    assert laser.equipment_index == 4


def test_only_destroyed_candidates_leave_part_unmapped():
    laser = mk_laser(1)
    slots = [EquipmentSlot(1, PPC), EquipmentSlot(4, LASER, destroyed=True)]
    result = unscramble(mk_unit(slots, [laser]))
    assert result.succeeded is False
    assert laser.equipment_index == -1
    destroyed = [s for s in result.report.slots if s.index == 4][0]
    assert destroyed.destroyed is True
    assert destroyed.claimed is False


def test_second_pass_is_idempotent():
    laser = mk_laser(3)
    ppc = EquipmentPart(name="PPC", location="LA", type=PPC, equipment_index=3)
    bin_ = AmmoBin(name="LRM 10 Ammo", location="LT", type=LRM10, equipment_index=8)
    slots = [EquipmentSlot(3, PPC), EquipmentSlot(6, LASER), EquipmentSlot(8, LRM10_INFERNO)]
    unit = mk_unit(slots, [laser, ppc, bin_])

    first = unscramble(unit)
    first_indices = [p.equipment_index for p in unit.parts]
    second = unscramble(unit)

    assert first.succeeded is True
    assert second.succeeded is True
    assert first_indices == [6, 3, 8]
    assert [p.equipment_index for p in unit.parts] == first_indices
    assert all(p.rule in (MatchRuleId.EXACT_MATCH, MatchRuleId.APPROXIMATE_MATCH) for p in second.report.parts)


def test_squad_shares_one_slot_between_troopers():
    parts = [SquadEquipmentPart(name="Battle Claw", location="Squad", type=CLAW) for _ in range(4)]
    unit = mk_unit([EquipmentSlot(0, CLAW)], parts, UnitShape.squad(4))

    result = unscramble(unit)

    assert result.succeeded is True
    assert [p.equipment_index for p in parts] == [0, 0, 0, 0]
    assert [p.trooper for p in parts] == [1, 2, 3, 4]
    claw = result.report.slots[0]
    assert claw.claimed is True
    assert claw.claim_count == 4


def test_squad_excess_parts_stay_unmapped():
    parts = [SquadEquipmentPart(name="Battle Claw", location="Squad", type=CLAW) for _ in range(6)]
    unit = mk_unit([EquipmentSlot(0, CLAW)], parts, UnitShape.squad(4))

    result = unscramble(unit)

    assert result.succeeded is False
    assert [p.trooper for p in parts] == [1, 2, 3, 4, None, None]
    assert [p.equipment_index for p in parts] == [0, 0, 0, 0, -1, -1]
    assert len(result.report.unmapped_parts) == 2


def test_squad_bounded_sharing_and_distinct_troopers():
    parts = [
        SquadEquipmentPart(name="Battle Claw", location="Squad", type=CLAW, equipment_index=0, trooper=3),
        SquadEquipmentPart(name="Battle Claw", location="Squad", type=CLAW, equipment_index=0, trooper=3),
        SquadEquipmentPart(name="Battle Claw", location="Squad", type=CLAW, equipment_index=2),
        SquadEquipmentPart(name="Battle Claw", location="Squad", type=CLAW, equipment_index=2),
        SquadEquipmentPart(name="Battle Claw", location="Squad", type=CLAW, equipment_index=0),
    ]
    bin_ = AmmoBin(name="LRM 10 Ammo", location="Squad", type=LRM10, equipment_index=1)
    slots = [EquipmentSlot(0, CLAW), EquipmentSlot(1, LRM10), EquipmentSlot(2, CLAW)]
    unit = mk_unit(slots, parts + [bin_], UnitShape.squad(3))

    result = unscramble(unit)

    assert result.succeeded is True
    assert bin_.equipment_index == 1
    for index in (0, 2):
        on_slot = [p for p in parts if p.equipment_index == index]
        troopers = [p.trooper for p in on_slot]
        assert len(on_slot) <= 3
        assert len(set(troopers)) == len(troopers)
        assert all(1 <= t <= 3 for t in troopers)
    assert parts[0].trooper == 3
    assert [p.trooper for p in result.report.parts if p.flavor == PartFlavor.AMMO_BIN] == [None]


def test_squad_pass_is_idempotent():
    parts = [SquadEquipmentPart(name="Battle Claw", location="Squad", type=CLAW) for _ in range(3)]
    unit = mk_unit([EquipmentSlot(0, CLAW)], parts, UnitShape.squad(3))
    unscramble(unit)
    before = [(p.equipment_index, p.trooper) for p in parts]
    result = unscramble(unit)
    assert result.succeeded is True
    assert [(p.equipment_index, p.trooper) for p in parts] == before


def test_shape_mismatch_fails_at_construction():
    squad = mk_unit([EquipmentSlot(0, CLAW)], [], UnitShape.squad(4))
    ordinary = mk_unit([EquipmentSlot(0, LASER)], [])
    with pytest.raises(ValueError):
        EquipmentUnscrambler(squad, UnitShape.ordinary())
    with pytest.raises(ValueError):
        EquipmentUnscrambler(ordinary, UnitShape.squad(4))


def test_squad_size_mismatch_fails_before_touching_parts():
    parts = [
        SquadEquipmentPart(name="Battle Claw", location="Squad", type=CLAW, equipment_index=0, trooper=t)
        for t in range(1, 5)
    ]
    unit = mk_unit([EquipmentSlot(0, CLAW)], parts, UnitShape.squad(4))
    with pytest.raises(ValueError):
        EquipmentUnscrambler(unit, UnitShape.squad(2))
    assert [(p.equipment_index, p.trooper) for p in parts] == [(0, 1), (0, 2), (0, 3), (0, 4)]


def test_debug_hook_receives_match_lines():
    lines: list[str] = []
    set_unscrambler_debug(lines.append)
    try:
        unscramble(mk_unit([EquipmentSlot(3, LASER)], [mk_laser(3)]))
    finally:
        set_unscrambler_debug(None)
    assert any(line.startswith("UNSCRAMBLE_MATCH") and "rule=EXACT_MATCH" in line for line in lines)
    assert lines[-1].startswith("UNSCRAMBLE_DONE")
    assert "succeeded=True" in lines[-1]
