"""Trooper seat assignment for squad equipment sharing one slot index.

Runs after the matching rules on squad-shaped proposals. For each claimed index:
parts already carrying a valid, unclaimed trooper number keep that seat; the rest
take the first free seat in part order; parts left without a seat are withdrawn
from the proposal and stay unmapped. Ammo bins are unit-level and never seated.
"""

from __future__ import annotations

from typing import List, Optional

from unscrambler.core.domain.enums import PartFlavor
from unscrambler.core.domain.parts import part_flavor
from unscrambler.core.ports.unit_port import PartRecord, SquadPartRecord
from .proposal import MatchProposal


def _declared_seat(part: SquadPartRecord, squad_size: int) -> Optional[int]:
    trooper = getattr(part, "trooper", None)
    if isinstance(trooper, int) and not isinstance(trooper, bool) and 1 <= trooper <= squad_size:
        return trooper
    return None


def assign_troopers(proposal: MatchProposal) -> List[PartRecord]:
    """Seat squad parts per index; returns the parts that could not be seated."""
    squad_size = proposal.shape.squad_size
    overflow: List[PartRecord] = []
    for index in proposal.claimed_indices():
        claimants = [
            part
            for part in proposal.claimants(index)
            if part_flavor(part) is PartFlavor.SQUAD_EQUIPMENT
        ]
        if not claimants:
            continue

        seats: List[Optional[PartRecord]] = [None] * squad_size
        pending: List[PartRecord] = []
        for part in claimants:
            seat = _declared_seat(part, squad_size)
            if seat is not None and seats[seat - 1] is None:
                seats[seat - 1] = part
            else:
                pending.append(part)

        for part in pending:
            if None not in seats:
                overflow.append(part)
                continue
            seats[seats.index(None)] = part

        for number, part in enumerate(seats, start=1):
            if part is not None:
                proposal.assign_trooper(part, number)

    for part in overflow:
        proposal.reject(part)
    return overflow
