from __future__ import annotations

from typing import Callable, Dict, Optional

from ..domain.enums import UnitShapeKind
from ..domain.models import UnitShape
from ..matching.rules import MatchOrder, RuleSet
from ..ports.unit_port import UnitView
from .result import UnscrambleResult
from .unscrambler import EquipmentUnscrambler

UnscramblerBuilder = Callable[..., EquipmentUnscrambler]


class UnscramblerFactory:
    def __init__(self) -> None:
        self._registry: Dict[UnitShapeKind, UnscramblerBuilder] = {}

    def register(self, kind: UnitShapeKind, builder: UnscramblerBuilder) -> None:
        self._registry[kind] = builder

    def create(
        self,
        unit: UnitView,
        ruleset: Optional[RuleSet] = None,
        match_order: MatchOrder = MatchOrder.BY_RULE,
    ) -> EquipmentUnscrambler:
        kind = unit.shape.kind
        if kind not in self._registry:
            raise ValueError(f"Unknown unit shape: {kind}")
        return self._registry[kind](unit, ruleset=ruleset, match_order=match_order)


def build_default_unscrambler(
    unit: UnitView,
    ruleset: Optional[RuleSet] = None,
    match_order: MatchOrder = MatchOrder.BY_RULE,
) -> EquipmentUnscrambler:
    return EquipmentUnscrambler(unit, UnitShape.ordinary(), ruleset, match_order)


def build_squad_unscrambler(
    unit: UnitView,
    ruleset: Optional[RuleSet] = None,
    match_order: MatchOrder = MatchOrder.BY_RULE,
) -> EquipmentUnscrambler:
    return EquipmentUnscrambler(unit, UnitShape.squad(unit.shape.squad_size), ruleset, match_order)


default_unscrambler_factory = UnscramblerFactory()
default_unscrambler_factory.register(UnitShapeKind.ORDINARY, build_default_unscrambler)
default_unscrambler_factory.register(UnitShapeKind.SQUAD, build_squad_unscrambler)


def create_unscrambler(
    unit: UnitView,
    ruleset: Optional[RuleSet] = None,
    match_order: MatchOrder = MatchOrder.BY_RULE,
) -> EquipmentUnscrambler:
    return default_unscrambler_factory.create(unit, ruleset=ruleset, match_order=match_order)


def unscramble(unit: UnitView) -> UnscrambleResult:
    return create_unscrambler(unit).unscramble()


__all__ = [
    "UnscramblerFactory",
    "build_default_unscrambler",
    "build_squad_unscrambler",
    "create_unscrambler",
    "default_unscrambler_factory",
    "unscramble",
]
