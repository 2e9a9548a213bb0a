from __future__ import annotations

from typing import List

from ..domain.enums import rule_message
from ..domain.parts import part_flavor
from ..matching.proposal import MatchProposal
from .result import PartDiagnostic, SlotDiagnostic, UnscrambleReport


def build_report(unit_name: str, proposal: MatchProposal) -> UnscrambleReport:
    parts: List[PartDiagnostic] = []
    for part in proposal.parts():
        parts.append(
            PartDiagnostic(
                name=part.name,
                location=part.location,
                flavor=part_flavor(part),
                original_index=proposal.original_index(part),
                resolved_index=proposal.mapped_index(part),
                mapped=proposal.is_mapped(part),
                rule=proposal.matched_by(part),
                trooper=proposal.trooper_of(part),
                missing=bool(getattr(part, "missing", False)),
            )
        )

    slots: List[SlotDiagnostic] = []
    for slot in proposal.slots():
        claims = len(proposal.claimants(slot.index))
        slots.append(
            SlotDiagnostic(
                index=slot.index,
                name=slot.name,
                type_name=slot.type.internal_name,
                destroyed=slot.destroyed,
                claimed=claims > 0,
                claim_count=claims,
            )
        )
    return UnscrambleReport(unit_name=unit_name, parts=parts, slots=slots)


def _part_line(diag: PartDiagnostic) -> str:
    status = "OK" if diag.mapped else "UNMAPPED"
    label = f"{diag.name} ({diag.location})"
    if diag.missing:
        label += " [missing]"
    line = f" - [{status}] {label} equipment {diag.shown_index}"
    if diag.trooper is not None:
        line += f" trooper {diag.trooper}"
    if diag.mapped and diag.rule is not None:
        line += f" via {diag.rule.value}: {rule_message(diag.rule)}"
    elif diag.mapped:
        line += " via CUSTOM"
    else:
        line += f" (was {diag.original_index}): {rule_message(None)}"
    return line


def _slot_line(diag: SlotDiagnostic) -> str:
    flags = ["claimed" if diag.claimed else "unclaimed"]
    if diag.claim_count > 1:
        flags.append(f"{diag.claim_count} claims")
    if diag.destroyed:
        flags.append("destroyed")
    return f" - {diag.index}: {diag.name} [{diag.type_name}] {', '.join(flags)}"


def format_report(report: UnscrambleReport) -> str:
    if report.unmapped_parts:
        header = f"Unable to map parts to equipment for {report.unit_name}"
    else:
        header = f"Mapped all parts to equipment for {report.unit_name}"
    lines = [header, "Parts:"]
    lines.extend(_part_line(p) for p in report.parts)
    lines.append("Equipment:")
    lines.extend(_slot_line(s) for s in report.slots)
    return "\n".join(lines)
