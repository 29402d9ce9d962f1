"""Slot definitions, independent of persistence.

A slot is one musician position on a gig: the instruments it can be
filled on (an applicant claims it on one of them), whether it is
restricted to invited musicians, and what it pays.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Self

from core.constants import INSTRUMENTS
from core.errors import InvalidSlot


@dataclass(frozen=True)
class SlotDefinition:
    """Validated description of one slot."""

    instruments: tuple[str, ...]
    invite_only: bool = False
    payment: Decimal | None = None

    def __post_init__(self) -> None:
        if not self.instruments:
            raise InvalidSlot("A slot needs at least one instrument")
        unknown = [i for i in self.instruments if i not in INSTRUMENTS]
        if unknown:
            raise InvalidSlot(f"Unknown instrument: {', '.join(unknown)}")
        if len(set(self.instruments)) != len(self.instruments):
            raise InvalidSlot("A slot cannot list the same instrument twice")
        if self.payment is not None and self.payment < 0:
            raise InvalidSlot("Payment cannot be negative")

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        payment = data.get("payment")
        if payment in (None, ""):
            payment = None
        else:
            try:
                payment = Decimal(str(payment))
            except InvalidOperation:
                raise InvalidSlot("Payment must be a number")

        return cls(
            instruments=tuple(data.get("instruments") or ()),
            invite_only=bool(data.get("invite_only", False)),
            payment=payment,
        )

    def requires(self, instrument: str) -> bool:
        return instrument in self.instruments


def parse_slots(items: Iterable[dict]) -> list[SlotDefinition]:
    """Parse and validate an ordered list of slot payloads."""
    definitions = [SlotDefinition.from_dict(item) for item in items]
    if not definitions:
        raise InvalidSlot("A gig needs at least one slot")
    return definitions


def is_gig_filled(slot_ids: Iterable[int], accepted_slot_ids: Iterable[int]) -> bool:
    """A gig is filled iff every slot has an accepted application."""
    slot_ids = set(slot_ids)
    return bool(slot_ids) and slot_ids <= set(accepted_slot_ids)
