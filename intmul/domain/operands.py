"""Value types shared by the validator, workers and dispatcher."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Tuple


@dataclass(frozen=True)
class OperandPair:
    """Two equal-length hex strings to be multiplied."""
    a: str
    b: str

    def __post_init__(self):
        if len(self.a) != len(self.b):
            raise ValueError(
                f"operands must have equal length: {len(self.a)} != {len(self.b)}"
            )

    def __len__(self) -> int:
        return len(self.a)

    def split(self) -> Tuple[Tuple[str, str], Tuple[str, str]]:
        """Return ((Ah, Al), (Bh, Bl)); length must be even."""
        half = len(self.a) // 2
        return (self.a[:half], self.a[half:]), (self.b[:half], self.b[half:])


class Slot(Enum):
    """Position of a half-product within one split.

    The value names which halves are multiplied; ``shift`` gives the
    number of hex places the partial product is moved left when the
    operands being split are ``n`` digits long.
    """
    HH = 'HH'
    HL = 'HL'
    LH = 'LH'
    LL = 'LL'

    def shift(self, n: int) -> int:
        if self is Slot.HH:
            return n
        if self is Slot.LL:
            return 0
        return n // 2


SLOT_ORDER = (Slot.HH, Slot.HL, Slot.LH, Slot.LL)


def split_tasks(pair: OperandPair) -> Dict[Slot, OperandPair]:
    """Build the four half-pairs of one split, keyed by slot."""
    (ah, al), (bh, bl) = pair.split()
    return {
        Slot.HH: OperandPair(ah, bh),
        Slot.HL: OperandPair(ah, bl),
        Slot.LH: OperandPair(al, bh),
        Slot.LL: OperandPair(al, bl),
    }


@dataclass(frozen=True)
class PartialProducts:
    """The four results of one split, tagged by slot."""
    hh: str
    hl: str
    lh: str
    ll: str

    @classmethod
    def from_slots(cls, results: Dict[Slot, str]) -> 'PartialProducts':
        missing = [s.value for s in SLOT_ORDER if s not in results]
        if missing:
            raise ValueError(f"missing partial products: {', '.join(missing)}")
        return cls(
            hh=results[Slot.HH],
            hl=results[Slot.HL],
            lh=results[Slot.LH],
            ll=results[Slot.LL],
        )

    def __getitem__(self, slot: Slot) -> str:
        return getattr(self, slot.value.lower())

    def items(self) -> Iterator[Tuple[Slot, str]]:
        for slot in SLOT_ORDER:
            yield slot, self[slot]
