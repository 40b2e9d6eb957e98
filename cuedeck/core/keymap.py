"""Key-to-Address Mapper.

Maps a physical key symbol plus the active slot to a flat cue index.
The layout is static for the lifetime of the process.

    index = active_slot * keys_per_slot + local_offset

Layouts
-------
Single deck: three rows of ten keys (30 per slot) and slot keys 1-0
(10 slots, 300 cues).

Dual deck: each deck gets one half of the same three rows (15 keys per
slot).  Deck A selects slots with 1-3, deck B with 8-0 (3 slots, 45
cues per deck).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple


@dataclass(frozen=True)
class KeyLayout:
    """A fixed keyboard layout for one deck.

    Attributes:
        rows: Key symbols row by row; flattened order is the local offset.
        slot_keys: One key per slot, in slot order.
        name: Display name.
    """
    rows: Tuple[Tuple[str, ...], ...]
    slot_keys: Tuple[str, ...]
    name: str = ""
    _offsets: Dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)
    _slots: Dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        offsets: Dict[str, int] = {}
        for key in (k for row in self.rows for k in row):
            key = key.lower()
            if key in offsets:
                raise ValueError(f"duplicate cue key {key!r} in layout {self.name!r}")
            offsets[key] = len(offsets)
        slots: Dict[str, int] = {}
        for i, key in enumerate(self.slot_keys):
            key = key.lower()
            if key in slots or key in offsets:
                raise ValueError(f"slot key {key!r} collides in layout {self.name!r}")
            slots[key] = i
        if not offsets or not slots:
            raise ValueError("layout needs at least one cue key and one slot key")
        object.__setattr__(self, '_offsets', offsets)
        object.__setattr__(self, '_slots', slots)

    @property
    def keys_per_slot(self) -> int:
        return len(self._offsets)

    @property
    def slot_count(self) -> int:
        return len(self.slot_keys)

    @property
    def capacity(self) -> int:
        """Total cue count addressed by this layout."""
        return self.slot_count * self.keys_per_slot

    @property
    def flat_keys(self) -> Tuple[str, ...]:
        return tuple(k.lower() for row in self.rows for k in row)

    def offset_of(self, key: str) -> Optional[int]:
        return self._offsets.get(key.lower())

    def slot_for_key(self, key: str) -> Optional[int]:
        return self._slots.get(key.lower())

    def resolve(self, key: str, active_slot: int) -> Optional[int]:
        """Flat cue index for ``key`` in ``active_slot``; None if unbound."""
        offset = self.offset_of(key)
        if offset is None:
            return None
        if not 0 <= active_slot < self.slot_count:
            raise IndexError(f"slot {active_slot} out of range [0, {self.slot_count})")
        return active_slot * self.keys_per_slot + offset

    def key_for_index(self, index: int, active_slot: int) -> Optional[str]:
        """Key face showing ``index`` in ``active_slot``, or None if outside it."""
        slot, offset = divmod(index, self.keys_per_slot)
        if slot != active_slot or index < 0:
            return None
        return self.flat_keys[offset]

    def slot_range(self, slot: int) -> range:
        start = slot * self.keys_per_slot
        return range(start, start + self.keys_per_slot)


def _rows(*rows: str) -> Tuple[Tuple[str, ...], ...]:
    return tuple(tuple(row) for row in rows)


SINGLE_DECK_LAYOUT = KeyLayout(
    rows=_rows("qwertyuiop", "asdfghjkl;", "zxcvbnm,./"),
    slot_keys=tuple("1234567890"),
    name="single",
)

DECK_A_LAYOUT = KeyLayout(
    rows=_rows("qwert", "asdfg", "zxcvb"),
    slot_keys=tuple("123"),
    name="deck_a",
)

DECK_B_LAYOUT = KeyLayout(
    rows=_rows("yuiop", "hjkl;", "nm,./"),
    slot_keys=tuple("890"),
    name="deck_b",
)


def layouts_for_variant(variant: str) -> Sequence[KeyLayout]:
    """Layouts for the 'single' or 'dual' deck variant."""
    if variant == 'single':
        return (SINGLE_DECK_LAYOUT,)
    if variant == 'dual':
        return (DECK_A_LAYOUT, DECK_B_LAYOUT)
    raise ValueError(f"unknown deck variant {variant!r}")
