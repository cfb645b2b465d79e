"""
Multi-deck shoe and forkable read cursors.

The shoe is a read-only numpy int8 array of length 52 × deck_count holding
card integers in dealt order. It is the single source of truth for card order
and is only ever replaced as a whole by Shoe.reload().

Cursors never mutate the shoe. A cursor is just (shoe, offset); dealing
advances the private offset. Forking a cursor copies the offset so that a
speculative branch can deal ahead without disturbing the round's canonical
progression:

    master = MasterCursor(Shoe(6, rng))
    branch = master.fork()
    branch.deal()               # master.offset unchanged
    master.advance_to(branch.offset)

Only the master cursor decides when to reload, before each round: when the
consumed fraction reaches the penetration, or when fewer than
ROUND_RESERVE_CARDS remain. The reserve is well above the deepest branch a round
produces in play, so a low deck count with a high penetration cannot run a
cursor past the end of the shoe.
"""

from __future__ import annotations

import numpy as np

from .cards import CARDS_PER_DECK

DEFAULT_DECK_COUNT: int = 6
DEFAULT_PENETRATION: float = 0.7   # fraction of the shoe consumed before reload
ROUND_RESERVE_CARDS: int = 26      # fewest cards a round may start with


class Shoe:
    """N standard decks shuffled together as one unit.

    Args:
        deck_count: Number of 52-card decks in the shoe.
        rng:        numpy Generator used for every shuffle. Pass a seeded
                    generator (np.random.default_rng(seed)) for reproducible runs.

    Raises:
        ValueError: If deck_count < 1.
    """

    def __init__(
        self,
        deck_count: int = DEFAULT_DECK_COUNT,
        rng: np.random.Generator | None = None,
    ) -> None:
        if deck_count < 1:
            raise ValueError(f"A shoe needs at least one deck, got {deck_count}.")
        self.deck_count = deck_count
        self._rng = rng if rng is not None else np.random.default_rng()
        self.cards: np.ndarray = np.empty(0, dtype=np.int8)
        self.reload_count = 0
        self.reload()

    def reload(self) -> None:
        """Rebuild the full card sequence from deck_count decks and shuffle it."""
        cards = np.tile(np.arange(CARDS_PER_DECK, dtype=np.int8), self.deck_count)
        self._rng.shuffle(cards)
        cards.flags.writeable = False
        self.cards = cards
        self.reload_count += 1

    @classmethod
    def stacked(
        cls,
        cards,
        deck_count: int = 1,
        rng: np.random.Generator | None = None,
    ) -> Shoe:
        """Build a shoe that deals exactly ``cards`` in order until its next reload.

        Used for deterministic test setups.

        Examples:
            >>> shoe = Shoe.stacked([0, 9, 12])
            >>> ShoeCursor(shoe).deal()
            0
            >>> len(shoe)
            3
        """
        shoe = cls(deck_count, rng)
        stacked = np.array(cards, dtype=np.int8)
        stacked.flags.writeable = False
        shoe.cards = stacked
        return shoe

    def __len__(self) -> int:
        return len(self.cards)


class ShoeCursor:
    """Read position into a shared Shoe.

    Cheap to fork: a fork shares the Shoe reference and copies the offset.
    """

    __slots__ = ('shoe', 'offset')

    def __init__(self, shoe: Shoe, offset: int = 0) -> None:
        self.shoe = shoe
        self.offset = offset

    def deal(self) -> int:
        """Return the card at the current offset and advance by one.

        Examples:
            >>> shoe = Shoe(1, np.random.default_rng(0))
            >>> cursor = ShoeCursor(shoe)
            >>> card = cursor.deal()
            >>> cursor.offset
            1
        """
        card = int(self.shoe.cards[self.offset])
        self.offset += 1
        return card

    def fork(self) -> ShoeCursor:
        """Return an independent cursor at the same position over the same Shoe."""
        return ShoeCursor(self.shoe, self.offset)

    @property
    def remaining(self) -> int:
        return len(self.shoe) - self.offset

    def __repr__(self) -> str:
        return f"ShoeCursor(offset={self.offset}, size={len(self.shoe)})"


class MasterCursor(ShoeCursor):
    """The long-lived cursor that tracks the real game progression.

    Owns the reload decision: before each round, if the consumed fraction of
    the shoe has reached ``penetration`` or fewer than ROUND_RESERVE_CARDS
    remain, the shoe is reshuffled and the offset reset to zero. A shoe
    shorter than the reserve (a stacked test shoe) reloads once any card of
    it has been dealt.

    Raises:
        ValueError: If penetration is not strictly between 0 and 1.
    """

    __slots__ = ('penetration',)

    def __init__(self, shoe: Shoe, penetration: float = DEFAULT_PENETRATION) -> None:
        if not 0.0 < penetration < 1.0:
            raise ValueError(f"Penetration must be in (0, 1), got {penetration}.")
        super().__init__(shoe, 0)
        self.penetration = penetration

    def reload_if_necessary(self) -> bool:
        """Reshuffle the shoe when penetration or the card reserve has been reached.

        Returns:
            True if the shoe was reloaded.
        """
        reserve = min(ROUND_RESERVE_CARDS, len(self.shoe))
        if self.offset >= self.penetration * len(self.shoe) or self.remaining < reserve:
            self.shoe.reload()
            self.offset = 0
            return True
        return False

    def advance_to(self, offset: int) -> None:
        """Move the master position forward to ``offset``.

        Raises:
            ValueError: If offset lies behind the current position.
        """
        if offset < self.offset:
            raise ValueError(
                f"Cannot move master cursor backwards ({self.offset} -> {offset})."
            )
        self.offset = offset
