"""
Hand evaluation and the hand/subhand/player state types.

Ace valuation: every Ace starts at 11; while the total exceeds 21 and some Ace
is still counted as 11, one Ace is reduced to 1. A hand is soft iff at least
one Ace is still counted as 11 after this adjustment.

Value, softness, bust and blackjack are always recomputed from the cards, never
cached, so a hand can be mutated freely without going stale.

State types share one core (a list of card ints) and add role-specific fields:

    Hand            cards
    DealerHand      + hole_hidden        (rendering only)
    PlayerSubHand   + owner, bet, from_split, finished
    PlayerHand      list of PlayerSubHand (splits append siblings)

A subhand refers to its Player by index into the caller's player registry;
payout resolves the index at settlement time.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .cards import card_to_str, card_value, is_ace


# ─── Pure evaluation helpers ──────────────────────────────────────────────────

def hand_value(cards) -> tuple[int, bool]:
    """Return (total, is_soft) for a sequence of card ints.

    Examples:
        >>> hand_value((0, 12))          # A-K
        (21, True)
        >>> hand_value((0, 13, 8))       # A-A-9
        (21, True)
        >>> hand_value((12, 11, 4))      # K-Q-5
        (25, False)
    """
    total = 0
    soft_aces = 0
    for card in cards:
        total += card_value(card)
        if is_ace(card):
            soft_aces += 1

    while soft_aces > 0 and total > 21:
        soft_aces -= 1
        total -= 10

    return total, soft_aces > 0


def calculate_total(cards) -> int:
    return hand_value(cards)[0]


def is_soft(cards) -> bool:
    return hand_value(cards)[1]


def is_bust(total: int) -> bool:
    """Return True if a total exceeds 21.

    Examples:
        >>> is_bust(21)
        False
        >>> is_bust(22)
        True
    """
    return total > 21


def is_blackjack(cards) -> bool:
    """Exactly two cards totalling 21."""
    return len(cards) == 2 and calculate_total(cards) == 21


def render_hand(cards, hide_first: bool = False) -> str:
    """Render a hand for display, optionally concealing the first (hole) card.

    Examples:
        >>> render_hand((0, 12))
        'AS, KS'
        >>> render_hand((0, 12), hide_first=True)
        'KS'
    """
    shown = cards[1:] if hide_first else cards
    return ', '.join(card_to_str(c) for c in shown)


# ─── State types ──────────────────────────────────────────────────────────────

@dataclass
class Hand:
    cards: list[int] = field(default_factory=list)

    def add_card(self, card: int) -> None:
        self.cards.append(card)

    @property
    def value(self) -> int:
        return hand_value(self.cards)[0]

    @property
    def is_soft(self) -> bool:
        return hand_value(self.cards)[1]

    @property
    def is_busted(self) -> bool:
        return is_bust(self.value)

    @property
    def is_blackjack(self) -> bool:
        return is_blackjack(self.cards)

    def copy(self):
        return replace(self, cards=list(self.cards))

    def render(self, hide_first: bool = False) -> str:
        return render_hand(self.cards, hide_first=hide_first)


@dataclass
class DealerHand(Hand):
    """Dealer's hand. The first dealt card is the hole card, the second the up-card.

    ``hole_hidden`` affects rendering only; game logic always sees every card.
    """
    hole_hidden: bool = True

    def showing(self) -> int:
        """Blackjack value of the up-card (Ace = 11)."""
        return card_value(self.cards[1])

    def flip(self) -> None:
        self.hole_hidden = False


@dataclass
class PlayerSubHand(Hand):
    """One hand a player controls; a split produces a sibling subhand.

    Attributes:
        owner:      Index of the owning Player in the round's player registry.
        bet:        Bet multiplier, 1.0 initially and doubled by a double-down.
        from_split: True on both hands produced by a split.
        finished:   True once the subhand has stood or doubled.
    """
    owner: int = 0
    bet: float = 1.0
    from_split: bool = False
    finished: bool = False

    def can_hit(self) -> bool:
        if self.finished or self.is_busted or self.is_blackjack or self.value >= 21:
            return False
        # Split aces receive exactly one card each.
        return not (self.from_split and is_ace(self.cards[0]))

    def can_split(self) -> bool:
        return len(self.cards) == 2 and self.cards[0] % 13 == self.cards[1] % 13

    def can_double_down(self) -> bool:
        return len(self.cards) == 2

    def stand(self) -> None:
        self.finished = True

    def double_down(self, card: int) -> None:
        """Double the bet, take exactly one card, and end this subhand's turn.

        Raises:
            ValueError: If the subhand does not hold exactly two cards.
        """
        if not self.can_double_down():
            raise ValueError(f"Cannot double down on a {len(self.cards)}-card hand.")
        self.bet *= 2
        self.add_card(card)
        self.finished = True

    def split(self, cursor) -> PlayerSubHand:
        """Split a pair into two subhands, dealing one fresh card to each.

        The second card moves to the new subhand, which is dealt to first.
        Both subhands are marked ``from_split``. The caller appends the
        returned subhand to the owning PlayerHand.

        Raises:
            ValueError: If the subhand is not a two-card pair.
        """
        if not self.can_split():
            raise ValueError(f"Cannot split {self.render()}: not a pair.")
        sibling = PlayerSubHand(cards=[self.cards.pop()], owner=self.owner, from_split=True)
        sibling.add_card(cursor.deal())
        self.add_card(cursor.deal())
        self.from_split = True
        return sibling


@dataclass
class PlayerHand:
    """All subhands a player holds in one round; the first is the primary."""
    subhands: list[PlayerSubHand] = field(default_factory=list)

    @classmethod
    def for_player(cls, owner: int = 0) -> PlayerHand:
        return cls([PlayerSubHand(owner=owner)])

    @property
    def primary(self) -> PlayerSubHand:
        return self.subhands[0]

    def append(self, subhand: PlayerSubHand) -> None:
        self.subhands.append(subhand)

    def copy(self) -> PlayerHand:
        return PlayerHand([s.copy() for s in self.subhands])

    def __len__(self) -> int:
        return len(self.subhands)

    def __iter__(self):
        return iter(self.subhands)


@dataclass
class Player:
    """A seat at the table with a running money balance and hand counter."""
    name: str
    money: float = 0.0
    hands: int = 0

    def adjust_money(self, amount: float) -> None:
        self.money += amount

    def signal_new_hand(self) -> None:
        self.hands += 1

    def clear_stats(self) -> None:
        self.money = 0.0
        self.hands = 0

    @property
    def expected_value(self) -> float:
        """Mean money won per hand so far (0.0 before any hand)."""
        if self.hands == 0:
            return 0.0
        return self.money / self.hands


def pay_out(players: list[Player], subhand: PlayerSubHand, result: float) -> float:
    """Credit ``bet × result`` to the subhand's owner and return the amount."""
    amount = subhand.bet * result
    players[subhand.owner].adjust_money(amount)
    return amount
