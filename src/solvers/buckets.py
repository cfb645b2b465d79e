"""
State bucketing: collapse dealer up-card and player hand into small table indices.

Dealer buckets (10):
    up-card value 2–10 → 0–8,  Ace (value 11) → 9

Player buckets (32):
    0       hard total ≤ 8 (collapsed)
    1–12    hard totals 9–20
    13–20   soft totals 13–20 (bucket == total)
    21      unused
    22–30   pairs of value 2–10 (20 + value)
    31      pair of Aces

Pairs are checked before softness, so A-A lands in 31 rather than in a soft
bucket. Totals of 21 are terminal and never bucketed.
"""

from __future__ import annotations

from src.engine.cards import ACE_VALUE, FACE_NAMES, card_value
from src.engine.game_state import Action
from src.engine.hand import PlayerSubHand

NUM_DEALER_BUCKETS: int = 10
NUM_PLAYER_BUCKETS: int = 32

HARD_LOW_BUCKET: int = 0
SOFT_MIN_TOTAL: int = 13
PAIR_BUCKET_OFFSET: int = 20
ACE_PAIR_BUCKET: int = 31

PAIR_BUCKETS: frozenset[int] = frozenset(range(22, 32))

_NON_PAIR_ACTIONS: list[Action] = [Action.STAND, Action.HIT, Action.DOUBLE]


def dealer_bucket(upcard_value: int) -> int:
    """Map the blackjack value of the dealer's up-card (Ace = 11) to 0–9.

    Raises:
        ValueError: If upcard_value is outside 2–11.

    Examples:
        >>> dealer_bucket(2)
        0
        >>> dealer_bucket(10)
        8
        >>> dealer_bucket(11)
        9
    """
    if not 2 <= upcard_value <= ACE_VALUE:
        raise ValueError(f"Up-card value must be in 2–11, got {upcard_value}.")
    return upcard_value - 2


def player_bucket(subhand: PlayerSubHand) -> int:
    """Map a non-terminal player subhand to its bucket (0–31).

    Raises:
        ValueError: If the hand totals 21 or more (terminal states are never
                    looked up).

    Examples:
        >>> from src.engine.cards import str_to_card
        >>> player_bucket(PlayerSubHand([str_to_card('8S'), str_to_card('8H')]))
        28
        >>> player_bucket(PlayerSubHand([str_to_card('AS'), str_to_card('7H')]))
        18
    """
    if subhand.can_split():
        pair_value = card_value(subhand.cards[0])
        if pair_value == ACE_VALUE:
            return ACE_PAIR_BUCKET
        return PAIR_BUCKET_OFFSET + pair_value

    total = subhand.value
    if total >= 21:
        raise ValueError(f"Terminal hand {subhand.render()} ({total}) has no bucket.")
    if subhand.is_soft and total >= SOFT_MIN_TOTAL:
        return total
    if total <= 8:
        return HARD_LOW_BUCKET
    return total - 8


def player_bucket_label(bucket: int) -> str:
    """Human-readable label for a player bucket.

    Examples:
        >>> player_bucket_label(0)
        'hard <=8'
        >>> player_bucket_label(8)
        'hard 16'
        >>> player_bucket_label(18)
        'soft 18'
        >>> player_bucket_label(28)
        'pair 8'
        >>> player_bucket_label(31)
        'pair A'
    """
    if bucket == HARD_LOW_BUCKET:
        return 'hard <=8'
    if 1 <= bucket <= 12:
        return f'hard {bucket + 8}'
    if SOFT_MIN_TOTAL <= bucket <= 20:
        return f'soft {bucket}'
    if bucket == ACE_PAIR_BUCKET:
        return 'pair A'
    if bucket in PAIR_BUCKETS:
        return f'pair {bucket - PAIR_BUCKET_OFFSET}'
    return 'unused'


def dealer_bucket_label(bucket: int) -> str:
    """Up-card label for a dealer bucket.

    Examples:
        >>> dealer_bucket_label(0)
        '2'
        >>> dealer_bucket_label(9)
        'A'
    """
    if bucket == NUM_DEALER_BUCKETS - 1:
        return FACE_NAMES[0]
    return str(bucket + 2)


def allowed_actions_for_bucket(player_bkt: int) -> list[Action]:
    """Actions a chart may hold for a player bucket; SPLIT only in pair buckets.

    Examples:
        >>> [a.name for a in allowed_actions_for_bucket(8)]
        ['STAND', 'HIT', 'DOUBLE']
        >>> len(allowed_actions_for_bucket(28))
        4
    """
    if player_bkt in PAIR_BUCKETS:
        return list(Action)
    return list(_NON_PAIR_ACTIONS)
