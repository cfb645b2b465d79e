"""
Settlement, payout calculation, and the dealer drawing rule.

Settlement priority (highest to lowest):
    1. Player bust                       → player loses 1 unit
    2. Player and dealer blackjack       → push
    3. Dealer blackjack                  → player loses 1 unit
    4. Player blackjack                  → player wins 1.5 units
    5. Dealer bust or higher player total → player wins 1 unit
    6. Equal totals                      → push
    7. Otherwise                         → player loses 1 unit

Payout convention (from player's perspective, per unit bet):
    +N  = player wins N units
    -N  = player loses N units
     0  = push (bet returned)

Dealer rule: draw while total < 17, and also on soft 17.
"""

from __future__ import annotations

from enum import Enum, auto

from .hand import DealerHand, PlayerHand, hand_value, is_blackjack, is_bust

BLACKJACK_PAYOUT: float = 1.5
DEALER_STAND_TOTAL: int = 17


class Outcome(Enum):
    WIN = auto()
    LOSS = auto()
    PUSH = auto()


def settle_hand(player_cards, dealer_cards) -> tuple[Outcome, float]:
    """Determine the outcome and per-unit payout of a finished player hand.

    Args:
        player_cards: The player's final cards.
        dealer_cards: The dealer's final cards.

    Returns:
        (Outcome, payout_units) from the player's perspective.

    Examples:
        >>> settle_hand((9, 22), (0, 12))        # 10-10 vs A-K
        (<Outcome.LOSS: 2>, -1.0)
        >>> settle_hand((0, 12), (9, 8))         # A-K vs 10-9
        (<Outcome.WIN: 1>, 1.5)
    """
    player_total = hand_value(player_cards)[0]
    if is_bust(player_total):
        return Outcome.LOSS, -1.0

    player_bj = is_blackjack(player_cards)
    dealer_bj = is_blackjack(dealer_cards)
    if player_bj and dealer_bj:
        return Outcome.PUSH, 0.0
    if dealer_bj:
        return Outcome.LOSS, -1.0
    if player_bj:
        return Outcome.WIN, BLACKJACK_PAYOUT

    dealer_total = hand_value(dealer_cards)[0]
    if is_bust(dealer_total) or player_total > dealer_total:
        return Outcome.WIN, 1.0
    if player_total == dealer_total:
        return Outcome.PUSH, 0.0
    return Outcome.LOSS, -1.0


def calculate_payout(payout_units: float, bet: float = 1.0) -> float:
    """Scale a per-unit payout by the bet multiplier.

    Examples:
        >>> calculate_payout(1.0, 2.0)    # won a doubled hand
        2.0
        >>> calculate_payout(-1.0, 2.0)
        -2.0
    """
    return payout_units * bet


def settle_player_hand(player: PlayerHand, dealer: DealerHand) -> float:
    """Sum of bet-scaled payouts over every subhand of ``player``."""
    return sum(
        calculate_payout(settle_hand(subhand.cards, dealer.cards)[1], subhand.bet)
        for subhand in player
    )


def dealer_should_hit(cards) -> bool:
    """Dealer draws below 17 and on soft 17.

    Examples:
        >>> dealer_should_hit((9, 5))     # hard 16
        True
        >>> dealer_should_hit((9, 6))     # hard 17
        False
        >>> dealer_should_hit((0, 5))     # soft 17
        True
    """
    total, soft = hand_value(cards)
    return total < DEALER_STAND_TOTAL or (total == DEALER_STAND_TOTAL and soft)


def play_dealer(dealer: DealerHand, cursor) -> DealerHand:
    """Reveal the hole card and draw from ``cursor`` until the dealer stands."""
    dealer.flip()
    while dealer_should_hit(dealer.cards):
        dealer.add_card(cursor.deal())
    return dealer
