"""
Shared pytest fixtures for the blackjack rollout tests.

Provides convenience wrappers around str_to_card for building known hands and
cursors over a prescribed deal order.
"""

from __future__ import annotations

import numpy as np
import pytest

from src.engine.cards import str_to_card
from src.engine.hand import DealerHand, PlayerHand, PlayerSubHand
from src.engine.shoe import Shoe, ShoeCursor


def hand(*card_strs: str) -> list[int]:
    """Build a card list from human-readable card strings.

    Examples:
        >>> hand('AS', 'KD')
        [0, 51]
    """
    return [str_to_card(s) for s in card_strs]


def stacked_cursor(*card_strs: str) -> ShoeCursor:
    """Cursor over a shoe that deals exactly ``card_strs`` in order."""
    return ShoeCursor(Shoe.stacked(hand(*card_strs)))


def subhand(*card_strs: str, **kwargs) -> PlayerSubHand:
    return PlayerSubHand(hand(*card_strs), **kwargs)


def player_hand(*card_strs: str) -> PlayerHand:
    return PlayerHand([subhand(*card_strs)])


def dealer_hand(*card_strs: str) -> DealerHand:
    """Dealer hand from (hole card, up-card, ...)."""
    return DealerHand(hand(*card_strs))


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def h():
    """Expose the hand() helper as a fixture for convenience."""
    return hand
