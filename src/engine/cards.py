"""
Card constants, encoding, and human-readable I/O helpers.

Card encoding (integer 0–51):
    face_index = card % 13   ->  0=A, 1=2, ..., 8=9, 9=10, 10=J, 11=Q, 12=K
    suit_index = card // 13  ->  0=S, 1=H, 2=C, 3=D

A shoe of N decks holds each of the 52 integers N times, so a card's raw value
never exceeds 51 regardless of deck count.

Blackjack value: Ace = 11 (reduced to 1 by hand evaluation when needed),
10/J/Q/K = 10, every other face = face_index + 1.
"""

from __future__ import annotations

CARDS_PER_DECK: int = 52

FACE_NAMES: list[str] = ['A', '2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K']
SUIT_NAMES: list[str] = ['S', 'H', 'C', 'D']

# Face indices for special faces
FACE_ACE: int = 0
FACE_TEN: int = 9
FACE_JACK: int = 10
FACE_QUEEN: int = 11
FACE_KING: int = 12

ACE_VALUE: int = 11


def card_face(card: int) -> int:
    """Return the face index (0–12) of a card.

    Examples:
        >>> card_face(0)    # Ace of Spades
        0
        >>> card_face(51)   # King of Diamonds
        12
    """
    return card % 13


def card_suit(card: int) -> int:
    """Return the suit index (0–3) of a card.

    Examples:
        >>> card_suit(0)    # Ace of Spades
        0
        >>> card_suit(51)   # King of Diamonds
        3
    """
    return card // 13


def card_value(card: int) -> int:
    """Return the blackjack value of a card, counting an Ace as 11.

    Examples:
        >>> card_value(0)    # Ace of Spades
        11
        >>> card_value(9)    # 10 of Spades
        10
        >>> card_value(23)   # Jack of Hearts
        10
        >>> card_value(27)   # 2 of Clubs
        2
    """
    face = card % 13
    if face == FACE_ACE:
        return ACE_VALUE
    if face >= FACE_TEN:
        return 10
    return face + 1


def is_ace(card: int) -> bool:
    return card % 13 == FACE_ACE


def card_to_str(card: int) -> str:
    """Convert a card integer to its human-readable string representation.

    Examples:
        >>> card_to_str(0)
        'AS'
        >>> card_to_str(22)
        '10H'
        >>> card_to_str(51)
        'KD'
    """
    return FACE_NAMES[card % 13] + SUIT_NAMES[card // 13]


def str_to_card(s: str) -> int:
    """Parse a human-readable card string to its integer encoding.

    The format is <face><suit> where suit is the last character.
    Face can be 'A', '2'-'9', '10', 'J', 'Q' or 'K'.
    Suit can be 'S', 'H', 'C' or 'D'.

    Raises:
        ValueError: If the face or suit is not recognised.

    Examples:
        >>> str_to_card('AS')
        0
        >>> str_to_card('10H')
        22
        >>> str_to_card('KD')
        51
    """
    face = FACE_NAMES.index(s[:-1])
    suit = SUIT_NAMES.index(s[-1])
    return suit * 13 + face


def hand_to_str(cards) -> str:
    """Convert a sequence of card ints to a comma-separated string.

    Examples:
        >>> hand_to_str((0, 51))
        'AS, KD'
    """
    return ', '.join(card_to_str(c) for c in cards)
