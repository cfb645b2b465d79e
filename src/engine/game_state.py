"""
Player actions, legality, action application, and branch snapshots.

Actions are an IntEnum so they index the results table directly; their order
(STAND < HIT < DOUBLE < SPLIT) is also the tie-break order used when two
actions have the same estimated value.

A BranchState is a value-type snapshot of one speculative line of play:
{player hand tree, dealer hand, cursor}. Forking copies all three, so branches
never share mutable structure.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Callable

from .hand import DealerHand, PlayerHand, PlayerSubHand
from .shoe import ShoeCursor


class Action(IntEnum):
    STAND = 0
    HIT = 1
    DOUBLE = 2
    SPLIT = 3


ACTION_CODES: dict[Action, str] = {
    Action.STAND: 's',
    Action.HIT: 'h',
    Action.DOUBLE: 'd',
    Action.SPLIT: 'p',
}


# trace(message) receives a human-readable narrative of play; no-op by default.
TraceSink = Callable[[str], None]


def no_trace(message: str) -> None:
    pass


# ─── Legality ─────────────────────────────────────────────────────────────────

def legal_actions(subhand: PlayerSubHand) -> list[Action]:
    """Return the actions currently legal for ``subhand``, in enumeration order.

    STAND is always legal. A subhand that can no longer hit (bust, 21,
    finished, or a split ace) has STAND as its only option.
    """
    actions = [Action.STAND]
    if not subhand.can_hit():
        return actions
    actions.append(Action.HIT)
    if subhand.can_double_down():
        actions.append(Action.DOUBLE)
    if subhand.can_split():
        actions.append(Action.SPLIT)
    return actions


def is_legal(subhand: PlayerSubHand, action: Action) -> bool:
    return action in legal_actions(subhand)


# ─── Action application ───────────────────────────────────────────────────────

def apply_action(
    player: PlayerHand,
    index: int,
    action: Action,
    cursor: ShoeCursor,
) -> None:
    """Apply ``action`` to ``player.subhands[index]``, dealing from ``cursor``.

    HIT deals one card. DOUBLE doubles the bet, deals one card, and finishes
    the subhand. SPLIT appends the new sibling subhand to ``player``; the
    original subhand keeps its place. STAND finishes the subhand.

    Raises:
        ValueError: If the action is unknown or not legal for the subhand.
    """
    action = Action(action)
    subhand = player.subhands[index]
    if not is_legal(subhand, action):
        raise ValueError(
            f"{action.name} is not legal on subhand {index} ({subhand.render()})."
        )

    if action == Action.STAND:
        subhand.stand()
    elif action == Action.HIT:
        subhand.add_card(cursor.deal())
    elif action == Action.DOUBLE:
        subhand.double_down(cursor.deal())
    elif action == Action.SPLIT:
        player.append(subhand.split(cursor))


# ─── Deal and branch snapshots ────────────────────────────────────────────────

def deal_initial(cursor: ShoeCursor, owner: int = 0) -> tuple[PlayerHand, DealerHand]:
    """Deal player, dealer, player, dealer from ``cursor``.

    The dealer's first card is the hole card; its second is the up-card.
    """
    player = PlayerHand.for_player(owner)
    dealer = DealerHand()
    player.primary.add_card(cursor.deal())
    dealer.add_card(cursor.deal())
    player.primary.add_card(cursor.deal())
    dealer.add_card(cursor.deal())
    return player, dealer


@dataclass
class BranchState:
    player: PlayerHand
    dealer: DealerHand
    cursor: ShoeCursor

    def fork(self) -> BranchState:
        return BranchState(self.player.copy(), self.dealer.copy(), self.cursor.fork())
