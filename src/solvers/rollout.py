"""
Rollout engine: play a speculative branch to a terminal payout.

For each legal root action on a fresh two-card hand, the driver forks the
round's BranchState, applies the root action, and calls resolve_to_terminal().
Every later decision in the branch uses the table's current greedy action for
the subhand's bucket. The branch total is credited only to the root
(player bucket, dealer bucket, root action) cell; intermediate decisions build
their own statistics when they are themselves a root in a later round.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from src.engine.game_state import (
    Action,
    BranchState,
    TraceSink,
    apply_action,
    legal_actions,
    no_trace,
)
from src.engine.hand import DealerHand, PlayerHand, PlayerSubHand
from src.engine.rules import play_dealer, settle_player_hand
from src.engine.shoe import ShoeCursor
from src.solvers.buckets import dealer_bucket, player_bucket
from src.solvers.results_table import ResultsTable

# choose(subhand) returns the action to take on a subhand that can still hit.
ActionChooser = Callable[[PlayerSubHand], Action]


@dataclass
class BranchResult:
    """Outcome of one explored root action."""
    action: Action
    outcome: float
    end_offset: int
    final: BranchState


def play_out_subhands(
    player: PlayerHand,
    cursor: ShoeCursor,
    choose: ActionChooser,
    trace: TraceSink = no_trace,
) -> None:
    """Act on every subhand until it stands, doubles, or can no longer hit.

    Subhands appended by a split are played in turn after the ones before them.
    """
    index = 0
    while index < len(player.subhands):
        subhand = player.subhands[index]
        while subhand.can_hit():
            action = choose(subhand)
            trace(f"  subhand {index} [{subhand.render()}] ({subhand.value}) -> {action.name}")
            apply_action(player, index, action, cursor)
            if action == Action.STAND:
                break
        index += 1


def resolve_to_terminal(
    dealer: DealerHand,
    player: PlayerHand,
    table: ResultsTable,
    cursor: ShoeCursor,
    triggering_action: Action,
    trace: TraceSink = no_trace,
) -> float:
    """Finish every subhand greedily, play the dealer, and return the total payout.

    ``triggering_action`` has already been applied to the primary subhand.
    When it is STAND the player phase is skipped. Otherwise each subhand,
    including siblings appended by splits, keeps taking the table's best legal
    action until it stands, doubles, or can no longer hit.

    The dealer then reveals and draws to 17 (hitting soft 17), even if every
    subhand has busted.

    Returns:
        Sum over subhands of bet × per-unit payout.
    """
    bucket_d = dealer_bucket(dealer.showing())

    if triggering_action != Action.STAND:
        play_out_subhands(
            player,
            cursor,
            lambda subhand: table.select_best_action(bucket_d, subhand),
            trace,
        )

    play_dealer(dealer, cursor)
    outcome = settle_player_hand(player, dealer)
    trace(f"  dealer [{dealer.render()}] ({dealer.value}); branch outcome {outcome:+.1f}")
    return outcome


def explore_root_action(
    root: BranchState,
    action: Action,
    table: ResultsTable,
    trace: TraceSink = no_trace,
) -> BranchResult:
    """Fork ``root``, apply ``action`` to the primary subhand, and resolve it.

    ``root`` is left untouched.
    """
    branch = root.fork()
    trace(f" root {action.name}")
    apply_action(branch.player, 0, action, branch.cursor)
    outcome = resolve_to_terminal(
        branch.dealer, branch.player, table, branch.cursor, action, trace
    )
    return BranchResult(action, outcome, branch.cursor.offset, branch)


def explore_all_root_actions(
    root: BranchState,
    table: ResultsTable,
    trace: TraceSink = no_trace,
) -> list[BranchResult]:
    """Explore every legal root action and record each outcome at the root cell.

    Returns:
        One BranchResult per legal root action, in enumeration order.
    """
    primary = root.player.primary
    bucket_d = dealer_bucket(root.dealer.showing())
    bucket_p = player_bucket(primary)

    results = []
    for action in legal_actions(primary):
        result = explore_root_action(root, action, table, trace)
        table.record_result(bucket_d, bucket_p, action, result.outcome)
        results.append(result)
    return results
