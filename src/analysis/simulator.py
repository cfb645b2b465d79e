"""
Monte Carlo driver: learn the ResultsTable by branching over root actions.

One training round:
    1. Master cursor reloads the shoe if penetration or the card reserve has
       been reached.
    2. Deal player, dealer, player, dealer from the master cursor.
    3. Blackjack short-circuit: if either side holds blackjack the round is
       settled immediately (push / -1 / +1.5) and the table is not updated.
    4. Otherwise every legal root action is explored on its own fork of
       {player hand, dealer hand, cursor}, resolved greedily from the table,
       and its outcome recorded at the root cell.
    5. The master cursor advances to the deepest offset any branch reached.

Step 5 is an approximation of shoe depletion: branches that consumed fewer
cards effectively skip cards in the master sequence. It is kept as-is because
replacing it with independent per-branch shoes changes the statistics.

The player's money tracks the on-policy result: before exploring, the table's
current greedy root action is noted, and that branch's outcome is paid out.

Also provides evaluate_chart(), which plays a fixed action chart without any
branching and reports EV statistics with a 95% confidence interval and
per-cell chart usage, and hill_climb(), which searches for a better chart by
re-evaluating random local changes to the best chart found so far.

Run:
    python -m src.analysis.simulator [iterations]
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from src.analysis.table_report import (
    chart_action,
    format_results_grid,
    perturb_chart,
    random_chart,
)
from src.engine.game_state import (
    Action,
    BranchState,
    TraceSink,
    deal_initial,
    no_trace,
)
from src.engine.hand import Player, pay_out
from src.engine.rules import play_dealer, settle_hand, settle_player_hand
from src.engine.shoe import DEFAULT_DECK_COUNT, DEFAULT_PENETRATION, MasterCursor, Shoe
from src.solvers.buckets import NUM_DEALER_BUCKETS, NUM_PLAYER_BUCKETS, dealer_bucket
from src.solvers.results_table import NUM_ACTIONS, ResultsTable
from src.solvers.rollout import BranchResult, explore_all_root_actions, play_out_subhands

DEFAULT_ITERATIONS: int = 1_000_000


# ─── Configuration ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SimulationConfig:
    """Per-run settings.

    Attributes:
        deck_count:  Decks in the shoe.
        penetration: Consumed fraction of the shoe that triggers a reshuffle.
        iterations:  Rounds to simulate.
        seed:        Seed for the shoe's numpy Generator; None for a
                     non-deterministic run.
    """
    deck_count: int = DEFAULT_DECK_COUNT
    penetration: float = DEFAULT_PENETRATION
    iterations: int = DEFAULT_ITERATIONS
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.deck_count < 1:
            raise ValueError(f"deck_count must be >= 1, got {self.deck_count}.")
        if not 0.0 < self.penetration < 1.0:
            raise ValueError(f"penetration must be in (0, 1), got {self.penetration}.")
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}.")

    def make_rng(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)

    def make_master_cursor(self, rng: np.random.Generator | None = None) -> MasterCursor:
        """Fresh shoe and master cursor; a new Generator from ``seed`` unless given one."""
        shoe = Shoe(self.deck_count, rng if rng is not None else self.make_rng())
        return MasterCursor(shoe, self.penetration)


# ─── Result types ─────────────────────────────────────────────────────────────

@dataclass
class RoundResult:
    """What happened in one training round.

    Attributes:
        outcome:        Payout credited to the player for this round.
        short_circuit:  True if a blackjack settled the round without branching.
        policy_action:  Greedy root action chosen before exploring (None on
                        short-circuit rounds).
        branches:       One BranchResult per explored root action.
        reloaded:       True if the shoe was reshuffled before the deal.
    """
    outcome: float
    short_circuit: bool
    policy_action: Action | None = None
    branches: list[BranchResult] = field(default_factory=list)
    reloaded: bool = False


@dataclass
class TrainingResult:
    """Outcome of a training batch.

    Attributes:
        table:          The learned ResultsTable.
        rounds:         Rounds simulated.
        player:         The seat whose money tracks on-policy results.
        short_circuits: Rounds settled by a blackjack without branching.
        root_action_counts: Times each action was explored as a root, indexed by Action.
        reloads:        Shoe reshuffles triggered by penetration.
    """
    table: ResultsTable
    rounds: int
    player: Player
    short_circuits: int
    root_action_counts: np.ndarray
    reloads: int

    def __str__(self) -> str:
        return (
            f"Rounds: {self.rounds:,} | "
            f"Samples: {self.table.total_samples:,} | "
            f"On-policy EV: {self.player.expected_value:+.4f} | "
            f"Blackjack rounds: {self.short_circuits:,} | "
            f"Reloads: {self.reloads:,}"
        )


@dataclass
class SimulationResult:
    """Aggregate statistics from evaluating a fixed chart.

    Attributes:
        n_hands:    Rounds played.
        mean_ev:    Mean payout per round in units.
        std_ev:     Sample standard deviation of per-round payouts.
        ci_95_low:  Lower bound of the 95% confidence interval for mean_ev.
        ci_95_high: Upper bound of the 95% confidence interval for mean_ev.
        n_wins:     Rounds with payout > 0.
        n_losses:   Rounds with payout < 0.
        n_pushes:   Rounds with payout == 0.
        visits:     Chart lookups per (player bucket, dealer bucket); not
                    part of equality.
    """
    n_hands: int
    mean_ev: float
    std_ev: float
    ci_95_low: float
    ci_95_high: float
    n_wins: int
    n_losses: int
    n_pushes: int
    visits: np.ndarray | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        sign = "+" if self.mean_ev >= 0 else ""
        return (
            f"Hands: {self.n_hands:,} | "
            f"EV: {sign}{self.mean_ev:.4f} ({sign}{self.mean_ev * 100:.2f}%) | "
            f"95% CI: [{self.ci_95_low:.4f}, {self.ci_95_high:.4f}]"
        )


# ─── Training ─────────────────────────────────────────────────────────────────

def run_round(
    master: MasterCursor,
    table: ResultsTable,
    players: list[Player],
    trace: TraceSink = no_trace,
) -> RoundResult:
    """Simulate one round for the first seat in ``players`` and update ``table``."""
    reloaded = master.reload_if_necessary()
    player, dealer = deal_initial(master)
    primary = player.primary
    players[primary.owner].signal_new_hand()
    trace(
        f"Dealer showing {dealer.render(hide_first=True)}; "
        f"player [{primary.render()}] ({primary.value})"
    )

    if primary.is_blackjack or dealer.is_blackjack:
        _, units = settle_hand(primary.cards, dealer.cards)
        pay_out(players, primary, units)
        trace(f" blackjack: dealer [{dealer.render()}], outcome {units:+.1f}")
        return RoundResult(units, short_circuit=True, reloaded=reloaded)

    policy_action = table.select_best_action(dealer_bucket(dealer.showing()), primary)
    root = BranchState(player, dealer, master.fork())
    branches = explore_all_root_actions(root, table, trace)
    master.advance_to(max(b.end_offset for b in branches))

    realized = next(b.outcome for b in branches if b.action == policy_action)
    players[primary.owner].adjust_money(realized)
    return RoundResult(realized, False, policy_action, branches, reloaded)


def train(
    config: SimulationConfig = SimulationConfig(),
    table: ResultsTable | None = None,
    trace: TraceSink = no_trace,
) -> TrainingResult:
    """Run ``config.iterations`` training rounds.

    Args:
        config: Run settings; pass a seed for a reproducible table.
        table:  Table to keep training; a fresh one if None.
        trace:  Narrative sink for every deal and decision.

    Returns:
        TrainingResult holding the updated table and batch statistics.
    """
    table = table if table is not None else ResultsTable()
    master = config.make_master_cursor()
    players = [Player("Player 1")]
    root_counts = np.zeros(NUM_ACTIONS, dtype=np.int64)
    short_circuits = 0
    reloads = 0

    for _ in range(config.iterations):
        result = run_round(master, table, players, trace)
        reloads += result.reloaded
        if result.short_circuit:
            short_circuits += 1
        for branch in result.branches:
            root_counts[branch.action] += 1

    return TrainingResult(
        table=table,
        rounds=config.iterations,
        player=players[0],
        short_circuits=short_circuits,
        root_action_counts=root_counts,
        reloads=reloads,
    )


# ─── Fixed-chart evaluation ───────────────────────────────────────────────────

def play_chart_round(
    master: MasterCursor,
    chart: np.ndarray,
    players: list[Player],
    visits: np.ndarray | None = None,
    trace: TraceSink = no_trace,
) -> float:
    """Play one round straight through the master cursor using ``chart``.

    When ``visits`` is given, every chart lookup increments its cell.
    """
    master.reload_if_necessary()
    player, dealer = deal_initial(master)
    primary = player.primary
    players[primary.owner].signal_new_hand()

    if primary.is_blackjack or dealer.is_blackjack:
        _, units = settle_hand(primary.cards, dealer.cards)
        return pay_out(players, primary, units)

    bucket_d = dealer_bucket(dealer.showing())
    play_out_subhands(
        player,
        master,
        lambda subhand: chart_action(chart, bucket_d, subhand, visits),
        trace,
    )

    play_dealer(dealer, master)
    outcome = settle_player_hand(player, dealer)
    players[primary.owner].adjust_money(outcome)
    return outcome


def _summarise(payouts: np.ndarray, visits: np.ndarray) -> SimulationResult:
    n_hands = len(payouts)
    mean = float(np.mean(payouts))
    std = float(np.std(payouts, ddof=1))
    ci_margin = 1.96 * std / math.sqrt(n_hands)

    return SimulationResult(
        n_hands=n_hands,
        mean_ev=mean,
        std_ev=std,
        ci_95_low=mean - ci_margin,
        ci_95_high=mean + ci_margin,
        n_wins=int(np.sum(payouts > 0)),
        n_losses=int(np.sum(payouts < 0)),
        n_pushes=int(np.sum(payouts == 0)),
        visits=visits,
    )


def _play_chart_hands(
    master: MasterCursor,
    chart: np.ndarray,
    n_hands: int,
    trace: TraceSink,
) -> SimulationResult:
    players = [Player("Player 1")]
    visits = np.zeros((NUM_PLAYER_BUCKETS, NUM_DEALER_BUCKETS), dtype=np.int64)
    payouts = np.array(
        [play_chart_round(master, chart, players, visits, trace) for _ in range(n_hands)],
        dtype=np.float64,
    )
    return _summarise(payouts, visits)


def evaluate_chart(
    chart: np.ndarray,
    n_hands: int = 100_000,
    config: SimulationConfig = SimulationConfig(),
    trace: TraceSink = no_trace,
) -> SimulationResult:
    """Play ``n_hands`` rounds with a fixed chart and summarise the payouts.

    Raises:
        ValueError: If n_hands < 2 (the sample deviation is undefined).
    """
    if n_hands < 2:
        raise ValueError(f"n_hands must be >= 2, got {n_hands}.")
    return _play_chart_hands(config.make_master_cursor(), chart, n_hands, trace)


# ─── Chart hill climbing ──────────────────────────────────────────────────────

@dataclass
class HillClimbResult:
    """Best chart found by hill_climb().

    Attributes:
        chart:        The best chart.
        mean_ev:      Its evaluated mean payout per round.
        evaluation:   Full statistics of the best chart's evaluation.
        round_evs:    Mean payout of the candidate evaluated in each round.
        improvements: Rounds whose candidate replaced the best chart.
    """
    chart: np.ndarray
    mean_ev: float
    evaluation: SimulationResult
    round_evs: list[float]
    improvements: int

    def __str__(self) -> str:
        return (
            f"Rounds: {len(self.round_evs):,} | "
            f"Best EV: {self.mean_ev:+.4f} | "
            f"Improvements: {self.improvements:,}"
        )


def hill_climb(
    chart: np.ndarray | None = None,
    rounds: int = 200,
    n_hands: int = 100_000,
    config: SimulationConfig = SimulationConfig(),
    cells_per_step: int = 5,
    warmup_rounds: int = 10,
    trace: TraceSink = no_trace,
) -> HillClimbResult:
    """Search for a better fixed chart by random local changes.

    Each round copies the best chart so far, redraws ``cells_per_step`` random
    cells (not during the first ``warmup_rounds`` rounds, which re-evaluate the
    starting chart), and plays ``n_hands`` rounds with it. A candidate whose
    mean payout beats the best so far replaces it. One numpy Generator seeded
    from ``config.seed`` drives both the shoe and the cell changes, and all
    rounds share one shoe.

    Args:
        chart:          Starting chart; a random chart if None.
        rounds:         Candidates to evaluate.
        n_hands:        Rounds played per candidate.
        config:         Shoe settings and seed (``iterations`` is not used).
        cells_per_step: Cells redrawn per candidate.
        warmup_rounds:  Leading rounds that evaluate the chart unchanged.
        trace:          Narrative sink, also told about each improvement.

    Returns:
        HillClimbResult with the best chart and its EV.

    Raises:
        ValueError: If rounds < 1 or n_hands < 2.
    """
    if rounds < 1:
        raise ValueError(f"rounds must be >= 1, got {rounds}.")
    if n_hands < 2:
        raise ValueError(f"n_hands must be >= 2, got {n_hands}.")

    rng = config.make_rng()
    master = config.make_master_cursor(rng)
    best_chart = random_chart(rng) if chart is None else chart.copy()
    best: SimulationResult | None = None
    round_evs: list[float] = []
    improvements = 0

    for round_no in range(rounds):
        candidate = best_chart
        if round_no >= warmup_rounds:
            candidate = perturb_chart(best_chart, cells_per_step, rng)

        result = _play_chart_hands(master, candidate, n_hands, trace)
        round_evs.append(result.mean_ev)
        improved = best is not None and result.mean_ev > best.mean_ev
        if best is None or improved:
            best_chart, best = candidate, result
        if improved:
            improvements += 1
            trace(f"Best EV (round {round_no}): {result.mean_ev:+.4f}")

    return HillClimbResult(
        chart=best_chart,
        mean_ev=best.mean_ev,
        evaluation=best,
        round_evs=round_evs,
        improvements=improvements,
    )


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    iterations = int(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_ITERATIONS
    result = train(SimulationConfig(iterations=iterations))
    print(format_results_grid(result.table))
