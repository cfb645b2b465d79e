"""Tests for src/engine/hand.py — hand value, soft aces, and hand state types."""

from __future__ import annotations

import pytest

from src.engine.hand import (
    DealerHand,
    Player,
    PlayerHand,
    PlayerSubHand,
    calculate_total,
    hand_value,
    is_blackjack,
    is_bust,
    is_soft,
    pay_out,
    render_hand,
)
from tests.conftest import dealer_hand, hand, stacked_cursor, subhand


# ─── hand_value tests ─────────────────────────────────────────────────────────

class TestHandValue:
    def test_king_queen(self):
        assert hand_value(hand('KS', 'QH')) == (20, False)

    def test_ace_king(self):
        assert hand_value(hand('AS', 'KH')) == (21, True)

    def test_ace_ace_nine(self):
        # 11+11+9=31 -> one ace reduced -> 21, one ace still at 11
        assert hand_value(hand('AS', 'AH', '9D')) == (21, True)

    def test_ace_ace(self):
        assert hand_value(hand('AS', 'AH')) == (12, True)

    def test_ace_six_is_soft_seventeen(self):
        assert hand_value(hand('AC', '6D')) == (17, True)

    def test_ace_seven_eight_is_hard(self):
        assert hand_value(hand('AS', '7H', '8D')) == (16, False)

    def test_three_aces(self):
        assert hand_value(hand('AS', 'AH', 'AD')) == (13, True)

    def test_four_aces_and_king(self):
        # 44+10 -> all four aces reduced -> 14, hard
        assert hand_value(hand('AS', 'AH', 'AD', 'AC', 'KS')) == (14, False)

    def test_bust_total(self):
        assert hand_value(hand('KS', 'QH', '5D')) == (25, False)

    def test_empty_hand(self):
        assert hand_value([]) == (0, False)

    def test_helpers_agree(self):
        cards = hand('AS', '5H')
        assert calculate_total(cards) == 16
        assert is_soft(cards)


class TestBlackjack:
    def test_ace_king_is_blackjack(self):
        assert is_blackjack(hand('AS', 'KH'))

    def test_king_queen_is_not(self):
        assert not is_blackjack(hand('KS', 'QH'))

    def test_three_card_21_is_not(self):
        assert not is_blackjack(hand('7S', '7H', '7D'))
        assert not is_blackjack(hand('AS', 'AH', '9D'))

    def test_two_card_21_always_blackjack(self):
        for a in range(52):
            for b in range(52):
                if calculate_total([a, b]) == 21:
                    assert is_blackjack([a, b])

    def test_is_bust(self):
        assert not is_bust(21)
        assert is_bust(22)


class TestRender:
    def test_render_all(self):
        assert render_hand(hand('AS', 'KD')) == 'AS, KD'

    def test_render_hides_hole_card(self):
        assert render_hand(hand('AS', 'KD'), hide_first=True) == 'KD'


# ─── State types ──────────────────────────────────────────────────────────────

class TestHand:
    def test_derived_values_follow_mutation(self):
        sub = subhand('AS', '6H')
        assert sub.value == 17 and sub.is_soft
        sub.add_card(hand('KD')[0])
        assert sub.value == 17 and not sub.is_soft
        sub.add_card(hand('5C')[0])
        assert sub.is_busted

    def test_copy_is_independent(self):
        sub = subhand('8S', '8H', bet=2.0)
        clone = sub.copy()
        clone.add_card(0)
        clone.bet = 4.0
        assert len(sub.cards) == 2
        assert sub.bet == 2.0
        assert isinstance(clone, PlayerSubHand)


class TestDealerHand:
    def test_showing_is_second_card(self):
        dealer = dealer_hand('KS', 'AH')
        assert dealer.showing() == 11

    def test_showing_ignores_concealment(self):
        dealer = dealer_hand('AS', '6H')
        assert dealer.hole_hidden
        assert dealer.showing() == 6
        dealer.flip()
        assert dealer.showing() == 6

    def test_flip_exposes_render(self):
        dealer = dealer_hand('AS', '6H')
        assert dealer.render(hide_first=dealer.hole_hidden) == '6H'
        dealer.flip()
        assert dealer.render(hide_first=dealer.hole_hidden) == 'AS, 6H'

    def test_value_uses_hole_card_while_hidden(self):
        assert dealer_hand('AS', 'KH').is_blackjack

    def test_copy_keeps_flag(self):
        dealer = dealer_hand('2S', '3S')
        dealer.flip()
        clone = dealer.copy()
        assert isinstance(clone, DealerHand)
        assert clone.hole_hidden is False


class TestPlayerSubHandCanHit:
    def test_fresh_hand_can_hit(self):
        assert subhand('9S', '5H').can_hit()

    def test_busted_cannot_hit(self):
        assert not subhand('KS', 'QH', '5D').can_hit()

    def test_blackjack_cannot_hit(self):
        assert not subhand('AS', 'KH').can_hit()

    def test_twenty_one_cannot_hit(self):
        assert not subhand('7S', '7H', '7D').can_hit()

    def test_twenty_can_hit(self):
        assert subhand('KS', 'QH').can_hit()

    def test_split_ace_cannot_hit(self):
        assert not subhand('AS', '5H', from_split=True).can_hit()

    def test_split_non_ace_can_hit(self):
        assert subhand('8S', '3H', from_split=True).can_hit()

    def test_unsplit_ace_can_hit(self):
        assert subhand('AS', '5H').can_hit()

    def test_finished_cannot_hit(self):
        sub = subhand('9S', '5H')
        sub.stand()
        assert not sub.can_hit()


class TestPlayerSubHandSplitDouble:
    def test_can_split_needs_same_face(self):
        assert subhand('8S', '8H').can_split()
        assert not subhand('JS', 'QH').can_split()
        assert not subhand('8S', '8H', '2C').can_split()

    def test_can_double_down_only_two_cards(self):
        assert subhand('5S', '6H').can_double_down()
        assert not subhand('2S', '3H', '6C').can_double_down()

    def test_double_down(self):
        sub = subhand('5S', '6H')
        sub.double_down(hand('KD')[0])
        assert sub.bet == 2.0
        assert sub.value == 21
        assert sub.finished
        assert not sub.can_hit()

    def test_double_down_on_three_cards_raises(self):
        sub = subhand('2S', '3H', '6C')
        with pytest.raises(ValueError):
            sub.double_down(0)

    def test_split(self):
        sub = subhand('8S', '8H', owner=2)
        cursor = stacked_cursor('3C', 'KD')
        sibling = sub.split(cursor)
        # The new subhand is dealt to first.
        assert sibling.cards == hand('8H', '3C')
        assert sub.cards == hand('8S', 'KD')
        assert sub.from_split and sibling.from_split
        assert sibling.owner == 2
        assert sibling.bet == 1.0
        assert cursor.offset == 2

    def test_split_non_pair_raises(self):
        with pytest.raises(ValueError):
            subhand('8S', '9H').split(stacked_cursor('2S', '2H'))

    def test_split_aces_then_cannot_hit(self):
        sub = subhand('AS', 'AH')
        sibling = sub.split(stacked_cursor('5C', '6D'))
        assert not sub.can_hit()
        assert not sibling.can_hit()


class TestPlayerHand:
    def test_for_player(self):
        player = PlayerHand.for_player(3)
        assert len(player) == 1
        assert player.primary.owner == 3
        assert player.primary.cards == []

    def test_append(self):
        player = PlayerHand.for_player()
        player.append(PlayerSubHand())
        assert len(player) == 2

    def test_copy_is_deep(self):
        player = PlayerHand([subhand('8S', '8H')])
        clone = player.copy()
        clone.primary.add_card(0)
        clone.append(PlayerSubHand())
        assert len(player) == 1
        assert len(player.primary.cards) == 2


class TestPlayer:
    def test_expected_value_without_hands(self):
        assert Player('p').expected_value == 0.0

    def test_tally(self):
        p = Player('p')
        p.signal_new_hand()
        p.signal_new_hand()
        p.adjust_money(1.5)
        p.adjust_money(-0.5)
        assert p.expected_value == pytest.approx(0.5)

    def test_clear_stats(self):
        p = Player('p', money=3.0, hands=2)
        p.clear_stats()
        assert p.money == 0.0 and p.hands == 0

    def test_pay_out_scales_by_bet_and_resolves_owner(self):
        players = [Player('a'), Player('b')]
        sub = subhand('5S', '6H', owner=1, bet=2.0)
        assert pay_out(players, sub, -1.0) == -2.0
        assert players[1].money == -2.0
        assert players[0].money == 0.0
