"""Tests for the AI bidding, trump and card-play heuristics."""
import random
import pytest

from ai import PitchAI, evaluate_expected_points, get_ai_bid, get_ai_trump_card, get_ai_play
from models import Card, Suit, Seat, Difficulty, TrickPlay, deal_hands
from rules import get_playable_cards

S, H, D, C = Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS

STRONG_SPADES = [Card(14, S), Card(13, S), Card(11, S), Card(2, S), Card(10, H), Card(12, D)]
WEAK_HAND = [Card(3, H), Card(4, H), Card(6, D), Card(9, D), Card(7, C), Card(8, C)]


def plays(*pairs):
    return [TrickPlay(player=seat, card=card) for seat, card in pairs]


class TestExpectedPoints:

    def test_void_suit_scores_zero(self):
        assert evaluate_expected_points(WEAK_HAND, S) == 0

    def test_strong_suit(self):
        assert evaluate_expected_points(STRONG_SPADES, S) == pytest.approx(3.25)

    def test_more_high_trump_scores_higher(self):
        base = [Card(9, S), Card(6, S), Card(4, H), Card(5, D), Card(7, C), Card(8, C)]
        with_ace = [Card(14, S)] + base[1:]
        assert evaluate_expected_points(with_ace, S) > evaluate_expected_points(base, S)

    def test_lower_trump_scores_higher(self):
        with_three = [Card(9, S), Card(3, S), Card(4, H), Card(5, D), Card(7, C), Card(8, C)]
        with_two = [Card(9, S), Card(2, S), Card(4, H), Card(5, D), Card(7, C), Card(8, C)]
        assert evaluate_expected_points(with_two, S) > evaluate_expected_points(with_three, S)

    def test_more_game_points_score_higher(self):
        poor = [Card(9, S), Card(3, S), Card(4, H), Card(5, D), Card(7, C), Card(8, C)]
        rich = [Card(9, S), Card(3, S), Card(10, H), Card(14, D), Card(13, C), Card(8, C)]
        assert evaluate_expected_points(rich, S) > evaluate_expected_points(poor, S)


class TestBidding:

    def ai(self):
        return PitchAI(Difficulty.HARD, random.Random(0))

    def test_strong_hand_bids_four_in_best_suit(self):
        decision = self.ai().choose_bid(STRONG_SPADES, 0, is_dealer=False, all_passed=False)
        assert decision.bid == 4
        assert decision.preferred_suit == S

    def test_weak_hand_passes(self):
        decision = self.ai().choose_bid(WEAK_HAND, 0, is_dealer=False, all_passed=False)
        assert decision.bid == 0

    def test_non_dealer_cannot_match(self):
        decision = self.ai().choose_bid(STRONG_SPADES, 4, is_dealer=False, all_passed=False)
        assert decision.bid == 0

    def test_dealer_may_match(self):
        decision = self.ai().choose_bid(STRONG_SPADES, 4, is_dealer=True, all_passed=False)
        assert decision.bid == 4

    def test_forced_dealer_bids_two(self):
        decision = self.ai().choose_bid(WEAK_HAND, 0, is_dealer=True, all_passed=True)
        assert decision.bid == 2

    def test_easier_tiers_only_shave_bids_down(self):
        for seed in range(50):
            for difficulty in (Difficulty.EASY, Difficulty.MEDIUM):
                bid = get_ai_bid(STRONG_SPADES, 0, False, False, difficulty, random.Random(seed)).bid
                assert bid in (3, 4)

    def test_seeded_bids_are_reproducible(self):
        first = [get_ai_bid(STRONG_SPADES, 0, False, False, Difficulty.EASY, random.Random(s)).bid
                 for s in range(20)]
        second = [get_ai_bid(STRONG_SPADES, 0, False, False, Difficulty.EASY, random.Random(s)).bid
                  for s in range(20)]
        assert first == second


class TestTrumpCard:

    def test_highest_of_preferred_suit(self):
        assert get_ai_trump_card(STRONG_SPADES, S) == Card(14, S)

    def test_falls_back_to_highest_card(self):
        hand = [Card(9, H), Card(13, D), Card(4, C)]
        assert get_ai_trump_card(hand, S) == Card(13, D)


class TestLead:

    def lead(self, hand, trump=S):
        return PitchAI(Difficulty.HARD, random.Random(0)).choose_card(hand, trump, [], Seat.SOUTH)

    def test_leads_ace_of_trump(self):
        assert self.lead([Card(5, H), Card(14, S), Card(9, S)]) == Card(14, S)

    def test_leads_king_of_trump_without_thin_jack(self):
        assert self.lead([Card(13, S), Card(4, S), Card(9, H), Card(5, D)]) == Card(13, S)
        assert self.lead([Card(13, S), Card(11, S), Card(3, S), Card(4, D)]) == Card(13, S)

    def test_protects_thin_jack(self):
        assert self.lead([Card(13, S), Card(11, S), Card(14, H), Card(4, D)]) == Card(14, H)

    def test_chases_game_with_high_off_suit(self):
        assert self.lead([Card(4, S), Card(13, C), Card(9, H)]) == Card(13, C)

    def test_leads_lowest_off_suit(self):
        assert self.lead([Card(4, S), Card(9, H), Card(5, D), Card(12, C)]) == Card(5, D)

    def test_only_trump_left(self):
        assert self.lead([Card(4, S), Card(9, S)]) == Card(9, S)


class TestFollow:

    def follow(self, hand, trick, difficulty=Difficulty.HARD, seat=Seat.SOUTH, trump=S):
        return PitchAI(difficulty, random.Random(0)).choose_card(hand, trump, trick, seat)

    def test_partner_winning_keeps_low_trump(self):
        trick = plays((Seat.NORTH, Card(13, H)), (Seat.EAST, Card(4, H)))
        hand = [Card(3, S), Card(8, D), Card(6, C)]
        assert self.follow(hand, trick) == Card(6, C)

    def test_partner_winning_last_dumps_game_points_on_hard(self):
        trick = plays((Seat.WEST, Card(5, D)), (Seat.NORTH, Card(14, D)), (Seat.EAST, Card(2, D)))
        hand = [Card(10, C), Card(13, H), Card(4, D), Card(7, S)]
        assert self.follow(hand, trick) == Card(10, C)

    def test_partner_winning_last_throws_low_on_medium(self):
        trick = plays((Seat.WEST, Card(5, D)), (Seat.NORTH, Card(14, D)), (Seat.EAST, Card(2, D)))
        hand = [Card(10, C), Card(13, H), Card(4, D), Card(7, S)]
        assert self.follow(hand, trick, Difficulty.MEDIUM) == Card(4, D)

    def test_wins_with_lowest_unprotected_winner(self):
        trick = plays((Seat.EAST, Card(9, H)),)
        hand = [Card(3, S), Card(8, S), Card(12, H), Card(5, D)]
        assert self.follow(hand, trick) == Card(8, S)

    def test_overtakes_opponent_low_trump_decisively(self):
        trick = plays((Seat.WEST, Card(7, H)), (Seat.NORTH, Card(5, H)), (Seat.EAST, Card(3, S)))
        hand = [Card(6, S), Card(10, S), Card(13, S), Card(4, D)]
        assert self.follow(hand, trick) == Card(13, S)

    def test_discards_worthless_card_when_beaten(self):
        trick = plays((Seat.WEST, Card(13, S)), (Seat.NORTH, Card(4, H)), (Seat.EAST, Card(2, D)))
        hand = [Card(11, H), Card(3, D), Card(7, C), Card(10, D)]
        assert self.follow(hand, trick) == Card(3, D)

    def test_single_legal_card_is_played(self):
        trick = plays((Seat.WEST, Card(14, S)),)
        hand = [Card(3, S), Card(13, H), Card(10, D)]
        assert self.follow(hand, trick, Difficulty.EASY) == Card(3, S)


class TestLegality:

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_ai_plays_are_always_legal(self, difficulty):
        rng = random.Random(17)
        for _ in range(100):
            hands = deal_hands(rng.randrange(4), rng)
            trump = rng.choice(list(Suit))
            trick = []
            for i in range(4):
                seat = (1 + i) % 4
                card = get_ai_play(hands[seat], trump, trick, seat, [], difficulty, rng)
                led = trick[0].card.suit if trick else None
                assert card in get_playable_cards(hands[seat], trump, led)
                trick.append(TrickPlay(player=seat, card=card))
