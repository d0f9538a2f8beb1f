"""Computer players for Pitch.

An AI seat only sees its own hand and the public bid/trick history.
"""
import random
from dataclasses import dataclass
from typing import Optional

from models import (
    Card, Suit, Difficulty, TrickPlay, CapturedTrick, SUITS,
    ACE, KING, QUEEN, JACK,
)
from rules import get_playable_cards, card_beats, current_winner, get_partner, get_team

# Expected points needed for each bid
BID_THRESHOLDS = {
    4: 3.2,
    3: 2.5,
    2: 1.8,
}

RANDOM_PLAY_CHANCE = {Difficulty.EASY: 0.4}
UNDERBID_CHANCE = {Difficulty.EASY: 0.2, Difficulty.MEDIUM: 0.15}

# Trumps at or below these ranks are kept out of harm's way
LOW_TRUMP = 5
VERY_LOW_TRUMP = 3


def _highest(cards: list[Card]) -> Card:
    return max(cards, key=lambda c: c.rank)


def _lowest(cards: list[Card]) -> Card:
    return min(cards, key=lambda c: c.rank)


def hand_game_points(hand: list[Card]) -> int:
    return sum(c.game_points for c in hand)


def evaluate_expected_points(hand: list[Card], suit: Suit) -> float:
    """Estimate how many of High/Low/Jack/Game this hand wins with `suit` as trump."""
    trumps = [c for c in hand if c.suit == suit]
    if not trumps:
        return 0.0

    ranks = {c.rank for c in trumps}
    has_ace = ACE in ranks
    has_king = KING in ranks
    has_queen = QUEEN in ranks
    has_jack = JACK in ranks
    has_ten = 10 in ranks
    lowest = min(ranks)
    count = len(trumps)

    expected = 0.0

    # High
    if has_ace:
        expected += 0.95
    elif has_king and count >= 3:
        expected += 0.35
    elif has_king:
        expected += 0.2
    elif has_queen and count >= 3:
        expected += 0.1

    # Low
    if lowest == 2:
        expected += 0.85
    elif lowest == 3:
        expected += 0.55
    elif lowest == 4:
        expected += 0.3
    elif lowest == 5:
        expected += 0.15

    # Jack
    if has_jack:
        if has_ace and count >= 3:
            expected += 0.75
        elif has_ace:
            expected += 0.55
        elif count >= 3:
            expected += 0.4
        else:
            expected += 0.25
    elif has_ace and count >= 3:
        expected += 0.15  # may catch an opponent's jack

    # Game
    points = hand_game_points(hand)
    if points >= 16:
        expected += 0.7
    elif points >= 12:
        expected += 0.45
    elif points >= 8:
        expected += 0.25
    else:
        expected += 0.1
    if has_ten and (has_ace or count >= 3):
        expected += 0.1  # the trump ten is likely to come home

    return expected


@dataclass
class BidDecision:
    bid: int
    preferred_suit: Suit


class PitchAI:
    """Heuristic player. Randomness comes only from `rng`."""

    def __init__(self, difficulty: Difficulty = Difficulty.MEDIUM,
                 rng: Optional[random.Random] = None):
        self.difficulty = Difficulty(difficulty)
        self.rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Bidding
    # ------------------------------------------------------------------

    def choose_bid(self, hand: list[Card], current_high_bid: int, is_dealer: bool,
                   all_passed: bool) -> BidDecision:
        best_suit = SUITS[0]
        best_exp = -1.0
        for suit in SUITS:
            exp = evaluate_expected_points(hand, suit)
            if exp > best_exp:
                best_exp = exp
                best_suit = suit

        bid = 0
        for amount in (4, 3, 2):
            if best_exp >= BID_THRESHOLDS[amount]:
                bid = amount
                break

        chance = UNDERBID_CHANCE.get(self.difficulty, 0.0)
        if bid > 2 and chance and self.rng.random() < chance:
            bid -= 1

        # The dealer may match the high bid; everyone else must beat it
        if bid > 0:
            if bid < current_high_bid or (bid == current_high_bid and not is_dealer):
                bid = 0
        if all_passed and is_dealer and bid == 0:
            bid = 2

        return BidDecision(bid=bid, preferred_suit=best_suit)

    def choose_trump_card(self, hand: list[Card], preferred_suit: Optional[Suit]) -> Card:
        """Pitch the highest card of the preferred suit to pull opponents' trump."""
        suit_cards = [c for c in hand if c.suit == preferred_suit]
        if suit_cards:
            return _highest(suit_cards)
        return _highest(hand)

    # ------------------------------------------------------------------
    # Card play
    # ------------------------------------------------------------------

    def choose_card(self, hand: list[Card], trump_suit: Suit, trick_plays: list[TrickPlay],
                    seat: int, captured_tricks: Optional[list[CapturedTrick]] = None) -> Card:
        led_suit = trick_plays[0].card.suit if trick_plays else None
        playable = get_playable_cards(hand, trump_suit, led_suit)

        if len(playable) == 1:
            return playable[0]

        chance = RANDOM_PLAY_CHANCE.get(self.difficulty, 0.0)
        if chance and self.rng.random() < chance:
            return self.rng.choice(playable)

        if not trick_plays:
            return self._pick_lead(playable, trump_suit)
        return self._pick_follow(playable, trump_suit, trick_plays, seat)

    def _pick_lead(self, playable: list[Card], trump_suit: Suit) -> Card:
        trumps = [c for c in playable if c.suit == trump_suit]
        non_trumps = [c for c in playable if c.suit != trump_suit]
        ranks = {c.rank for c in trumps}

        if ACE in ranks:
            return next(c for c in trumps if c.rank == ACE)

        # Leading K/Q would leave a short jack unguarded
        thin_jack = JACK in ranks and len(trumps) <= 2 and bool(non_trumps)
        honours = [c for c in trumps if c.rank in (KING, QUEEN)]
        if honours and not thin_jack:
            return _highest(honours)

        if non_trumps:
            high = [c for c in non_trumps if c.rank >= KING]
            if high:
                return _highest(high)
            return _lowest(non_trumps)

        return _highest(trumps)

    def _pick_follow(self, playable: list[Card], trump_suit: Suit,
                     trick_plays: list[TrickPlay], seat: int) -> Card:
        led_suit = trick_plays[0].card.suit
        winning = current_winner(trick_plays, trump_suit)
        last_to_act = len(trick_plays) == 3

        def is_low_trump(c: Card) -> bool:
            return c.suit == trump_suit and c.rank <= LOW_TRUMP

        if winning.player == get_partner(seat):
            if last_to_act:
                if self.difficulty == Difficulty.HARD:
                    game_cards = [c for c in playable if c.suit != trump_suit and c.game_points > 0]
                    if game_cards:
                        return max(game_cards, key=lambda c: (c.game_points, c.rank))
                return _lowest(playable)
            safe = [c for c in playable if not is_low_trump(c)]
            return _lowest(safe or playable)

        winners = [c for c in playable if card_beats(c, winning.card, trump_suit, led_suit)]
        if winners:
            my_team = get_team(seat)
            opponent_low_trump = any(
                get_team(p.player) != my_team and p.card.suit == trump_suit
                and p.card.rank <= VERY_LOW_TRUMP
                for p in trick_plays
            )
            if opponent_low_trump:
                return _highest(winners)
            unprotected = [c for c in winners if not is_low_trump(c)]
            return _lowest(unprotected or winners)

        worthless = [c for c in playable if c.game_points == 0 and not is_low_trump(c)]
        if worthless:
            return _lowest(worthless)
        not_low_trump = [c for c in playable if not is_low_trump(c)]
        return _lowest(not_low_trump or playable)


# === Module-level helpers ===

def get_ai_bid(hand: list[Card], current_high_bid: int, is_dealer: bool, all_passed: bool,
               difficulty: Difficulty = Difficulty.MEDIUM,
               rng: Optional[random.Random] = None) -> BidDecision:
    return PitchAI(difficulty, rng).choose_bid(hand, current_high_bid, is_dealer, all_passed)


def get_ai_trump_card(hand: list[Card], preferred_suit: Optional[Suit]) -> Card:
    return PitchAI().choose_trump_card(hand, preferred_suit)


def get_ai_play(hand: list[Card], trump_suit: Suit, trick_plays: list[TrickPlay], seat: int,
                captured_tricks: Optional[list[CapturedTrick]] = None,
                difficulty: Difficulty = Difficulty.MEDIUM,
                rng: Optional[random.Random] = None) -> Card:
    return PitchAI(difficulty, rng).choose_card(hand, trump_suit, trick_plays, seat, captured_tricks)
