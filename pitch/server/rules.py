"""Pitch rules: bidding, legal plays, trick evaluation and scoring.

Everything here is a pure function of its arguments.
"""
from dataclasses import dataclass
from typing import Optional

from models import (
    Card, Suit, Seat, Team, Bid, TrickPlay, CapturedTrick, HandResult,
    CUT_SUIT_RANK, JACK,
)

WIN_SCORE = 11
MIN_BID = 2
MAX_BID = 4


# === Seats and teams ===

def get_team(seat: int) -> Team:
    return Team.A if seat in (Seat.SOUTH, Seat.NORTH) else Team.B


def get_partner(seat: int) -> int:
    return (seat + 2) % 4


def other_team(team: Team) -> Team:
    return Team.B if team == Team.A else Team.A


def next_dealer(dealer: int) -> int:
    return (dealer + 1) % 4


# === Bidding ===

def all_passed_to_dealer(bids: list[Bid], high_bid: Bid) -> bool:
    """True when the three players before the dealer have all passed."""
    return len(bids) == 3 and high_bid.amount == 0


def get_valid_bids(current_high_bid: int, is_dealer: bool, all_passed: bool) -> list[int]:
    """Legal bid amounts for the player on turn. 0 means pass.

    Non-dealers must bid strictly higher than the current high bid. The dealer
    may match a standing bid to take it, and must bid when everyone passed.
    """
    if all_passed and is_dealer:
        return [2, 3, 4]

    lowest = current_high_bid + 1
    if is_dealer and current_high_bid > 0:
        lowest = current_high_bid
    return [0] + list(range(max(MIN_BID, lowest), MAX_BID + 1))


def bid_takes_lead(amount: int, high_bid: Bid, is_dealer: bool) -> bool:
    """Whether an accepted bid becomes the new high bid."""
    if amount == 0:
        return False
    if amount > high_bid.amount:
        return True
    return is_dealer and amount == high_bid.amount


# === Card play ===

def get_playable_cards(hand: list[Card], trump_suit: Optional[Suit],
                       led_suit: Optional[Suit]) -> list[Card]:
    """Cards the player may legally play.

    Only a trump lead must be followed; any other lead allows any card.
    """
    if led_suit is None:
        return list(hand)

    if led_suit == trump_suit:
        trumps = [c for c in hand if c.suit == trump_suit]
        return trumps if trumps else list(hand)

    return list(hand)


def card_beats(a: Card, b: Card, trump_suit: Optional[Suit], led_suit: Optional[Suit]) -> bool:
    """Check if card a beats card b."""
    a_trump = a.suit == trump_suit
    b_trump = b.suit == trump_suit
    if a_trump and not b_trump:
        return True
    if b_trump and not a_trump:
        return False
    if a_trump and b_trump:
        return a.rank > b.rank

    # Neither is trump
    if a.suit == led_suit and b.suit == led_suit:
        return a.rank > b.rank
    return a.suit == led_suit


def current_winner(trick_plays: list[TrickPlay], trump_suit: Optional[Suit]) -> TrickPlay:
    """The play currently holding the trick."""
    if not trick_plays:
        raise ValueError("No cards in trick")

    led_suit = trick_plays[0].card.suit
    best = trick_plays[0]
    for play in trick_plays[1:]:
        if card_beats(play.card, best.card, trump_suit, led_suit):
            best = play
    return best


def evaluate_trick(trick_plays: list[TrickPlay], trump_suit: Optional[Suit]) -> int:
    """Seat that wins the trick."""
    return current_winner(trick_plays, trump_suit).player


# === Scoring ===

def _dealt_to(original_hands: list[list[Card]], card: Card) -> Optional[int]:
    for seat, hand in enumerate(original_hands):
        if card in hand:
            return seat
    return None


def _captured_by_team(captured_tricks: list[CapturedTrick]) -> list[list[Card]]:
    captured = [[], []]
    for trick in captured_tricks:
        captured[get_team(trick.winner)].extend(p.card for p in trick.cards)
    return captured


def _game_totals(captured: list[list[Card]]) -> list[int]:
    return [sum(c.game_points for c in cards) for cards in captured]


def score_hand(original_hands: list[list[Card]], captured_tricks: list[CapturedTrick],
               trump_suit: Suit) -> HandResult:
    """Award High, Low, Jack and Game for a completed hand.

    High and Low go to the team that was dealt the card; Jack goes to the team
    that captured it; Game goes to the larger captured game-point total.
    """
    captured = _captured_by_team(captured_tricks)
    trumps_dealt = [c for hand in original_hands for c in hand if c.suit == trump_suit]

    high = low = jack = None
    if trumps_dealt:
        highest = max(trumps_dealt, key=lambda c: c.rank)
        lowest = min(trumps_dealt, key=lambda c: c.rank)
        high = get_team(_dealt_to(original_hands, highest))
        low = get_team(_dealt_to(original_hands, lowest))

    jack_card = Card(rank=JACK, suit=trump_suit)
    if jack_card in trumps_dealt:
        for team in (Team.A, Team.B):
            if jack_card in captured[team]:
                jack = team
                break

    totals = _game_totals(captured)
    game = None
    if totals[Team.A] > totals[Team.B]:
        game = Team.A
    elif totals[Team.B] > totals[Team.A]:
        game = Team.B

    points_won = [0, 0]
    for winner in (high, low, jack, game):
        if winner is not None:
            points_won[winner] += 1

    return HandResult(high=high, low=low, jack=jack, game=game,
                      points_won=points_won, game_totals=totals)


@dataclass
class ScoreUpdate:
    new_scores: list[int]
    was_set: bool
    game_winner: Optional[Team]


def update_scores(scores: list[int], bidding_team: Team, bid_amount: int,
                  hand_result: HandResult) -> ScoreUpdate:
    """Apply a hand result to the running scores.

    The defending team always banks its points. The bidding team banks its
    points if it made the bid, otherwise it loses the full bid amount. The
    bidding team is checked for the win first.
    """
    new_scores = list(scores)
    defending = other_team(bidding_team)

    new_scores[defending] += hand_result.points_won[defending]

    was_set = hand_result.points_won[bidding_team] < bid_amount
    if was_set:
        new_scores[bidding_team] -= bid_amount
    else:
        new_scores[bidding_team] += hand_result.points_won[bidding_team]

    game_winner = None
    if new_scores[bidding_team] >= WIN_SCORE:
        game_winner = bidding_team
    elif new_scores[defending] >= WIN_SCORE:
        game_winner = defending

    return ScoreUpdate(new_scores=new_scores, was_set=was_set, game_winner=game_winner)


def get_live_points(original_hands: list[list[Card]], captured_tricks: list[CapturedTrick],
                    trump_suit: Optional[Suit]) -> Optional[dict]:
    """Running point tally while a hand is being played."""
    if trump_suit is None:
        return None

    trumps_dealt = [c for hand in original_hands for c in hand if c.suit == trump_suit]
    high = low = None
    high_card = low_card = None
    if trumps_dealt:
        high_card = max(trumps_dealt, key=lambda c: c.rank)
        low_card = min(trumps_dealt, key=lambda c: c.rank)
        high = get_team(_dealt_to(original_hands, high_card))
        low = get_team(_dealt_to(original_hands, low_card))

    jack_card = Card(rank=JACK, suit=trump_suit)
    jack_exists = jack_card in trumps_dealt
    jack = None
    if jack_exists:
        for trick in captured_tricks:
            if any(p.card == jack_card for p in trick.cards):
                jack = get_team(trick.winner)
                break

    totals = _game_totals(_captured_by_team(captured_tricks))

    def team(t):
        return None if t is None else int(t)

    return {
        "high": team(high),
        "high_card": high_card.to_dict() if high_card else None,
        "low": team(low),
        "low_card": low_card.to_dict() if low_card else None,
        "jack": team(jack),
        "jack_exists": jack_exists,
        "game_totals": totals,
    }


# === Cut for deal ===

def cut_for_deal(deck: list[Card]) -> tuple[list[TrickPlay], int]:
    """Draw one card per seat from South clockwise; the highest card deals.

    Equal ranks are broken by suit: spades, hearts, diamonds, clubs.
    """
    cut_cards = [TrickPlay(player=seat, card=deck[seat]) for seat in range(4)]
    winner = max(cut_cards, key=lambda p: (p.card.rank, CUT_SUIT_RANK[p.card.suit]))
    return cut_cards, winner.player
