"""Game engine for Pitch - drives the phase state machine for one room."""
import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

import config
from ai import PitchAI
from models import (
    Room, Card, Bid, TrickPlay, CapturedTrick, Seat, Phase, GameMode,
    create_deck, shuffle_deck, deal_hands, no_bid, sort_hand, TRICKS_PER_HAND,
)
from rules import (
    get_team, get_valid_bids, get_playable_cards, bid_takes_lead, all_passed_to_dealer,
    evaluate_trick, score_hand, update_scores, next_dealer, cut_for_deal, get_live_points,
)

logger = logging.getLogger(__name__)


class GameError(Exception):
    """Base exception for game errors."""
    pass


class InvalidMoveError(GameError):
    """Raised when a player makes an invalid move."""
    pass


class InvalidPhaseError(GameError):
    """Raised when an action is attempted in the wrong phase."""
    pass


class NotAuthorizedError(GameError):
    """Raised when the actor is not in the room or it is not their turn."""
    pass


# Seats driven by people, per game mode. Every other seat is an AI.
HUMAN_SEATS = {
    GameMode.VERSUS: (Seat.SOUTH, Seat.WEST),
    GameMode.COOP: (Seat.SOUTH, Seat.NORTH),
    GameMode.SOLO: (Seat.SOUTH,),
}

AI_NAMES = {
    GameMode.VERSUS: {Seat.NORTH: "ACE", Seat.EAST: "BLITZ"},
    GameMode.COOP: {Seat.WEST: "SPIKE", Seat.EAST: "BLITZ"},
    GameMode.SOLO: {Seat.WEST: "West", Seat.NORTH: "Partner", Seat.EAST: "East"},
}

WAITING_NAME = "Waiting..."

# Which room field names the seat on turn, per phase
ACTIVE_SEAT_FIELD = {
    Phase.BIDDING: "current_bidder",
    Phase.PITCHING: "current_player",
    Phase.TRICK_PLAY: "current_player",
}


@dataclass(frozen=True)
class Pacing:
    """Minimum ms since the last action before the engine acts on its own."""
    ai_delay: int
    ai_bid_delay: int
    cut_delay: int
    deal_delay: int
    trick_pause: int
    hand_over_delay: int


SERVER_PACING = Pacing(
    ai_delay=config.AI_DELAY,
    ai_bid_delay=config.AI_DELAY,
    cut_delay=config.CUT_DELAY,
    deal_delay=config.DEAL_DELAY,
    trick_pause=config.PHASE_DELAY,
    hand_over_delay=config.HAND_OVER_DELAY,
)

SOLO_PACING = Pacing(
    ai_delay=config.SOLO_AI_DELAY,
    ai_bid_delay=config.SOLO_AI_BID_DELAY,
    cut_delay=config.SOLO_CUT_DELAY,
    deal_delay=config.DEAL_DELAY,
    trick_pause=config.SOLO_TRICK_PAUSE,
    hand_over_delay=config.SOLO_HAND_OVER_DELAY,
)


def now_ms() -> int:
    return int(time.time() * 1000)


def initial_player_names(game_mode: GameMode, player_name: str) -> dict[int, str]:
    names = {seat: WAITING_NAME for seat in HUMAN_SEATS[game_mode]}
    names.update(AI_NAMES[game_mode])
    names[Seat.SOUTH] = player_name
    return {int(k): v for k, v in names.items()}


class GameEngine:
    """Manages one room's state and enforces the rules of Pitch.

    Player actions are validated completely before anything is changed, so a
    rejected action leaves the room exactly as it was.
    """

    def __init__(self, room: Room, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], int]] = None,
                 pacing: Pacing = SERVER_PACING, move_logger=None):
        self.room = room
        self.rng = rng or random.Random()
        self.clock = clock or now_ms
        self.pacing = pacing
        self.move_logger = move_logger
        self.ai = PitchAI(room.difficulty, self.rng)
        self._tick_handlers = {
            Phase.CUT_FOR_DEAL: self._enter_dealing,
            Phase.DEALING: self._deal,
            Phase.BIDDING: self._tick_ai,
            Phase.PITCHING: self._tick_ai,
            Phase.TRICK_PLAY: self._tick_ai,
            Phase.TRICK_COLLECT: self._collect_trick,
            Phase.HAND_OVER: self._next_hand,
        }

    # === Seats ===

    @property
    def human_seats(self) -> tuple:
        return HUMAN_SEATS[self.room.game_mode]

    def is_ai_seat(self, seat: Optional[int]) -> bool:
        return seat is not None and seat not in self.human_seats

    def player2_seat(self) -> Optional[int]:
        seats = self.human_seats
        return seats[1] if len(seats) > 1 else None

    def seat_of(self, player_id: str) -> Optional[int]:
        room = self.room
        if room.player1 and room.player1.id == player_id:
            return Seat.SOUTH
        if room.player2 and room.player2.id == player_id:
            return self.player2_seat()
        return None

    def active_seat(self) -> Optional[int]:
        """Seat whose decision the game is waiting on, if any."""
        field_name = ACTIVE_SEAT_FIELD.get(self.room.phase)
        if field_name is None:
            return None
        return getattr(self.room, field_name)

    def _name(self, seat: int) -> str:
        return self.room.player_names.get(int(seat), f"Seat {seat}")

    def _touch(self, now: Optional[int]):
        self.room.last_action_at = self.clock() if now is None else now

    # === Game setup ===

    def start_game(self, now: Optional[int] = None):
        """Cut for deal. The highest card deals the first hand."""
        room = self.room
        cut_cards, winner = cut_for_deal(shuffle_deck(create_deck(), self.rng))
        room.phase = Phase.CUT_FOR_DEAL
        room.cut_cards = cut_cards
        room.cut_winner = winner
        room.dealer = winner
        room.status_msg = f"{self._name(winner)} deals first"
        self._touch(now)
        logger.debug("room %s: cut for deal, dealer=%s", room.room_code, winner)

    def _enter_dealing(self, now: Optional[int] = None):
        room = self.room
        room.phase = Phase.DEALING
        room.status_msg = "Dealing..."
        self._touch(now)

    def _deal(self, now: Optional[int] = None):
        """Deal a new hand and open the bidding left of the dealer."""
        room = self.room
        hands = deal_hands(room.dealer, self.rng)
        room.hands = hands
        room.original_hands = [list(h) for h in hands]
        room.phase = Phase.BIDDING
        room.bids = []
        room.high_bid = no_bid()
        room.bid_bubbles = {}
        room.ai_preferred_suit = {}
        room.current_bidder = (room.dealer + 1) % 4
        room.current_player = None
        room.bidding_team = None
        room.bid_amount = 0
        room.trump_suit = None
        room.trick_plays = []
        room.trick_number = 1
        room.captured_tricks = []
        room.trick_winner = None
        room.hand_result = None
        room.was_set = False
        room.game_winner = None
        room.cut_cards = []
        room.cut_winner = None
        room.status_msg = f"{self._name(room.current_bidder)} is bidding..."
        self._touch(now)
        logger.debug("room %s: hand %d dealt by %s", room.room_code, room.hand_number, room.dealer)

    # === Bidding ===

    def legal_bids(self, seat: int) -> list[int]:
        room = self.room
        if room.phase != Phase.BIDDING or room.current_bidder != seat:
            return []
        return get_valid_bids(
            room.high_bid.amount,
            seat == room.dealer,
            all_passed_to_dealer(room.bids, room.high_bid),
        )

    def bid(self, seat: int, amount: int, now: Optional[int] = None):
        """Record a bid (0 = pass) for the seat on turn."""
        room = self.room
        if room.phase != Phase.BIDDING:
            raise InvalidPhaseError("Not bidding phase")
        if room.current_bidder != seat:
            raise NotAuthorizedError("Not your turn to bid")
        options = self.legal_bids(seat)
        if amount not in options:
            raise InvalidMoveError(f"Invalid bid: {amount}")

        self._log_move(seat, [str(b) for b in options], str(amount))
        self._apply_bid(seat, amount, now)

    def _apply_bid(self, seat: int, amount: int, now: Optional[int]):
        room = self.room
        if bid_takes_lead(amount, room.high_bid, seat == room.dealer):
            room.high_bid = Bid(seat=seat, amount=amount)
        room.bids.append(Bid(seat=seat, amount=amount))
        room.bid_bubbles[seat] = "PASS" if amount == 0 else f"BID {amount}"

        if len(room.bids) >= 4:
            winner = room.high_bid.seat
            room.phase = Phase.PITCHING
            room.current_bidder = None
            room.current_player = winner
            room.bidding_team = get_team(winner)
            room.bid_amount = room.high_bid.amount
            room.status_msg = f"{self._name(winner)} won the bid with {room.bid_amount}"
            logger.debug("room %s: %s won the bid with %d", room.room_code, winner, room.bid_amount)
        else:
            room.current_bidder = (seat + 1) % 4
            room.status_msg = f"{self._name(room.current_bidder)} is bidding..."
        self._touch(now)

    # === Playing ===

    def legal_cards(self, seat: int) -> list[Card]:
        room = self.room
        if room.current_player != seat:
            return []
        hand = room.hands[seat]
        if room.phase == Phase.PITCHING:
            return list(hand)
        if room.phase == Phase.TRICK_PLAY:
            return get_playable_cards(hand, room.trump_suit, room.led_suit)
        return []

    def play_card(self, seat: int, card: Card, now: Optional[int] = None):
        """Play a card. While pitching, the card's suit becomes trump."""
        room = self.room
        if room.phase not in (Phase.PITCHING, Phase.TRICK_PLAY):
            raise InvalidPhaseError("Cannot play now")
        if room.current_player != seat:
            raise NotAuthorizedError("Not your turn")
        if card not in room.hands[seat]:
            raise InvalidMoveError("Card not in hand")
        options = self.legal_cards(seat)
        if card not in options:
            raise InvalidMoveError("Card not playable")

        self._log_move(seat, [c.display() for c in options], card.display())
        if room.phase == Phase.PITCHING:
            self._apply_pitch(seat, card, now)
        else:
            self._apply_play(seat, card, now)

    def _apply_pitch(self, seat: int, card: Card, now: Optional[int]):
        room = self.room
        room.trump_suit = card.suit
        room.phase = Phase.TRICK_PLAY
        room.status_msg = ""
        logger.debug("room %s: %s pitched %s", room.room_code, seat, card.display())
        self._apply_play(seat, card, now)

    def _apply_play(self, seat: int, card: Card, now: Optional[int]):
        room = self.room
        room.hands[seat] = [c for c in room.hands[seat] if c != card]
        room.trick_plays.append(TrickPlay(player=seat, card=card))

        if len(room.trick_plays) >= 4:
            winner = evaluate_trick(room.trick_plays, room.trump_suit)
            room.trick_winner = winner
            room.captured_tricks.append(CapturedTrick(winner=winner, cards=list(room.trick_plays)))
            room.phase = Phase.TRICK_COLLECT
            room.current_player = None
            room.status_msg = f"{self._name(winner)} wins the trick!"
        else:
            room.current_player = (seat + 1) % 4
            room.status_msg = f"{self._name(room.current_player)} is playing..."
        self._touch(now)

    def _collect_trick(self, now: Optional[int] = None):
        room = self.room
        if room.trick_number >= TRICKS_PER_HAND:
            self._score_hand(now)
            return

        leader = room.captured_tricks[-1].winner
        room.trick_number += 1
        room.trick_plays = []
        room.trick_winner = None
        room.current_player = leader
        room.phase = Phase.TRICK_PLAY
        room.status_msg = f"{self._name(leader)} leads..."
        self._touch(now)

    # === Scoring ===

    def _score_hand(self, now: Optional[int]):
        room = self.room
        result = score_hand(room.original_hands, room.captured_tricks, room.trump_suit)
        update = update_scores(room.scores, room.bidding_team, room.bid_amount, result)
        room.scores = update.new_scores
        room.hand_result = result
        room.was_set = update.was_set
        room.game_winner = update.game_winner
        room.trick_plays = []
        room.phase = Phase.GAME_OVER if update.game_winner is not None else Phase.HAND_OVER

        if update.game_winner is not None:
            room.status_msg = f"Team {update.game_winner.name} wins the game!"
        elif update.was_set:
            room.status_msg = "Set back!"
        else:
            room.status_msg = f"Bid made: {room.bid_amount}"
        self._touch(now)
        logger.info("room %s: hand %d scored %s, scores=%s", room.room_code,
                    room.hand_number, result.points_won, room.scores)

    def _next_hand(self, now: Optional[int] = None):
        room = self.room
        room.dealer = next_dealer(room.dealer)
        room.hand_number += 1
        self._enter_dealing(now)

    # === Rematch ===

    def request_rematch(self, seat: int, now: Optional[int] = None) -> bool:
        """Flag a human seat as ready. Returns True once the new game starts."""
        room = self.room
        if seat not in self.human_seats:
            raise NotAuthorizedError("Only players can request a rematch")
        if room.phase != Phase.GAME_OVER:
            raise InvalidPhaseError("Game is not over")

        key = "p1" if seat == Seat.SOUTH else "p2"
        room.rematch[key] = True
        needed = ["p1", "p2"] if len(self.human_seats) > 1 else ["p1"]
        if not all(room.rematch.get(k) for k in needed):
            self._touch(now)
            return False

        room.scores = [0, 0]
        room.game_number += 1
        room.hand_number = 0
        room.rematch = {"p1": False, "p2": False}
        room.game_winner = None
        room.hand_result = None
        room.hands = [[], [], [], []]
        self.start_game(now)
        logger.info("room %s: rematch, game %d", room.room_code, room.game_number)
        return True

    # === Timed transitions ===

    def due_in(self, now: Optional[int] = None) -> Optional[int]:
        """Ms until the engine may act on its own, or None if waiting on a person."""
        room = self.room
        pacing = self.pacing
        phase = room.phase

        if phase == Phase.CUT_FOR_DEAL:
            delay = pacing.cut_delay
        elif phase == Phase.DEALING:
            delay = pacing.deal_delay
        elif phase == Phase.TRICK_COLLECT:
            delay = pacing.trick_pause
        elif phase == Phase.HAND_OVER:
            delay = pacing.hand_over_delay
        elif phase in ACTIVE_SEAT_FIELD and self.is_ai_seat(self.active_seat()):
            delay = pacing.ai_bid_delay if phase == Phase.BIDDING else pacing.ai_delay
        else:
            return None

        now = self.clock() if now is None else now
        return max(0, delay - (now - room.last_action_at))

    def tick(self, now: Optional[int] = None, force: bool = False) -> bool:
        """Apply at most one timed transition or AI action. Returns True if state changed."""
        now = self.clock() if now is None else now
        due = self.due_in(now)
        if due is None or (due > 0 and not force):
            return False
        self._tick_handlers[self.room.phase](now)
        return True

    def _tick_ai(self, now: Optional[int] = None):
        self.take_ai_turn(now=now)

    def take_ai_turn(self, ai: Optional[PitchAI] = None, now: Optional[int] = None):
        """Let an AI decide for the seat on turn and apply its choice."""
        room = self.room
        ai = ai or self.ai
        seat = self.active_seat()
        if seat is None:
            raise InvalidPhaseError("No decision pending")
        hand = room.hands[seat]

        if room.phase == Phase.BIDDING:
            decision = ai.choose_bid(
                hand,
                room.high_bid.amount,
                seat == room.dealer,
                all_passed_to_dealer(room.bids, room.high_bid),
            )
            if decision.bid > 0:
                room.ai_preferred_suit[seat] = decision.preferred_suit
            self.bid(seat, decision.bid, now)
        elif room.phase == Phase.PITCHING:
            preferred = room.ai_preferred_suit.get(seat) or (hand[0].suit if hand else None)
            self.play_card(seat, ai.choose_trump_card(hand, preferred), now)
        else:
            card = ai.choose_card(hand, room.trump_suit, room.trick_plays, seat, room.captured_tricks)
            self.play_card(seat, card, now)

    # === Views ===

    def player_view(self, seat: int, live_points: bool = False) -> dict:
        """Room state as one seat may see it: own hand only, counts for the rest.

        The live tally names the dealt High and Low trumps, so it is only
        included for the local solo game.
        """
        room = self.room
        my_hand = sort_hand(room.hands[seat]) if room.hands else []
        view = {
            "room_code": room.room_code,
            "game_mode": room.game_mode.value,
            "difficulty": room.difficulty.value,
            "my_seat": int(seat),
            "phase": room.phase.value,
            "dealer": int(room.dealer),
            "trump_suit": room.trump_suit.value if room.trump_suit else None,
            "my_hand": [c.to_dict() for c in my_hand],
            "hand_counts": [len(h) for h in room.hands],
            "current_player": room.current_player,
            "current_bidder": room.current_bidder,
            "bids": [b.to_dict() for b in room.bids],
            "high_bid": room.high_bid.to_dict(),
            "bid_bubbles": {str(k): v for k, v in room.bid_bubbles.items()},
            "trick_plays": [p.to_dict() for p in room.trick_plays],
            "trick_number": room.trick_number,
            "trick_winner": room.trick_winner,
            "scores": list(room.scores),
            "hand_number": room.hand_number,
            "game_number": room.game_number,
            "playable_cards": [c.to_dict() for c in self.legal_cards(seat)],
            "valid_bids": self.legal_bids(seat),
            "player_names": {str(k): v for k, v in room.player_names.items()},
            "cut_cards": [p.to_dict() for p in room.cut_cards],
            "cut_winner": room.cut_winner,
            "hand_result": room.hand_result.to_dict() if room.hand_result else None,
            "was_set": room.was_set,
            "game_winner": None if room.game_winner is None else int(room.game_winner),
            "waiting": room.phase == Phase.WAITING,
            "rematch": dict(room.rematch),
            "status_msg": room.status_msg,
        }
        if live_points:
            view["live_points"] = get_live_points(
                room.original_hands, room.captured_tricks, room.trump_suit)
        return view

    def _log_move(self, seat: int, options: list[str], executed: str):
        logger.debug("room %s: %s -> %s", self.room.room_code, self._name(seat), executed)
        if self.move_logger:
            self.move_logger.log_step(f"{self._name(seat)}: " + ", ".join(options), executed)
