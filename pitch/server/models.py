"""Game models for Pitch."""
from enum import IntEnum, Enum
from dataclasses import dataclass, field
from typing import Optional
import random


# === Enums ===

class Suit(Enum):
    SPADES = "S"
    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"


class Seat(IntEnum):
    SOUTH = 0
    WEST = 1
    NORTH = 2
    EAST = 3


class Team(IntEnum):
    A = 0   # South + North
    B = 1   # West + East


class Phase(Enum):
    WAITING = "waiting"
    CUT_FOR_DEAL = "cutForDeal"
    DEALING = "dealing"
    BIDDING = "bidding"
    PITCHING = "pitching"
    TRICK_PLAY = "trickPlay"
    TRICK_COLLECT = "trickCollect"
    HAND_OVER = "handOver"
    GAME_OVER = "gameOver"


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GameMode(Enum):
    VERSUS = "versus"   # humans South/West, AI North/East
    COOP = "coop"       # humans South/North, AI West/East
    SOLO = "solo"       # human South, AI everywhere else


# === Mappings ===

# Display and dealing order
SUITS = [Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS]

# Only used to break ties when cutting for deal
CUT_SUIT_RANK = {
    Suit.SPADES: 4,
    Suit.HEARTS: 3,
    Suit.DIAMONDS: 2,
    Suit.CLUBS: 1,
}

SUIT_SYMBOLS = {
    Suit.SPADES: "♠",
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
}

RANKS = list(range(2, 15))

JACK = 11
QUEEN = 12
KING = 13
ACE = 14

RANK_NAMES = {
    2: "2", 3: "3", 4: "4", 5: "5", 6: "6", 7: "7", 8: "8", 9: "9",
    10: "10", JACK: "J", QUEEN: "Q", KING: "K", ACE: "A",
}

# Card values counted toward the "Game" point, regardless of suit
GAME_POINT_VALUES = {10: 10, ACE: 4, KING: 3, QUEEN: 2, JACK: 1}

SEAT_NAMES = {
    Seat.SOUTH: "South",
    Seat.WEST: "West",
    Seat.NORTH: "North",
    Seat.EAST: "East",
}

CARDS_PER_HAND = 6
TRICKS_PER_HAND = 6


# === Models ===

@dataclass(frozen=True)
class Card:
    rank: int
    suit: Suit

    def __post_init__(self):
        if isinstance(self.rank, bool) or not isinstance(self.rank, int) or self.rank not in RANK_NAMES:
            raise ValueError(f"Invalid rank: {self.rank}")
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def id(self) -> str:
        return f"{self.rank}-{self.suit.value}"

    @property
    def game_points(self) -> int:
        return GAME_POINT_VALUES.get(self.rank, 0)

    def display(self) -> str:
        return f"{RANK_NAMES[self.rank]}{SUIT_SYMBOLS[self.suit]}"

    def to_dict(self) -> dict:
        return {"rank": self.rank, "suit": self.suit.value}

    @classmethod
    def from_dict(cls, data: dict) -> "Card":
        return cls(rank=data["rank"], suit=Suit(data["suit"]))

    @classmethod
    def from_id(cls, card_id: str) -> "Card":
        rank_str, suit_str = card_id.split("-")
        return cls(rank=int(rank_str), suit=Suit(suit_str))


def card_id(card: Card) -> str:
    return card.id


def card_equals(a: Card, b: Card) -> bool:
    return a.rank == b.rank and a.suit == b.suit


def card_display(card: Card) -> str:
    return card.display()


def sort_hand(hand: list[Card]) -> list[Card]:
    """Group by suit (S, H, D, C), rank high to low within a suit."""
    return sorted(hand, key=lambda c: (SUITS.index(c.suit), -c.rank))


# === Deck ===

def create_deck() -> list[Card]:
    """Create the standard 52-card deck in suit/rank order."""
    deck = [Card(rank=rank, suit=suit) for suit in SUITS for rank in RANKS]
    if len(set(deck)) != 52:
        raise ValueError("Deck must contain 52 unique cards")
    return deck


def shuffle_deck(deck: list[Card], rng: Optional[random.Random] = None) -> list[Card]:
    """Return a shuffled copy of the deck (Fisher-Yates)."""
    rng = rng or random.Random()
    d = list(deck)
    for i in range(len(d) - 1, 0, -1):
        j = rng.randint(0, i)
        d[i], d[j] = d[j], d[i]
    return d


def deal_hands(dealer: int, rng: Optional[random.Random] = None) -> list[list[Card]]:
    """Deal 6 cards to each seat: two rounds of 3, starting left of the dealer."""
    deck = shuffle_deck(create_deck(), rng)
    hands = [[], [], [], []]
    idx = 0

    for _ in range(2):
        for i in range(1, 5):
            seat = (dealer + i) % 4
            hands[seat].extend(deck[idx:idx + 3])
            idx += 3

    return [sort_hand(h) for h in hands]


# === Game state ===

@dataclass
class Bid:
    seat: int
    amount: int  # 0 = pass

    def is_pass(self) -> bool:
        return self.amount == 0

    def to_dict(self) -> dict:
        return {"seat": self.seat, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: dict) -> "Bid":
        return cls(seat=data["seat"], amount=data["amount"])


def no_bid() -> Bid:
    return Bid(seat=-1, amount=0)


@dataclass
class TrickPlay:
    player: int
    card: Card

    def to_dict(self) -> dict:
        return {"player": self.player, "card": self.card.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "TrickPlay":
        return cls(player=data["player"], card=Card.from_dict(data["card"]))


@dataclass
class CapturedTrick:
    winner: int
    cards: list[TrickPlay] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"winner": self.winner, "cards": [p.to_dict() for p in self.cards]}

    @classmethod
    def from_dict(cls, data: dict) -> "CapturedTrick":
        return cls(winner=data["winner"], cards=[TrickPlay.from_dict(p) for p in data["cards"]])


@dataclass
class HandResult:
    high: Optional[Team]
    low: Optional[Team]
    jack: Optional[Team]
    game: Optional[Team]
    points_won: list[int]
    game_totals: list[int]

    def to_dict(self) -> dict:
        def team(t):
            return None if t is None else int(t)
        return {
            "high": team(self.high),
            "low": team(self.low),
            "jack": team(self.jack),
            "game": team(self.game),
            "points_won": list(self.points_won),
            "game_totals": list(self.game_totals),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HandResult":
        def team(t):
            return None if t is None else Team(t)
        return cls(
            high=team(data["high"]),
            low=team(data["low"]),
            jack=team(data["jack"]),
            game=team(data["game"]),
            points_won=list(data["points_won"]),
            game_totals=list(data["game_totals"]),
        )


@dataclass
class Participant:
    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["Participant"]:
        if not data:
            return None
        return cls(id=data["id"], name=data["name"])


def _cards(data) -> list[Card]:
    return [Card.from_dict(c) for c in data]


def _int_keys(data: dict) -> dict:
    return {int(k): v for k, v in data.items()}


@dataclass
class Room:
    room_code: str
    game_mode: GameMode = GameMode.VERSUS
    difficulty: Difficulty = Difficulty.MEDIUM
    player1: Optional[Participant] = None
    player2: Optional[Participant] = None
    player_names: dict[int, str] = field(default_factory=dict)

    phase: Phase = Phase.WAITING
    dealer: int = Seat.SOUTH
    hands: list[list[Card]] = field(default_factory=lambda: [[], [], [], []])
    original_hands: list[list[Card]] = field(default_factory=lambda: [[], [], [], []])
    trump_suit: Optional[Suit] = None
    current_player: Optional[int] = None
    current_bidder: Optional[int] = None

    bids: list[Bid] = field(default_factory=list)
    high_bid: Bid = field(default_factory=no_bid)
    bid_bubbles: dict[int, str] = field(default_factory=dict)
    ai_preferred_suit: dict[int, Suit] = field(default_factory=dict)
    bidding_team: Optional[Team] = None
    bid_amount: int = 0

    trick_plays: list[TrickPlay] = field(default_factory=list)
    trick_number: int = 1
    captured_tricks: list[CapturedTrick] = field(default_factory=list)
    trick_winner: Optional[int] = None

    scores: list[int] = field(default_factory=lambda: [0, 0])
    hand_result: Optional[HandResult] = None
    was_set: bool = False
    game_winner: Optional[Team] = None
    hand_number: int = 0
    game_number: int = 0

    cut_cards: list[TrickPlay] = field(default_factory=list)
    cut_winner: Optional[int] = None
    rematch: dict[str, bool] = field(default_factory=lambda: {"p1": False, "p2": False})
    status_msg: str = ""
    last_action_at: int = 0

    @property
    def led_suit(self) -> Optional[Suit]:
        if self.trick_plays:
            return self.trick_plays[0].card.suit
        return None

    def to_dict(self) -> dict:
        return {
            "room_code": self.room_code,
            "game_mode": self.game_mode.value,
            "difficulty": self.difficulty.value,
            "player1": self.player1.to_dict() if self.player1 else None,
            "player2": self.player2.to_dict() if self.player2 else None,
            "player_names": {str(k): v for k, v in self.player_names.items()},
            "phase": self.phase.value,
            "dealer": int(self.dealer),
            "hands": [[c.to_dict() for c in h] for h in self.hands],
            "original_hands": [[c.to_dict() for c in h] for h in self.original_hands],
            "trump_suit": self.trump_suit.value if self.trump_suit else None,
            "current_player": self.current_player,
            "current_bidder": self.current_bidder,
            "bids": [b.to_dict() for b in self.bids],
            "high_bid": self.high_bid.to_dict(),
            "bid_bubbles": {str(k): v for k, v in self.bid_bubbles.items()},
            "ai_preferred_suit": {str(k): v.value for k, v in self.ai_preferred_suit.items()},
            "bidding_team": None if self.bidding_team is None else int(self.bidding_team),
            "bid_amount": self.bid_amount,
            "trick_plays": [p.to_dict() for p in self.trick_plays],
            "trick_number": self.trick_number,
            "captured_tricks": [t.to_dict() for t in self.captured_tricks],
            "trick_winner": self.trick_winner,
            "scores": list(self.scores),
            "hand_result": self.hand_result.to_dict() if self.hand_result else None,
            "was_set": self.was_set,
            "game_winner": None if self.game_winner is None else int(self.game_winner),
            "hand_number": self.hand_number,
            "game_number": self.game_number,
            "cut_cards": [p.to_dict() for p in self.cut_cards],
            "cut_winner": self.cut_winner,
            "rematch": dict(self.rematch),
            "status_msg": self.status_msg,
            "last_action_at": self.last_action_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Room":
        bidding_team = data.get("bidding_team")
        game_winner = data.get("game_winner")
        return cls(
            room_code=data["room_code"],
            game_mode=GameMode(data.get("game_mode", "versus")),
            difficulty=Difficulty(data.get("difficulty", "medium")),
            player1=Participant.from_dict(data.get("player1")),
            player2=Participant.from_dict(data.get("player2")),
            player_names=_int_keys(data.get("player_names", {})),
            phase=Phase(data["phase"]),
            dealer=data.get("dealer", 0),
            hands=[_cards(h) for h in data.get("hands", [[], [], [], []])],
            original_hands=[_cards(h) for h in data.get("original_hands", [[], [], [], []])],
            trump_suit=Suit(data["trump_suit"]) if data.get("trump_suit") else None,
            current_player=data.get("current_player"),
            current_bidder=data.get("current_bidder"),
            bids=[Bid.from_dict(b) for b in data.get("bids", [])],
            high_bid=Bid.from_dict(data["high_bid"]) if data.get("high_bid") else no_bid(),
            bid_bubbles=_int_keys(data.get("bid_bubbles", {})),
            ai_preferred_suit={int(k): Suit(v) for k, v in data.get("ai_preferred_suit", {}).items()},
            bidding_team=None if bidding_team is None else Team(bidding_team),
            bid_amount=data.get("bid_amount", 0),
            trick_plays=[TrickPlay.from_dict(p) for p in data.get("trick_plays", [])],
            trick_number=data.get("trick_number", 1),
            captured_tricks=[CapturedTrick.from_dict(t) for t in data.get("captured_tricks", [])],
            trick_winner=data.get("trick_winner"),
            scores=list(data.get("scores", [0, 0])),
            hand_result=HandResult.from_dict(data["hand_result"]) if data.get("hand_result") else None,
            was_set=data.get("was_set", False),
            game_winner=None if game_winner is None else Team(game_winner),
            hand_number=data.get("hand_number", 0),
            game_number=data.get("game_number", 0),
            cut_cards=[TrickPlay.from_dict(p) for p in data.get("cut_cards", [])],
            cut_winner=data.get("cut_winner"),
            rematch=dict(data.get("rematch", {"p1": False, "p2": False})),
            status_msg=data.get("status_msg", ""),
            last_action_at=data.get("last_action_at", 0),
        )
