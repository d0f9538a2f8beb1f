"""Online rooms: two people plus AI seats, kept in sync by polling.

Each request loads the whole room, applies one action or one engine tick, and
writes the whole room back.
"""
import logging
import random
from typing import Callable, Optional

import config
from db import RoomStore
from engine import GameEngine, GameError, NotAuthorizedError, initial_player_names, now_ms
from game_logger import GameLogger
from models import Room, Card, Participant, Seat, Difficulty, GameMode

logger = logging.getLogger(__name__)

ROOM_CHARS = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
CODE_LENGTH = 4
CODE_ATTEMPTS = 10


class RoomNotFoundError(GameError):
    """Raised when the room does not exist or has expired."""
    pass


class RoomFullError(GameError):
    """Raised when both human seats are taken."""
    pass


class RoomService:
    """The request/poll protocol on top of a room store."""

    def __init__(self, store: RoomStore, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], int]] = None,
                 log_dir: Optional[str] = None, ttl: int = config.ROOM_TTL):
        self.store = store
        self.rng = rng or random.Random()
        self.clock = clock or now_ms
        self.log_dir = config.GAME_LOG_DIR if log_dir is None else log_dir
        self.ttl = ttl

    # === Persistence ===

    @staticmethod
    def _key(code: str) -> str:
        return f"{config.ROOM_KEY_PREFIX}{code}"

    def _load(self, code: str) -> Room:
        data = self.store.get(self._key(code))
        if data is None:
            raise RoomNotFoundError("Room not found")
        return Room.from_dict(data)

    def _save(self, room: Room):
        self.store.set(self._key(room.room_code), room.to_dict(), self.ttl)

    def _engine(self, room: Room) -> GameEngine:
        move_logger = GameLogger(room.room_code, self.log_dir) if self.log_dir else None
        return GameEngine(room, rng=self.rng, clock=self.clock, move_logger=move_logger)

    def _seat(self, engine: GameEngine, player_id: str) -> int:
        seat = engine.seat_of(player_id)
        if seat is None:
            raise NotAuthorizedError("Not in this room")
        return seat

    def _generate_code(self) -> str:
        code = ''
        for _ in range(CODE_ATTEMPTS):
            code = ''.join(self.rng.choice(ROOM_CHARS) for _ in range(CODE_LENGTH))
            if self.store.get(self._key(code)) is None:
                break
        return code

    # === Actions ===

    def create(self, player_id: str, player_name: str, difficulty: str = 'medium',
               game_mode: str = 'versus') -> dict:
        mode = GameMode(game_mode or 'versus')
        if mode == GameMode.SOLO:
            raise GameError("Solo games are played locally")
        room = Room(
            room_code=self._generate_code(),
            game_mode=mode,
            difficulty=Difficulty(difficulty or 'medium'),
            player1=Participant(id=player_id, name=player_name),
            player_names=initial_player_names(mode, player_name),
            last_action_at=self.clock(),
        )
        self._save(room)
        logger.info("room %s created by %s (%s, %s)", room.room_code, player_name,
                    mode.value, room.difficulty.value)
        return {"room_code": room.room_code, "my_seat": int(Seat.SOUTH)}

    def join(self, code: str, player_id: str, player_name: str) -> dict:
        code = code.upper()
        room = self._load(code)
        engine = self._engine(room)

        # Rejoining returns the same seat and changes nothing
        seat = engine.seat_of(player_id)
        if seat is not None:
            return {"room_code": code, "my_seat": int(seat)}
        if room.player2 is not None:
            raise RoomFullError("Room is full")

        p2_seat = engine.player2_seat()
        room.player2 = Participant(id=player_id, name=player_name)
        room.player_names[int(p2_seat)] = player_name
        engine.start_game()
        self._save(room)
        logger.info("room %s joined by %s at seat %d", code, player_name, p2_seat)
        return {"room_code": code, "my_seat": int(p2_seat)}

    def bid(self, code: str, player_id: str, amount: int) -> dict:
        room = self._load(code)
        engine = self._engine(room)
        seat = self._seat(engine, player_id)
        engine.bid(seat, amount)
        self._save(room)
        return {"ok": True}

    def play(self, code: str, player_id: str, card: Card) -> dict:
        room = self._load(code)
        engine = self._engine(room)
        seat = self._seat(engine, player_id)
        engine.play_card(seat, card)
        self._save(room)
        return {"ok": True}

    def rematch(self, code: str, player_id: str) -> dict:
        room = self._load(code)
        engine = self._engine(room)
        seat = self._seat(engine, player_id)
        engine.request_rematch(seat)
        self._save(room)
        return {"ok": True}

    def poll(self, code: str, player_id: str) -> dict:
        """Advance the room by at most one tick and return the caller's view."""
        room = self._load(code)
        engine = self._engine(room)
        seat = self._seat(engine, player_id)
        if engine.tick():
            self._save(room)
        return engine.player_view(seat)
