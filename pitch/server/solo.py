"""Local game: one person at South against three AI seats.

Runs the same GameEngine as the server. Instead of polling, every engine step is
scheduled on a timer for the pacing delay. Each scheduled callback remembers the
generation it was scheduled in; reset() and close() start a new generation so a
late timer can never act on a fresh game.
"""
import logging
import random
import threading
from typing import Callable, Optional

from engine import GameEngine, SOLO_PACING, initial_player_names, now_ms
from models import Room, Card, Participant, Seat, Difficulty, GameMode

logger = logging.getLogger(__name__)


class TimerScheduler:
    """Runs callbacks on threading.Timer threads."""

    def __init__(self):
        self._timers = []
        self._lock = threading.Lock()

    def call_later(self, delay_ms: int, callback: Callable[[], None]):
        timer = threading.Timer(delay_ms / 1000.0, callback)
        timer.daemon = True
        with self._lock:
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()

    def cancel_all(self):
        with self._lock:
            for timer in self._timers:
                timer.cancel()
            self._timers = []


class ManualScheduler:
    """Collects callbacks until run_pending() is called. Used in tests and tools."""

    def __init__(self):
        self.pending = []   # [(delay_ms, callback)]

    def call_later(self, delay_ms: int, callback: Callable[[], None]):
        self.pending.append((delay_ms, callback))

    def cancel_all(self):
        self.pending = []

    def run_pending(self) -> int:
        """Run everything scheduled so far. Returns how many callbacks ran."""
        batch, self.pending = self.pending, []
        for _, callback in batch:
            callback()
        return len(batch)


class SoloGame:
    def __init__(self, player_name: str = "You", difficulty: str = "medium",
                 scheduler=None, rng: Optional[random.Random] = None,
                 on_change: Optional[Callable[[dict], None]] = None):
        self.player_name = player_name
        self.difficulty = Difficulty(difficulty)
        self.scheduler = scheduler or TimerScheduler()
        self.rng = rng or random.Random()
        self.on_change = on_change
        self._lock = threading.RLock()
        self._generation = 0
        self.engine = None
        self.reset()

    @property
    def room(self) -> Room:
        return self.engine.room

    def reset(self):
        """Throw away the current game and start a new one from the cut."""
        with self._lock:
            self._generation += 1
            self.scheduler.cancel_all()
            room = Room(
                room_code="SOLO",
                game_mode=GameMode.SOLO,
                difficulty=self.difficulty,
                player1=Participant(id="local", name=self.player_name),
                player_names=initial_player_names(GameMode.SOLO, self.player_name),
            )
            self.engine = GameEngine(room, rng=self.rng, pacing=SOLO_PACING)
            self.engine.start_game()
            self._schedule()

    def close(self):
        with self._lock:
            self._generation += 1
            self.scheduler.cancel_all()

    # === Player actions ===

    def bid(self, amount: int):
        with self._lock:
            self.engine.bid(Seat.SOUTH, amount)
            self._changed()

    def play(self, card: Card):
        with self._lock:
            self.engine.play_card(Seat.SOUTH, card)
            self._changed()

    def rematch(self):
        with self._lock:
            self.engine.request_rematch(Seat.SOUTH)
            self._changed()

    def view(self) -> dict:
        with self._lock:
            return self.engine.player_view(Seat.SOUTH, live_points=True)

    # === Scheduling ===

    def _changed(self):
        self._schedule()
        if self.on_change:
            self.on_change(self.engine.player_view(Seat.SOUTH, live_points=True))

    def _schedule(self):
        delay = self.engine.due_in()
        if delay is None:
            return
        generation = self._generation
        self.scheduler.call_later(delay, lambda: self._step(generation))

    def _step(self, generation: int):
        with self._lock:
            if generation != self._generation:
                logger.debug("dropping stale step from generation %d", generation)
                return
            if self.engine.tick(now=now_ms(), force=True):
                self._changed()
