"""HTTP client for the room API.

Transport problems never raise: every call returns a dict, with an "error" key
on failure. "not_found" is set when the server says the room is gone, so the
caller can tell an expired room from a rejected move.
"""
import time
import uuid
from typing import Callable, Optional

import requests

import config


class RoomClient:
    def __init__(self, base_url: str, session: Optional[requests.Session] = None,
                 player_id: Optional[str] = None):
        self.url = base_url.rstrip('/') + '/api/room'
        self.session = session or requests.Session()
        self.player_id = player_id or str(uuid.uuid4())

    @staticmethod
    def _result(r: requests.Response, label: str) -> dict:
        if r.ok:
            return r.json()
        try:
            data = r.json()
        except ValueError:
            data = {}
        return {
            'error': data.get('error') or f'{label} failed ({r.status_code})',
            'status': r.status_code,
            'not_found': r.status_code == 404,
        }

    def _post(self, body: dict) -> dict:
        try:
            r = self.session.post(self.url, json=body, timeout=config.REQUEST_TIMEOUT)
        except requests.Timeout:
            return {'error': 'Request timed out'}
        except requests.RequestException:
            return {'error': 'Network error'}
        return self._result(r, 'Request')

    def poll(self, code: str) -> dict:
        try:
            r = self.session.get(self.url, params={'code': code, 'playerId': self.player_id},
                                 timeout=config.POLL_TIMEOUT)
        except requests.Timeout:
            return {'error': 'Poll timed out'}
        except requests.RequestException:
            return {'error': 'Network error'}
        return self._result(r, 'Poll')

    def watch(self, code: str, on_view: Callable[[dict], bool],
              interval_ms: int = config.POLL_MS) -> dict:
        """Poll until on_view returns False or the room is gone. Returns the last result."""
        while True:
            result = self.poll(code)
            if result.get('not_found') or not on_view(result):
                return result
            time.sleep(interval_ms / 1000.0)

    def create(self, player_name: str, difficulty: str = 'medium', game_mode: str = 'versus') -> dict:
        return self._post({'action': 'create', 'playerId': self.player_id,
                           'playerName': player_name, 'difficulty': difficulty,
                           'gameMode': game_mode})

    def join(self, code: str, player_name: str) -> dict:
        return self._post({'action': 'join', 'code': code.upper(),
                           'playerId': self.player_id, 'playerName': player_name})

    def bid(self, code: str, amount: int) -> dict:
        return self._post({'action': 'bid', 'code': code, 'playerId': self.player_id, 'bid': amount})

    def play(self, code: str, card: dict) -> dict:
        return self._post({'action': 'play', 'code': code, 'playerId': self.player_id, 'card': card})

    def rematch(self, code: str) -> dict:
        return self._post({'action': 'rematch', 'code': code, 'playerId': self.player_id})
