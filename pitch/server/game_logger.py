"""Room move log: two lines per accepted action in <log_dir>/room_<code>.log

Format
------
  <seat name>: <opt1>, <opt2>, ...   legal options offered (bids or cards)
  <executed>                         the option that was taken
"""
import os


class GameLogger:
    def __init__(self, room_code: str, log_dir: str):
        os.makedirs(log_dir, exist_ok=True)
        self._path = os.path.join(log_dir, f'room_{room_code}.log')

    @property
    def path(self) -> str:
        return self._path

    def log_step(self, commands: str, executed: str):
        with open(self._path, 'a', encoding='utf-8') as f:
            f.write(commands + '\n')
            f.write(executed + '\n')
