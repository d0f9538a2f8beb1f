"""Benchmark AI difficulty tiers against each other.

Each trial plays GAMES_PER_TRIAL complete games between team A (South/North)
and team B (West/East) through the real engine, with no pacing delays. The
trials are repeated and mean +/- stdev are reported for:
  - team A win rate
  - set-back rate of the bidding team (per hand)
  - hands per game

Usage:
    python3 simulate.py --team-a hard --team-b easy --games 200 --trials 5
"""
import argparse
import random

import numpy as np

from ai import PitchAI
from engine import GameEngine
from models import Room, Participant, Phase, Team, Difficulty, GameMode
from rules import get_team

GAMES_PER_TRIAL = 200
NUM_TRIALS = 5
MAX_STEPS = 10000


def play_game(ais: dict, rng: random.Random) -> dict:
    """Play one game to completion. Returns winner, hands and set-back count."""
    room = Room(
        room_code="SIM",
        game_mode=GameMode.VERSUS,
        player1=Participant(id="a", name="Team A"),
        player2=Participant(id="b", name="Team B"),
        player_names={0: "South", 1: "West", 2: "North", 3: "East"},
    )
    engine = GameEngine(room, rng=rng, clock=lambda: 0)
    engine.start_game(now=0)

    hands = 0
    set_backs = 0
    for _ in range(MAX_STEPS):
        if room.phase == Phase.GAME_OVER:
            break
        seat = engine.active_seat()
        if seat is not None:
            engine.take_ai_turn(ais[get_team(seat)], now=0)
        else:
            engine.tick(now=0, force=True)
        if room.phase in (Phase.HAND_OVER, Phase.GAME_OVER) and room.hand_result is not None \
                and room.hand_number == hands:
            hands += 1
            set_backs += int(room.was_set)
    else:
        raise RuntimeError("Game did not finish")

    return {"winner": room.game_winner, "hands": hands, "set_backs": set_backs}


def run_trial(team_a: Difficulty, team_b: Difficulty, games: int, seed: int) -> dict:
    rng = random.Random(seed)
    ais = {
        Team.A: PitchAI(team_a, random.Random(rng.randint(0, 10**9))),
        Team.B: PitchAI(team_b, random.Random(rng.randint(0, 10**9))),
    }
    wins = 0
    hands = []
    set_backs = 0
    for _ in range(games):
        result = play_game(ais, rng)
        wins += int(result["winner"] == Team.A)
        hands.append(result["hands"])
        set_backs += result["set_backs"]

    total_hands = sum(hands)
    return {
        "win_rate": wins / games,
        "set_back_rate": set_backs / total_hands if total_hands else 0.0,
        "hands_per_game": float(np.mean(hands)),
    }


def main():
    parser = argparse.ArgumentParser(description=__doc__,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--team-a", default="hard", choices=[d.value for d in Difficulty])
    parser.add_argument("--team-b", default="medium", choices=[d.value for d in Difficulty])
    parser.add_argument("--games", type=int, default=GAMES_PER_TRIAL)
    parser.add_argument("--trials", type=int, default=NUM_TRIALS)
    parser.add_argument("--seed", type=int, default=1)
    args = parser.parse_args()

    team_a = Difficulty(args.team_a)
    team_b = Difficulty(args.team_b)
    master = random.Random(args.seed)
    trials = [run_trial(team_a, team_b, args.games, master.randint(0, 10**9))
              for _ in range(args.trials)]

    print(f"Team A ({team_a.value}) vs Team B ({team_b.value}): "
          f"{args.trials} trials x {args.games} games")
    for key, label in (("win_rate", "Team A win rate"),
                       ("set_back_rate", "Set-back rate"),
                       ("hands_per_game", "Hands per game")):
        values = np.array([t[key] for t in trials])
        print(f"  {label:<16} {values.mean():8.3f} +/- {values.std():.3f}")


if __name__ == "__main__":
    main()
