"""Create the rooms table and purge expired rooms."""
import sys
import os

# Add server directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'server'))

from config import DATABASE_CONFIG
from db import create_rooms_table, purge_expired_rooms


def init_db():
    print(f"Creating rooms table in {DATABASE_CONFIG['database']}@{DATABASE_CONFIG['host']}...")
    create_rooms_table()
    removed = purge_expired_rooms()
    print(f"Removed {removed} expired room(s).")


if __name__ == '__main__':
    init_db()
