from app import db  # noqa: F401 - imported for model imports

from .game import Game
from .pick import Pick
from .pick_set import PickSet
from .user import User

__all__ = [
    "User",
    "Game",
    "PickSet",
    "Pick",
]
