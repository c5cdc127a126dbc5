"""
Errors raised by the scoring engine.

A game that is not final yet is not an error: settlement reports its picks
as pending instead of raising.
"""


class ScoringError(Exception):
    """Base class for anything that stops a pick from being scored"""


class InvalidInputError(ScoringError):
    """A score, spread or odds value is missing or unusable"""


class InvalidChoiceError(ScoringError):
    """A pick's stored side is neither 'home' nor 'away'"""

    def __init__(self, choice):
        self.choice = choice
        super().__init__(f"Invalid user choice: {choice!r}. Must be 'home' or 'away'")


class GameNotFoundError(ScoringError):
    """Settlement was asked to score a game that does not exist"""

    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} not found")
