"""Commit-reveal rock-paper-scissors between two players."""

from __future__ import annotations

import enum
import hashlib
import logging
from collections.abc import Sequence

log = logging.getLogger(__name__)

HASH_SIZE = 32
DRAW = "DRAW"


class GameError(Exception):
    """A game action was rejected; ``code`` names the reason."""

    MISSING_PLAYER = "MissingPlayer"
    WRONG_HAND_CHAR = "WrongHandChar"
    WRONG_HASH = "WrongHash"

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


class Hand(enum.Enum):
    """A hand a player can show."""

    ROCK = "0"
    PAPER = "1"
    SCISSORS = "2"

    @classmethod
    def from_char(cls, char: str) -> Hand:
        """Decode a hand from its digit: '0' rock, '1' paper, '2' scissors."""
        try:
            return cls(char)
        except ValueError:
            raise GameError(GameError.WRONG_HAND_CHAR) from None

    def beats(self) -> Hand:
        """Return the hand this one defeats."""
        return _BEATS[self]


_BEATS = {
    Hand.ROCK: Hand.SCISSORS,
    Hand.PAPER: Hand.ROCK,
    Hand.SCISSORS: Hand.PAPER,
}


class HandResult(enum.Enum):
    """Outcome of a round, seen from the first player."""

    WIN = enum.auto()
    LOSE = enum.auto()
    DRAW = enum.auto()


def _check_index(index: int) -> int:
    if index not in (0, 1):
        raise IndexError(f"player index out of range: {index}")
    return index


class Game:
    """State of one game: hashed commitments, then revealed hands."""

    # Based on the sizes of the stored fields.
    MAXIMUM_SIZE = (32 * 2) + (32 * 2) + 3 * 2

    def __init__(self, players: Sequence[str]) -> None:
        if len(players) != 2:
            raise ValueError("a game needs exactly two players")
        self.players: tuple[str, str] = (players[0], players[1])
        self.hashed_hand: list[bytes] = [bytes(HASH_SIZE), bytes(HASH_SIZE)]
        self.hash_submitted = [False, False]
        self.hand = [Hand.ROCK, Hand.ROCK]
        self.hand_submitted = [False, False]
        self.winner = ""

    def player_index(self, player: str) -> int:
        """Return 0 or 1 for a player of this game; raise GameError otherwise."""
        try:
            return self.players.index(player)
        except ValueError:
            raise GameError(GameError.MISSING_PLAYER) from None

    def pick_winner(self) -> HandResult:
        """Compare the two revealed hands from the first player's side."""
        first, second = self.hand
        log.debug("player1 hand: %s", first)
        log.debug("player2 hand: %s", second)
        if first.beats() == second:
            return HandResult.WIN
        if second.beats() == first:
            return HandResult.LOSE
        return HandResult.DRAW

    def place_hash(self, hashed_hand: bytes, index: int) -> None:
        """Store a player's SHA-256 commitment to their hand."""
        hashed_hand = bytes(hashed_hand)
        if len(hashed_hand) != HASH_SIZE:
            raise ValueError(f"hash must be {HASH_SIZE} bytes")
        index = _check_index(index)
        self.hashed_hand[index] = hashed_hand
        self.hash_submitted[index] = True

    def place_hand(self, hand_string: str, index: int) -> None:
        """Reveal a hand; its hash must match the stored commitment.

        The hand is the first character of the first space-separated word.
        Once both hands are in, the winner is recorded.
        """
        index = _check_index(index)
        digest = hashlib.sha256(hand_string.encode("utf-8")).digest()
        if digest != self.hashed_hand[index]:
            raise GameError(GameError.WRONG_HASH)

        first_word = hand_string.split(" ")[0]
        if not first_word:
            raise GameError(GameError.WRONG_HAND_CHAR)
        self.hand[index] = Hand.from_char(first_word[0])
        self.hand_submitted[index] = True

        if all(self.hand_submitted):
            match self.pick_winner():
                case HandResult.WIN:
                    self.winner = str(self.players[0])
                case HandResult.LOSE:
                    self.winner = str(self.players[1])
                case HandResult.DRAW:
                    self.winner = DRAW