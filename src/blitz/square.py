"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

# (ranks, files). Both are 0-indexed: rank 0 is White's back rank, file 0 is the a-file.
BOARD_DIMENSIONS = (8, 8)
FILES = "abcdefgh"


@dataclass(frozen=True)
class Square:
    rank: int
    file: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7) as (rank, file)"""
        file = ord(sq[0]) - ord("a")
        rank = int(sq[1]) - 1
        return cls(rank, file)

    def to_algebraic(self) -> str:
        return f"{FILES[self.file]}{self.rank + 1}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.rank < BOARD_DIMENSIONS[0]) and (
            0 <= self.file < BOARD_DIMENSIONS[1]
        )

    def offset(self, dr: int, df: int) -> Square:
        return Square(self.rank + dr, self.file + df)

    def as_pair(self) -> tuple[int, int]:
        return (self.rank, self.file)
