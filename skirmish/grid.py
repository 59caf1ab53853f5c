"""
Square tile grid for the skirmish engine.

Cells are addressed by (x, z) with both axes in [0, size). Each cell tracks
whether a living unit stands on it and whether it offers cover. Cover is
rolled once when the grid is generated and never changes afterwards.
"""

import random
from dataclasses import InitVar, dataclass, field
from typing import Iterator, Optional

from .errors import OutOfBounds


def manhattan(x1: int, z1: int, x2: int, z2: int) -> int:
    """Grid distance used for movement and weapon range."""
    return abs(x1 - x2) + abs(z1 - z2)


@dataclass
class Cell:
    """Individual grid cell. Cover is fixed at construction."""
    x: int
    z: int
    occupied: bool = False
    cover: InitVar[bool] = False
    _cover: bool = field(default=False, init=False, repr=False)

    def __post_init__(self, cover: bool):
        self._cover = bool(cover)

    @property
    def has_cover(self) -> bool:
        return self._cover

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "z": self.z,
            "occupied": self.occupied,
            "has_cover": self._cover,
        }


class Grid:
    """
    Occupancy and cover map.

    The grid performs no cross-validation of occupancy against unit
    positions; keeping the two in sync is the unit registry's job.
    """

    DEFAULT_SIZE = 12
    DEFAULT_COVER_PROBABILITY = 0.2

    def __init__(self, size: int = DEFAULT_SIZE, cover: Optional[set[tuple[int, int]]] = None):
        if size <= 0:
            raise ValueError(f"grid size must be positive, got {size}")
        self.size = size
        cover = cover or set()
        self._cells: list[list[Cell]] = [
            [Cell(x=x, z=z, cover=(x, z) in cover) for z in range(size)]
            for x in range(size)
        ]

    @classmethod
    def generate(
        cls,
        size: int = DEFAULT_SIZE,
        cover_probability: float = DEFAULT_COVER_PROBABILITY,
        rng: Optional[random.Random] = None,
    ) -> "Grid":
        """Build a grid with cover rolled independently for every cell."""
        rng = rng or random.Random()
        cover = set()
        for x in range(size):
            for z in range(size):
                if rng.random() < cover_probability:
                    cover.add((x, z))
        return cls(size, cover)

    def in_bounds(self, x: int, z: int) -> bool:
        return 0 <= x < self.size and 0 <= z < self.size

    def cell(self, x: int, z: int) -> Cell:
        if not self.in_bounds(x, z):
            raise OutOfBounds(x, z, self.size)
        return self._cells[x][z]

    def is_occupied(self, x: int, z: int) -> bool:
        return self.cell(x, z).occupied

    def has_cover(self, x: int, z: int) -> bool:
        return self.cell(x, z).has_cover

    def set_occupied(self, x: int, z: int, occupied: bool):
        self.cell(x, z).occupied = occupied

    def cells(self) -> Iterator[Cell]:
        """Iterate cells in row-major (x, then z) order."""
        for column in self._cells:
            yield from column

    def occupied_cells(self) -> set[tuple[int, int]]:
        return {(c.x, c.z) for c in self.cells() if c.occupied}

    def cover_cells(self) -> set[tuple[int, int]]:
        return {(c.x, c.z) for c in self.cells() if c.has_cover}
