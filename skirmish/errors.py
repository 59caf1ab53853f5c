"""
Rule violations raised by the skirmish engine.

Every SkirmishError is recoverable: the command that raised it is rejected and
the game state is left untouched. InvariantViolation is not part of that
family; it signals a programming error and is allowed to propagate.
"""


class SkirmishError(Exception):
    """Base class for rejected commands."""

    code = "error"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class OutOfBounds(SkirmishError):
    """Coordinate outside the grid."""
    code = "out_of_bounds"

    def __init__(self, x: int, z: int, size: int):
        super().__init__(f"({x}, {z}) is outside the {size}x{size} grid")
        self.x = x
        self.z = z


class CellOccupied(SkirmishError):
    code = "cell_occupied"

    def __init__(self, x: int, z: int):
        super().__init__(f"cell ({x}, {z}) is occupied")
        self.x = x
        self.z = z


class OutOfRange(SkirmishError):
    """Movement beyond the unit's allowance."""
    code = "out_of_range"


class TargetOutOfRange(OutOfRange):
    """Attack beyond the maximum attack range."""
    code = "target_out_of_range"


class InvalidCommand(SkirmishError):
    """Wrong phase, no action points, unknown unit or a finished session."""
    code = "invalid_command"


class InvariantViolation(RuntimeError):
    """Grid and unit registry disagree about occupancy."""
