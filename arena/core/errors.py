from enum import Enum
from typing import Any, Optional


class ArenaError(Exception):
    """Base class for every error raised by the arena package."""

    pass


class ActionErrorKind(Enum):
    CANT_MOVE_THERE = "cant_move_there"
    CANT_SENSE_THAT = "cant_sense_that"
    IS_NOT_READY = "is_not_ready"
    OUT_OF_RANGE = "out_of_range"
    NOT_ENOUGH_RESOURCE = "not_enough_resource"
    CANT_DO_THAT = "cant_do_that"
    TURN_ENDED = "turn_ended"


class ActionPreconditionFailed(ArenaError):
    """
    Raised by the robot controller when an action breaks a rule the arena enforces.

    Expected and non-fatal: the player skips the action and the next turn
    re-evaluates from scratch.
    """

    def __init__(self, kind: ActionErrorKind, message: str):
        super().__init__(message)
        self.kind = kind

    def __str__(self) -> str:
        return f"{self.kind.name}: {super().__str__()}"


class UnexpectedFault(ArenaError):
    """Any other fault caught at the turn boundary, usually a programming error."""

    def __init__(self, robot_type: str, cause: BaseException):
        super().__init__(f"{robot_type} fault: {type(cause).__name__}: {cause}")
        self.robot_type = robot_type
        self.cause = cause


class ConfigError(ArenaError):
    """Raised when a match configuration is missing sections or holds illegal values."""

    def __init__(self, message: str, key: Optional[Any] = None):
        super().__init__(message if key is None else f"{key}: {message}")
        self.key = key


class LoggerError(ArenaError):
    """Custom exception for MatchLogger-related errors."""

    pass


class ValidationError(LoggerError):
    """Exception raised when record validation fails."""

    pass


class FileFormatError(LoggerError):
    """Exception raised when file format is not supported or corrupted."""

    pass
