from typing import List
from typeguard import typechecked
import numpy as np

from arena.core.errors import ActionErrorKind, ActionPreconditionFailed

SHARED_ARRAY_LENGTH = 64
# Cells 0-2 carry the team target record
MIN_SHARED_ARRAY_LENGTH = 3
MAX_SHARED_ARRAY_VALUE = 2**16 - 1


@typechecked
class TeamSharedArray:
    """
    The team-wide block of integers every robot of a team can read and write.

    Cells hold unsigned 16-bit values and start at zero. There is no locking:
    the last write committed in turn order is what the next reader sees.
    """

    def __init__(self, length: int = SHARED_ARRAY_LENGTH):
        self._cells = np.zeros(length, dtype=np.uint16)
        self.write_count = 0

    def __len__(self) -> int:
        return int(self._cells.shape[0])

    def can_read(self, index: int) -> bool:
        return 0 <= index < len(self)

    def can_write(self, index: int, value: int) -> bool:
        return self.can_read(index) and 0 <= value <= MAX_SHARED_ARRAY_VALUE

    def read(self, index: int) -> int:
        if not self.can_read(index):
            raise ActionPreconditionFailed(ActionErrorKind.OUT_OF_RANGE, f"Shared array index {index} out of bounds")
        return int(self._cells[index])

    def write(self, index: int, value: int) -> None:
        if not self.can_read(index):
            raise ActionPreconditionFailed(ActionErrorKind.OUT_OF_RANGE, f"Shared array index {index} out of bounds")
        if not 0 <= value <= MAX_SHARED_ARRAY_VALUE:
            raise ActionPreconditionFailed(ActionErrorKind.CANT_DO_THAT, f"Shared array value {value} outside [0, {MAX_SHARED_ARRAY_VALUE}]")
        self._cells[index] = value
        self.write_count += 1

    def snapshot(self, length: int = -1) -> List[int]:
        cells = self._cells if length < 0 else self._cells[:length]
        return [int(v) for v in cells]
