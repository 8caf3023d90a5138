from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import Shift


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = False) -> Sequence[Shift]:
        raise NotImplementedError

    def create(self, shift: Shift) -> int:
        raise NotImplementedError

    def update(self, shift: Shift) -> bool:
        raise NotImplementedError
