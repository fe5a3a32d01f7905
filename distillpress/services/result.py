from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar, Union

from .errors import DistillPressError

T = TypeVar('T')


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome of an I/O-performing operation."""

    value: T
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying one of the :mod:`errors` kinds."""

    error: DistillPressError
    ok: ClassVar[bool] = False

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message


Result = Union[Ok[T], Err]
