from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

E = TypeVar("E")
V = TypeVar("V")
R = TypeVar("R")


@dataclass(frozen=True)
class Left(Generic[E]):
    """Failure arm of an :data:`Either`."""

    value: E

    def is_left(self) -> bool:
        return True

    def is_right(self) -> bool:
        return False

    def fold(self, on_left: Callable[[E], R], on_right: Callable[..., R]) -> R:
        return on_left(self.value)


@dataclass(frozen=True)
class Right(Generic[V]):
    """Success arm of an :data:`Either`."""

    value: V

    def is_left(self) -> bool:
        return False

    def is_right(self) -> bool:
        return True

    def fold(self, on_left: Callable[..., R], on_right: Callable[[V], R]) -> R:
        return on_right(self.value)


Either = Union[Left[E], Right[V]]


def left(value: E) -> Left[E]:
    return Left(value)


def right(value: V) -> Right[V]:
    return Right(value)
