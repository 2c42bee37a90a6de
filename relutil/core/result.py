"""Result type for explicit error handling.

Every pipeline step returns a Result instead of raising. A step either
produced its value (Ok) or failed with a ReleaseError (Err), and the caller
decides whether to continue:

    def read_version(root: Path) -> Result[str, ReleaseError]:
        ...

    match read_version(root):
        case Ok(version):
            console.info(f"current version: {version}")
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful step, carrying its value."""

    value: T

    def unwrap(self) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed step, carrying its error."""

    error: E

    def unwrap(self) -> None:
        """Raise, since there is no value.

        Raises:
            ValueError: Always, containing the error.
        """
        raise ValueError(f"called unwrap on Err: {self.error}")

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[E]
