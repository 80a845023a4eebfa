"""Ok / Err values for operations that can fail in expected ways.

Git, HTTP and config code return a ``Result`` instead of raising, and the
caller decides whether a failure is fatal or only worth a warning:

    match repo.resolve_tag_target("v1.2.0"):
        case Ok(sha):
            ...
        case Err(error):
            console.warning(f"cannot resolve v1.2.0: {error.message}")
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Err", "Ok", "Result"]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E


type Result[T, E] = Ok[T] | Err[E]
