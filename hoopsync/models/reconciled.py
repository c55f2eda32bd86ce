"""
Two-slot value shared by the reconciling components.

``local`` is what this client shows right now (possibly an optimistic
guess); ``authoritative`` is the last value confirmed by a snapshot.
"""
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


def authoritative_wins(local: T, authoritative: T) -> T:
    return authoritative


class Reconciled(Generic[T]):
    """
    A locally editable value that converges to server truth.

    Args:
        initial: Starting local value
        merge_rule: ``(local, authoritative) -> new_local`` used by
                    :meth:`converge`; defaults to authoritative wins
    """

    def __init__(self, initial: T, merge_rule: Callable[[T, T], T] = authoritative_wins):
        self.local: T = initial
        self.authoritative: Optional[T] = None
        self._merge_rule = merge_rule

    def observe(self, value: T) -> None:
        """Record a server-confirmed value without touching ``local``."""
        self.authoritative = value

    def converge(self) -> bool:
        """
        Apply the merge rule to ``local``.

        Returns:
            True if the local value changed
        """
        if self.authoritative is None:
            return False
        merged = self._merge_rule(self.local, self.authoritative)
        if merged == self.local:
            return False
        self.local = merged
        return True

    def merge(self, value: T) -> bool:
        """Observe a server value and converge to it in one step."""
        self.observe(value)
        return self.converge()
