"""Steps paired with compensating actions."""

from typing import Callable, List, Optional, Tuple, TypeVar

from git_wt.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CompensatingTransaction:
    """Run reversible steps; on failure undo the completed ones in reverse.

    A step's compensation is registered only after its action succeeded, so
    an action must leave nothing behind when it raises.

    Example:
        tx = CompensatingTransaction("init /r")
        try:
            tx.step("move store", move, move_back)
            tx.step("add worktree", add, remove)
        except BaseException:
            errors = tx.rollback()
            raise
        tx.commit()
    """

    def __init__(self, name: str):
        self.name = name
        self._compensations: List[Tuple[str, Callable[[], None]]] = []

    def step(
        self,
        description: str,
        action: Callable[[], T],
        compensation: Optional[Callable[[], None]] = None,
    ) -> T:
        logger.debug(f"{self.name}: {description}")
        result = action()
        if compensation is not None:
            self._compensations.append((description, compensation))
        return result

    @property
    def pending(self) -> int:
        """Number of completed steps that rollback would undo."""
        return len(self._compensations)

    def rollback(self) -> List[str]:
        """Undo completed steps, newest first.

        Keeps going when a compensation fails; returns one message per
        failed compensation (empty when the rollback was complete).
        """
        errors = []
        while self._compensations:
            description, compensation = self._compensations.pop()
            logger.info(f"{self.name}: undoing '{description}'")
            try:
                compensation()
            except Exception as e:
                logger.error(f"{self.name}: could not undo '{description}': {e}")
                errors.append(f"undo '{description}' failed: {e}")
        return errors

    def commit(self) -> None:
        self._compensations.clear()
