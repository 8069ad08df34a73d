"""Checkpoint/undo controller for the interactive traversal.

The traversal keeps a single depth counter: the number of prompts committed
so far. Every prompt leaves one line on screen, so the counter doubles as a
line count for the redraw logic.

Frames record a checkpoint (the depth on entry) and loop over their work:

- a committed prompt advances the depth by one;
- a skipped prompt produces ``Rewind(depth)`` without advancing;
- a frame whose checkpoint is strictly below the rewind target absorbs it,
  erases ``target - checkpoint + 1`` lines, restores its checkpoint and
  retries; any other frame hands the rewind to its caller unchanged.

A rewind that leaves the root frame becomes :class:`~interactive_parse.errors.Aborted`
unless the root policy is ``retry``, in which case a frame entered at depth
zero always absorbs and retries.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final, TypeVar

import structlog

from interactive_parse.builder.outcome import STOP, Committed, Outcome, Rewind, Stop
from interactive_parse.errors import Aborted
from interactive_parse.observability.logging import ensure_structlog
from interactive_parse.prompts.base import SKIP
from interactive_parse.terminal.redraw import DisplayRedraw

if TYPE_CHECKING:
    from collections.abc import Callable

    from interactive_parse.prompts.base import Skipped
    from interactive_parse.terminal.cancellation import CancellationSource

T = TypeVar("T")

CANCEL_MARKER: Final[str] = "(undo requested)"


class RootPolicy(StrEnum):
    """What happens when the very first prompt is skipped."""

    ABORT = "abort"
    RETRY = "retry"


class TraversalContext:
    """Depth counter plus the rewind protocol shared by one build session."""

    def __init__(
        self,
        *,
        redraw: DisplayRedraw | None = None,
        cancellation: CancellationSource | None = None,
        root_policy: RootPolicy = RootPolicy.ABORT,
        logger: Any | None = None,
    ) -> None:
        self.redraw = redraw if redraw is not None else DisplayRedraw()
        self.cancellation = cancellation
        self.root_policy = RootPolicy(root_policy)
        self._depth = 0
        if logger is None:
            ensure_structlog()
            logger = structlog.get_logger(__name__)
        self._logger = logger

    @property
    def depth(self) -> int:
        return self._depth

    def ask(self, prompt: Callable[[], T | Skipped], *, name: str = "") -> Outcome[T]:
        """Run one prompt and translate its answer into an outcome."""

        if self.cancellation is not None:
            reason = self.cancellation.poll()
            if reason is not None:
                self.redraw.note(CANCEL_MARKER)
                self._logger.debug(
                    "rewind_requested", depth=self._depth, field=name, source=reason
                )
                return Rewind(self._depth)

        answer = prompt()
        if answer is SKIP:
            self._logger.debug("rewind_requested", depth=self._depth, field=name, source="skip")
            return Rewind(self._depth)
        self._depth += 1
        self._logger.debug("depth_advanced", depth=self._depth, field=name)
        return Committed(answer)

    def frame(self, attempt: Callable[[], Outcome[T]], *, name: str = "") -> Outcome[T]:
        """Retry ``attempt`` until it commits or a rewind escapes this frame."""

        checkpoint = self._depth
        while True:
            outcome = attempt()
            if isinstance(outcome, Committed):
                return outcome
            if self._absorbs(checkpoint, outcome.depth):
                self.rewind_to(checkpoint, outcome.depth, name=name)
                continue
            self._logger.debug(
                "rewind_forwarded", checkpoint=checkpoint, target=outcome.depth, field=name
            )
            return outcome

    def loop(
        self, step: Callable[[int], Outcome[T] | Stop], *, name: str = ""
    ) -> Outcome[list[T]]:
        """Build a sequence one element at a time with a checkpoint per element.

        ``step(index)`` returns the element outcome, or ``STOP`` once the
        sequence is complete. A rewind is owned by the latest element whose
        checkpoint lies below the target; that element and everything after
        it is discarded and rebuilt. A rewind no element owns is returned.
        """

        items: list[T] = []
        checkpoints: list[int] = []
        while True:
            index = len(items)
            checkpoint = self._depth
            result = step(index)
            if result is STOP:
                return Committed(items)
            if isinstance(result, Committed):
                items.append(result.value)
                checkpoints.append(checkpoint)
                continue

            checkpoints.append(checkpoint)
            owner = _owner(checkpoints, result.depth)
            if owner is None:
                self._logger.debug(
                    "rewind_forwarded", checkpoint=checkpoints[0], target=result.depth, field=name
                )
                return result
            self.rewind_to(checkpoints[owner], result.depth, name=f"{name}[{owner}]")
            del items[owner:]
            del checkpoints[owner:]

    def rewind_to(self, checkpoint: int, target: int, *, name: str = "") -> None:
        """Erase the lines written since ``checkpoint`` and restore the depth."""

        if checkpoint < 0 or checkpoint > self._depth:
            raise ValueError(f"checkpoint {checkpoint} is outside depth range 0..{self._depth}")
        self.redraw.erase(target - checkpoint + 1)
        self._logger.debug(
            "rewind_absorbed",
            checkpoint=checkpoint,
            target=target,
            erased=target - checkpoint + 1,
            field=name,
        )
        self._depth = checkpoint

    def finish(self, outcome: Outcome[T]) -> T:
        """Unwrap the root outcome; a rewind that got this far aborts the build."""

        if isinstance(outcome, Rewind):
            raise Aborted(depth=outcome.depth)
        return outcome.value

    def _absorbs(self, checkpoint: int, target: int) -> bool:
        if target > checkpoint:
            return True
        return checkpoint == 0 and self.root_policy is RootPolicy.RETRY


def _owner(checkpoints: list[int], target: int) -> int | None:
    for index in range(len(checkpoints) - 1, -1, -1):
        if checkpoints[index] < target:
            return index
    return None


__all__ = ["CANCEL_MARKER", "RootPolicy", "TraversalContext"]
