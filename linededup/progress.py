"""Byte-level progress reporting.

The pipeline only talks to the small ``ProgressReporter`` protocol; the CLI
plugs in a tqdm bar, tests and library callers use ``NullProgress``.
"""

from __future__ import annotations

import sys
import typing as t

from tqdm import tqdm


class ProgressReporter(t.Protocol):
    def start(self, total: int) -> None: ...

    def update(self, position: int) -> None: ...

    def finish(self) -> None: ...


class NullProgress:
    def start(self, total: int) -> None:
        pass

    def update(self, position: int) -> None:
        pass

    def finish(self) -> None:
        pass


class TqdmProgress:
    """One tqdm byte bar per file, drawn on stderr."""

    def __init__(self, desc: str = "", *, enabled: bool = True, stream: t.Optional[t.TextIO] = None):
        self.desc = desc
        self.enabled = enabled
        self.stream = stream if stream is not None else sys.stderr
        self._bar: t.Optional[tqdm] = None

    def start(self, total: int) -> None:
        self._bar = tqdm(
            total=total,
            desc=self.desc,
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            file=self.stream,
            leave=False,
            disable=not self.enabled,
        )

    def update(self, position: int) -> None:
        if self._bar is None:
            return
        delta = position - self._bar.n
        if delta > 0:
            self._bar.update(delta)

    def finish(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
