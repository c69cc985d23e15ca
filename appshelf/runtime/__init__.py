"""Interactive session runtime.

``run_shelf`` starts a launcher on the controlling terminal. The loop pieces
(``LoopSession``, ``RuntimeLoopTiming``, ``run_main_loop``) are exported for
composition code and tests. Submodules load on first use so importing the
package never touches the terminal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .loop import LoopSession, RuntimeLoopTiming

_LOOP_EXPORTS = frozenset({"LoopSession", "RuntimeLoopTiming"})


def run_shelf(*args, **kwargs):
    from .app import run_shelf as _run_shelf

    return _run_shelf(*args, **kwargs)


def run_main_loop(*args, **kwargs):
    from .loop import run_main_loop as _run_main_loop

    return _run_main_loop(*args, **kwargs)


def __getattr__(name: str):
    if name in _LOOP_EXPORTS:
        from . import loop

        return getattr(loop, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["LoopSession", "RuntimeLoopTiming", "run_main_loop", "run_shelf"]
