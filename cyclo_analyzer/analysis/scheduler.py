"""Supersedable background recomputation for interactive front-ends.

Interactive controls (for example a continuously dragged alpha slider) request
a new computation on every change. ``RecomputeScheduler`` runs each request on
a ``concurrent.futures`` executor and delivers only the result of the most
recent request; anything older is dropped when it finishes, or cancelled if it
has not started yet. The computations themselves are pure, so abandoning one
leaves nothing to clean up.

Repeated requests with the same key inside ``debounce_s`` are ignored, the
same guard interactive panels use against duplicate button callbacks.

Example::

    sched = RecomputeScheduler(compute_from_profile, on_result=show)
    sched.submit(("alpha", 12.0), signal=sig, profile=replace(p, alpha_hz=12.0))
    sched.submit(("alpha", 12.5), signal=sig, profile=replace(p, alpha_hz=12.5))
    bundle = sched.wait()   # result for alpha = 12.5 only
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import CancelledError, Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

logger = logging.getLogger(__name__)


@dataclass
class SchedulerState:
    """Mutable bookkeeping of a :class:`RecomputeScheduler`.

    ``busy``/``last_action_key``/``last_action_t`` implement the debounce;
    the counters are diagnostics for tests and status displays.
    """

    busy: bool = False
    last_action_key: Optional[Hashable] = None
    last_action_t: float = 0.0
    generation: int = 0
    delivered: int = 0
    superseded: int = 0
    debounced: int = 0
    failed: int = 0


class RecomputeScheduler:
    """Run ``compute(**params)`` in the background, keeping only the newest result.

    Parameters
    ----------
    compute:
        Pure function to evaluate.
    executor:
        Executor to submit to. If omitted a single-worker ``ThreadPoolExecutor``
        is created and owned by the scheduler.
    debounce_s:
        Ignore a request whose key equals the previous key if it arrives within
        this many seconds of it.
    on_result:
        Called with the result of the newest request, from the worker thread.
    on_error:
        Called with the exception raised by the newest request.
    clock:
        Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        compute: Callable[..., Any],
        *,
        executor: Optional[Executor] = None,
        debounce_s: float = 0.0,
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if float(debounce_s) < 0.0:
            raise ValueError(f"debounce_s must be >= 0, got {debounce_s!r}")
        self._compute = compute
        self._owns_executor = executor is None
        self._executor = executor if executor is not None else ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="cyclo-recompute"
        )
        self._debounce_s = float(debounce_s)
        self._on_result = on_result
        self._on_error = on_error
        self._clock = clock

        self._lock = threading.Lock()
        self._future: Optional[Future] = None
        self._latest: Any = None
        self._has_result = False
        self.state = SchedulerState()

    # -------------------------
    # Public API
    # -------------------------
    def submit(self, key: Hashable, **params: Any) -> Optional[Future]:
        """Schedule a computation; returns its future, or None if debounced."""
        now = self._clock()
        with self._lock:
            st = self.state
            if (
                self._debounce_s > 0.0
                and key == st.last_action_key
                and (now - st.last_action_t) < self._debounce_s
            ):
                st.debounced += 1
                logger.debug("recompute debounced: key=%r", key)
                return None

            st.last_action_key = key
            st.last_action_t = now
            st.generation += 1
            generation = st.generation
            st.busy = True

            previous = self._future
            future = self._executor.submit(self._compute, **params)
            self._future = future

        # Outside the lock: cancel() runs the stale request's done callback inline.
        # It only succeeds if the stale request has not started running.
        if previous is not None and not previous.done():
            previous.cancel()

        logger.debug("recompute submitted: key=%r generation=%d", key, generation)
        future.add_done_callback(lambda f, g=generation: self._finished(g, f))
        return future

    def wait(self, timeout: Optional[float] = None) -> Any:
        """Block until the newest request finishes and return its result.

        Re-raises the exception of the newest request if it failed.
        """
        with self._lock:
            future = self._future
        if future is None:
            raise RuntimeError("no computation has been submitted")
        return future.result(timeout=timeout)

    def latest(self) -> Any:
        """Most recently delivered result (None before the first delivery)."""
        with self._lock:
            return self._latest

    @property
    def has_result(self) -> bool:
        with self._lock:
            return self._has_result

    @property
    def busy(self) -> bool:
        with self._lock:
            return self.state.busy

    def shutdown(self, wait: bool = True) -> None:
        """Shut down the owned executor (a caller-supplied executor is left alone)."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "RecomputeScheduler":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.shutdown(wait=True)

    # -------------------------
    # Internals
    # -------------------------
    def _finished(self, generation: int, future: Future) -> None:
        with self._lock:
            st = self.state
            stale = generation != st.generation
            if stale:
                st.superseded += 1
            else:
                st.busy = False

        if stale:
            if not future.cancelled() and future.exception() is not None:
                logger.debug("superseded recompute %d failed: %r", generation, future.exception())
            else:
                logger.debug("recompute %d superseded", generation)
            return

        try:
            result = future.result()
        except CancelledError:
            return
        except Exception as exc:
            with self._lock:
                self.state.failed += 1
            logger.debug("recompute %d failed: %r", generation, exc)
            if self._on_error is not None:
                self._on_error(exc)
            return

        with self._lock:
            self._latest = result
            self._has_result = True
            self.state.delivered += 1
        if self._on_result is not None:
            self._on_result(result)
