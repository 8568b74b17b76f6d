"""
Waiting for a condition: repeated checks with sleeps in between.

The poller is generic: it knows nothing about the resources, statuses,
or the APIs. It only calls a check function until the check says "done",
fails, or the time runs out. The resource-specific knowledge (which status
is the target, which status is a failure, what "not found" means) is
in the checks made by :func:`make_status_check` for every resource type.

The first check happens immediately. Then, the poller sleeps before every
next check: either for a fixed interval, or according to a schedule of the
intervals (e.g. an exponential backoff; see :func:`exponential`). The sleeps
never go beyond the deadline; no checks are made after the deadline.

The poller starts no background tasks. The waiting can be interrupted by
the timeout, by an optional stopper event, or by cancelling the waiting task
in the usual asyncio way.
"""
import asyncio
import collections.abc
import inspect
import itertools
import logging
from typing import Any, Awaitable, Callable, Collection, Iterable, Iterator, \
                   Optional, TypeVar, Union

from osbind._cogs.aiokits import aiotime
from osbind._cogs.clients import errors
from osbind._cogs.helpers import typedefs
from osbind._core.actions import loggers

polling_logger = logging.getLogger(__name__)

ResourceT = TypeVar('ResourceT')

# The statuses in which a deleted resource can be seen; or not seen at all (HTTP 404).
DELETED_STATUSES = frozenset({'DELETE_COMPLETE', 'DELETED'})
FAILURE_MARKERS: Collection[str] = ('FAILED',)


class PollingError(Exception):
    """ A base class for all the failures of the polling itself. """


class PollingTimeoutError(PollingError, TimeoutError):
    """ The condition was not reached in time. """

    def __init__(self, *, timeout: float, elapsed: float) -> None:
        super().__init__(f"The condition was not reached in {elapsed:.3f}s (timeout: {timeout}s).")
        self.timeout = timeout
        self.elapsed = elapsed


class PollingStoppedError(PollingError):
    """ The waiting was stopped from outside before the condition was reached. """


class ResourceFailedError(PollingError):
    """ The resource has reached a failed status, so it will never reach the target. """

    def __init__(
            self,
            *,
            kind: Optional[str],
            id: str,
            status: Optional[str],
            reason: Optional[str],
    ) -> None:
        super().__init__(f"{kind or 'Resource'} {id} FAILED. Status={status} StatusReason={reason}")
        self.kind = kind
        self.id = id
        self.status = status
        self.reason = reason


def exponential(
        initial: float = 1.0,
        factor: float = 2.0,
        maximum: Optional[float] = 60.0,
) -> Iterator[float]:
    """
    Generate an endless capped exponential schedule of the intervals.

    E.g., ``exponential(1, 2, 10)`` gives 1, 2, 4, 8, 10, 10, 10, ...
    """
    if initial <= 0 or factor < 1:
        raise ValueError(f"Exponential intervals must grow from a positive value: {initial=}, {factor=}")
    delay = initial
    while True:
        yield delay if maximum is None else min(delay, maximum)
        delay = delay * factor if maximum is None or delay < maximum else delay


def iter_intervals(interval: Union[float, Iterable[float]]) -> Iterator[float]:
    """
    Convert the interval policy to an endless sequence of intervals.

    A single number repeats forever. A schedule is followed to its end,
    and then its last interval repeats forever.

    The policy is validated immediately, before any checks are made:
    a negative number or an empty schedule raise :class:`ValueError`.
    For endless schedules (e.g. generators), only the first interval
    is validated in advance; the next ones are validated as they come.
    """
    if isinstance(interval, (int, float)):
        _validate_interval(interval)
        return itertools.repeat(float(interval))

    if isinstance(interval, collections.abc.Collection):
        for value in interval:
            _validate_interval(value)

    intervals = iter(interval)
    try:
        first = next(intervals)
    except StopIteration:
        raise ValueError("The schedule of polling intervals is empty.") from None
    _validate_interval(first)
    return _continue_intervals(first, intervals)


def _continue_intervals(first: float, intervals: Iterator[float]) -> Iterator[float]:
    last = first
    yield first
    for last in intervals:
        _validate_interval(last)
        yield last
    yield from itertools.repeat(last)


def _validate_interval(value: float) -> None:
    if value < 0:
        raise ValueError(f"The polling interval cannot be negative: {value!r}")


async def wait_for(
        check: typedefs.Predicate,
        *,
        timeout: float,
        interval: Union[float, Iterable[float]] = 1.0,
        stopper: Optional[asyncio.Event] = None,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    """
    Call the check until it returns true, raises, or the time runs out.

    The check can be a regular or an async function with no arguments.
    A truthy result ends the waiting successfully. A falsy result continues
    the waiting. An exception is fatal: it is never retried and is escalated
    to the caller as is (the very same exception object).

    When the time runs out, :class:`PollingTimeoutError` is raised.
    When the stopper event is set, :class:`PollingStoppedError` is raised.
    """
    logger = logger if logger is not None else polling_logger
    loop = asyncio.get_running_loop()
    started = loop.time()
    intervals = iter_intervals(interval)
    attempt = 0
    while True:
        if stopper is not None and stopper.is_set():
            raise PollingStoppedError("The waiting is stopped before the condition is reached.")

        elapsed = loop.time() - started
        if elapsed >= timeout:
            raise PollingTimeoutError(timeout=timeout, elapsed=elapsed)

        attempt += 1
        logger.debug(f"Checking the condition (attempt #{attempt}, {elapsed:.3f}s elapsed).")
        result = check()
        if inspect.isawaitable(result):
            result = await result
        if result:
            logger.debug(f"The condition is reached after {attempt} attempt(s).")
            return

        # Never sleep beyond the deadline: the last sleep is shortened to hit it precisely.
        remaining = timeout - (loop.time() - started)
        unslept = await aiotime.sleep([next(intervals), max(0, remaining)], wakeup=stopper)
        if unslept is not None:
            raise PollingStoppedError("The waiting is stopped before the condition is reached.")


def make_status_check(
        fetch: Callable[[], Awaitable[ResourceT]],
        *,
        kind: Optional[str],
        id: str,
        target: str,
        status_of: Callable[[ResourceT], Optional[str]],
        reason_of: Optional[Callable[[ResourceT], Optional[str]]] = None,
        deleted_statuses: Collection[str] = DELETED_STATUSES,
        failure_markers: Collection[str] = FAILURE_MARKERS,
        logger: Optional[typedefs.Logger] = None,
) -> Callable[[], Awaitable[bool]]:
    """
    Make a check for :func:`wait_for` that compares the resource's status.

    The resulting check fetches the resource and classifies its status:

    * The target status is a success.
    * A status with any of the failure markers (e.g. ``CREATE_FAILED``) is fatal:
      :class:`ResourceFailedError` is raised with the status's reason.
    * Any other status means "not yet", so the polling continues.
    * A missing resource (HTTP 404) is a success if the target is one of
      the deleted statuses (the resource is gone, which is what was awaited).
      Otherwise, the API error is escalated as fatal.
    """
    logger = logger if logger is not None else loggers.ResourceLogger(kind=kind, id=id)

    async def check() -> bool:
        try:
            resource = await fetch()
        except errors.APINotFoundError:
            if target in deleted_statuses:
                logger.debug(f"The resource is not found, so it is {target}.")
                return True
            raise

        status = status_of(resource)
        if status == target:
            return True
        if status is not None and any(marker in status for marker in failure_markers):
            reason = reason_of(resource) if reason_of is not None else None
            raise ResourceFailedError(kind=kind, id=id, status=status, reason=reason)

        logger.debug(f"The status is {status}, waiting for {target}.")
        return False

    return check


async def wait_for_status(
        fetch: Callable[[], Awaitable[Any]],
        *,
        kind: Optional[str],
        id: str,
        target: str,
        timeout: float,
        interval: Union[float, Iterable[float]] = 1.0,
        status_of: Callable[[Any], Optional[str]],
        reason_of: Optional[Callable[[Any], Optional[str]]] = None,
        deleted_statuses: Collection[str] = DELETED_STATUSES,
        failure_markers: Collection[str] = FAILURE_MARKERS,
        stopper: Optional[asyncio.Event] = None,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    logger = logger if logger is not None else loggers.ResourceLogger(kind=kind, id=id)
    check = make_status_check(
        fetch,
        kind=kind,
        id=id,
        target=target,
        status_of=status_of,
        reason_of=reason_of,
        deleted_statuses=deleted_statuses,
        failure_markers=failure_markers,
        logger=logger,
    )
    await wait_for(check, timeout=timeout, interval=interval, stopper=stopper, logger=logger)
    logger.info(f"The status {target} is reached.")
