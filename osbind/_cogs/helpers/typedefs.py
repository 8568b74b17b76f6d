"""
Rudimentary type [re-]definitions shared across the codebase.

Some StdLib types are generics only for mypy, but not at runtime
(e.g. ``logging.LoggerAdapter``). They are defined here once in a way
that works both for the type-checkers and for the interpreter.
"""
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Union

if TYPE_CHECKING:
    LoggerAdapter = logging.LoggerAdapter[Any]
else:
    LoggerAdapter = logging.LoggerAdapter

# As publicly exposed: we only promise that it is based on one of the built-in loggable classes.
Logger = Union[logging.Logger, LoggerAdapter]

# Sync or async predicates & visitors: both are accepted wherever the users supply callbacks.
MaybeAwaitable = Union[Awaitable[bool], bool]
Predicate = Callable[[], MaybeAwaitable]
