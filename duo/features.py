"""Named feature flags gating the aio side of duobase.

A feature is a named boolean flag. The aio facade of a generated pair of facades, and the aio
backend of every dual-backend resource family, only exist when their feature is enabled. The
flags are resolved once, when this module is imported, which is as close as Python gets to
compile-time gating.

Built-in features:

============  ===========  =======================================================
name          requires     gates
============  ===========  =======================================================
``aio``       --           the execution-mode oracle and every aio facade
``aio-fs``    ``aio``      the aiofiles backend of :mod:`duo.fs`
``aio-io``    ``aio``      the aiofiles standard streams of :mod:`duo.io`
``aio-net``   ``aio``      the event-loop socket backend of :mod:`duo.net`
``aio-sync``  ``aio``      the asyncio backend of :mod:`duo.sync`
``aio-time``  ``aio``      the event-loop clock backend of :mod:`duo.time`
============  ===========  =======================================================

All built-in features are enabled by default. Environment variable `DUO_DISABLE_FEATURES`, a
comma-separated list of feature names, disables some of them at import time. Disabling a feature
disables every feature requiring it.
"""

import contextlib
import os
import re
import typing as tp


__all__ = [
    "ENV_DISABLE",
    "enabled",
    "register",
    "known",
    "is_valid_name",
    "check",
    "override",
]


ENV_DISABLE = "DUO_DISABLE_FEATURES"

_NAME_RE = re.compile(r"^[a-z][a-z0-9]*(?:[-_][a-z0-9]+)*$")

_flags: tp.Dict[str, bool] = {}
_requires: tp.Dict[str, tp.Optional[str]] = {}


def is_valid_name(name) -> bool:
    """Checks whether an object is a well-formed feature name, like 'aio-fs'."""
    return isinstance(name, str) and _NAME_RE.match(name) is not None


def check(name):
    """Checks that a feature name is well-formed and known.

    Raises
    ------
    ValueError
        if the name is malformed
    KeyError
        if the feature has not been registered
    """
    if not is_valid_name(name):
        raise ValueError("Malformed feature name: {!r}.".format(name))
    if name not in _flags:
        raise KeyError("Unknown feature: '{}'.".format(name))


def register(name: str, enabled: bool = True, requires: tp.Optional[str] = None):
    """Registers a feature, or redefines an existing one.

    Parameters
    ----------
    name : str
        feature name, lower-case words separated by '-' or '_'
    enabled : bool
        whether the feature is enabled on its own
    requires : str, optional
        name of an already registered feature this one depends on
    """
    if not is_valid_name(name):
        raise ValueError("Malformed feature name: {!r}.".format(name))
    if requires is not None:
        check(requires)
    _flags[name] = bool(enabled)
    _requires[name] = requires


def enabled(name: str) -> bool:
    """Returns whether a feature, and every feature it requires, is enabled."""
    check(name)
    while name is not None:
        if not _flags[name]:
            return False
        name = _requires[name]
    return True


def known() -> tp.List[str]:
    """Returns the names of all registered features."""
    return list(_flags)


@contextlib.contextmanager
def override(values: tp.Dict[str, bool]):
    """Temporarily enables or disables some features, restoring them on exit.

    Mostly useful in tests. Already generated facades and already constructed resources are not
    affected.

    >>> from duo import features
    >>> with features.override({"aio": False}):
    ...     features.enabled("aio-fs")
    False
    """
    for name in values:
        check(name)
    saved = {name: _flags[name] for name in values}
    try:
        for name, value in values.items():
            _flags[name] = bool(value)
        yield
    finally:
        _flags.update(saved)


def _init():
    register("aio")
    for name in ("aio-fs", "aio-io", "aio-net", "aio-sync", "aio-time"):
        register(name, requires="aio")

    for name in os.environ.get(ENV_DISABLE, "").split(","):
        name = name.strip()
        if name:
            check(name)
            _flags[name] = False


_init()
