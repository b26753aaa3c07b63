"""Generating a sync facade and an aio facade from one implementation class."""

import abc
import functools
import inspect
import sys
import types
import typing as tp
import weakref
from dataclasses import dataclass

from duo import features, logg
from duo.aio import block_on
from duo.result import Ok, Result
from .spec import (
    ConstructorKind,
    OperationSpec,
    _generation_error,
    classify_constructor,
    parse_operations,
)


__all__ = ["FacadeTarget", "FacadePair", "generate_facades", "dual", "facades_of"]


@dataclass(frozen=True)
class FacadeTarget:
    """What to generate: the names of both facades and the feature gating the aio facade.

    Attributes
    ----------
    sync : str
        name of the sync facade, whose suspending operations are driven with
        :func:`duo.aio.block_on`
    aio : str
        name of the aio facade, whose suspending operations remain coroutine functions
    feature : str
        name of the feature (see :mod:`duo.features`) that must be enabled for the aio facade to
        be generated
    interfaces : tuple
        extra interface classes implemented by the implementation class. ABCs and protocols
        among its bases are detected automatically.
    """

    sync: str
    aio: str
    feature: str
    interfaces: tp.Tuple[type, ...] = ()


class FacadePair(tp.NamedTuple):
    """The two generated facades. `aio` is None when its feature is disabled."""

    sync: type
    aio: tp.Optional[type]


_registry = weakref.WeakKeyDictionary()


def facades_of(impl: type) -> FacadePair:
    """Returns the facades last generated for an implementation class.

    Raises
    ------
    KeyError
        if no facade has been generated for the class
    """
    return _registry[impl]


# -----------------------------------------------------------------------------
# validation
# -----------------------------------------------------------------------------


def _validate(impl, target: FacadeTarget):
    if not isinstance(impl, type):
        raise _generation_error(
            "the implementing type cannot be identified from {!r}".format(impl)
        )
    if not getattr(impl, "__name__", None):
        raise _generation_error("the implementing type has no name", impl=impl)

    if target.feature is None:
        raise _generation_error("the gating feature is missing", impl=impl)
    if not features.is_valid_name(target.feature):
        raise _generation_error(
            "the gating feature {!r} is malformed".format(target.feature), impl=impl
        )
    if target.feature not in features.known():
        raise _generation_error(
            "the gating feature '{}' is unknown".format(target.feature), impl=impl
        )

    for key in ("sync", "aio"):
        name = getattr(target, key)
        if not isinstance(name, str) or not name.isidentifier():
            raise _generation_error(
                "the {} facade name {!r} is not an identifier".format(key, name),
                impl=impl,
            )
    if target.sync == target.aio:
        raise _generation_error(
            "both facades are named '{}'".format(target.sync), impl=impl
        )
    if impl.__name__ in (target.sync, target.aio):
        raise _generation_error(
            "a facade cannot be named after the implementing type", impl=impl
        )


def _is_interface(base: type) -> bool:
    if base is object:
        return False
    return isinstance(base, abc.ABCMeta) or getattr(base, "_is_protocol", False)


def _interface_names(impl, target: FacadeTarget) -> tp.Tuple[tp.List[type], tp.Set[str]]:
    interfaces = [b for b in impl.__bases__ if _is_interface(b)]
    for x in target.interfaces:
        if x not in interfaces:
            interfaces.append(x)

    names = set()
    for interface in interfaces:
        for klass in interface.__mro__:
            if klass is object:
                continue
            names.update(
                k for k in vars(klass) if not (k.startswith("__") and k.endswith("__"))
            )
    return interfaces, names


# -----------------------------------------------------------------------------
# rewriting
# -----------------------------------------------------------------------------


def _decorate(wrapper, op: OperationSpec):
    """Makes a wrapper look like the operation it forwards to."""
    functools.update_wrapper(wrapper, op.function)
    wrapper.__dict__.pop("__isabstractmethod__", None)
    return wrapper


def _rewrap(facade_cls, kind: ConstructorKind, retval):
    if kind is ConstructorKind.PLAIN:
        return facade_cls(retval)
    if kind is ConstructorKind.RESULT:
        if not isinstance(retval, Result):
            raise TypeError(
                "A Result was expected from constructor, but {!r} was returned.".format(
                    retval
                )
            )
        return Ok(facade_cls(retval.value)) if retval.is_ok() else retval
    # option
    return None if retval is None else facade_cls(retval)


def _rewrite_property(op: OperationSpec):
    prop = op.function
    name = op.name

    fget = fset = fdel = None
    if prop.fget is not None:

        def fget(self):
            return getattr(self._inner, name)

    if prop.fset is not None:

        def fset(self, value):
            setattr(self._inner, name, value)

    if prop.fdel is not None:

        def fdel(self):
            delattr(self._inner, name)

    return property(fget, fset, fdel, prop.__doc__)


def _rewrite_method(op: OperationSpec, drive: bool, preserve: bool):
    name = op.name

    if op.is_async and (preserve or not drive):

        async def method(self, *args, **kwargs):
            return await getattr(self._inner, name)(*args, **kwargs)

    elif op.is_async:

        def method(self, *args, **kwargs):
            return block_on(getattr(self._inner, name)(*args, **kwargs))

    else:

        def method(self, *args, **kwargs):
            return getattr(self._inner, name)(*args, **kwargs)

    return _decorate(method, op)


def _rewrite_constructor(
    op: OperationSpec, impl, kind: ConstructorKind, drive: bool, preserve: bool
):
    name = op.name

    if op.is_async and (preserve or not drive):

        async def constructor(cls, *args, **kwargs):
            retval = await getattr(impl, name)(*args, **kwargs)
            return _rewrap(cls, kind, retval)

    elif op.is_async:

        def constructor(cls, *args, **kwargs):
            retval = block_on(getattr(impl, name)(*args, **kwargs))
            return _rewrap(cls, kind, retval)

    else:

        def constructor(cls, *args, **kwargs):
            return _rewrap(cls, kind, getattr(impl, name)(*args, **kwargs))

    wrapper = _decorate(constructor, op)
    # the wrapper receives the class, even if the operation is a staticmethod
    if op.qualifier == "staticmethod":
        wrapper.__signature__ = _signature_with_cls(op.function)
    return classmethod(wrapper)


def _rewrite_function(op: OperationSpec, impl, drive: bool, preserve: bool):
    name = op.name

    if op.is_async and (preserve or not drive):

        async def function(*args, **kwargs):
            return await getattr(impl, name)(*args, **kwargs)

    elif op.is_async:

        def function(*args, **kwargs):
            return block_on(getattr(impl, name)(*args, **kwargs))

    else:

        def function(*args, **kwargs):
            return getattr(impl, name)(*args, **kwargs)

    wrapper = _decorate(function, op)
    # the wrapper never receives the class, even if the operation is a classmethod
    if op.qualifier == "classmethod":
        wrapper.__signature__ = _signature_without_first(op.function)
    return staticmethod(wrapper)


def _signature_without_first(func):
    sig = inspect.signature(func)
    return sig.replace(parameters=list(sig.parameters.values())[1:])


def _signature_with_cls(func):
    sig = inspect.signature(func)
    name = "cls"
    while name in sig.parameters:
        name = "_" + name
    cls_param = inspect.Parameter(name, inspect.Parameter.POSITIONAL_ONLY)
    return sig.replace(parameters=[cls_param] + list(sig.parameters.values()))


def _make_facade(
    name: str,
    impl: type,
    interfaces: tp.List[type],
    l_ops: tp.List[tp.Tuple[OperationSpec, ConstructorKind, bool]],
    drive: bool,
):
    """Builds one facade class.

    Parameters
    ----------
    name : str
        name of the facade
    impl : type
        the implementation class
    interfaces : list
        interface classes the facade inherits from
    l_ops : list
        list of (operation, constructor kind, preserve) triplets. If `preserve` is True the
        operation keeps its declared shape.
    drive : bool
        whether suspending operations are driven synchronously (sync facade) or not (aio facade)
    """

    def __init__(self, inner):
        if not isinstance(inner, impl):
            raise TypeError(
                "{} wraps an instance of {}, but {!r} was given.".format(
                    name, impl.__qualname__, inner
                )
            )
        self._inner = inner

    def __repr__(self):
        return "{}({!r})".format(name, self._inner)

    namespace = {
        "__module__": impl.__module__,
        "__qualname__": name,
        "__doc__": impl.__doc__,
        "__slots__": ("_inner",),
        "__init__": __init__,
        "__repr__": __repr__,
    }

    for op, kind, preserve in l_ops:
        if op.qualifier == "property":
            namespace[op.name] = _rewrite_property(op)
        elif op.has_receiver:
            namespace[op.name] = _rewrite_method(op, drive, preserve)
        elif kind is not ConstructorKind.NOT_A_CONSTRUCTOR:
            namespace[op.name] = _rewrite_constructor(op, impl, kind, drive, preserve)
        else:
            namespace[op.name] = _rewrite_function(op, impl, drive, preserve)

    bases = tuple(interfaces) if interfaces else (object,)
    return types.new_class(name, bases, exec_body=lambda ns: ns.update(namespace))


def generate_facades(impl: type, target: FacadeTarget) -> FacadePair:
    """Generates a sync facade and an aio facade forwarding to one implementation class.

    Each facade wraps exactly one instance of the implementation class, which it owns. For each
    operation declared in the class body (see :func:`duo.facade.parse_operations`):

    - a non-suspending operation is forwarded as-is by both facades;
    - a suspending method is driven with :func:`duo.aio.block_on` by the sync facade and
      awaited by the aio facade;
    - a constructor (see :func:`duo.facade.classify_constructor`) is forwarded by both facades
      as a classmethod re-wrapping the constructed instance in the facade, keeping the declared
      plain, Result or Optional shape;
    - any other free-standing operation is forwarded as a staticmethod, driven with
      :func:`duo.aio.block_on` by the sync facade if it suspends.

    Operations belonging to an interface (an ABC or a protocol the class inherits from, or one
    listed in `target.interfaces`) are an exception: if any of them suspends, all of them keep
    their declared shape in both facades, so that both facades honour the interface.

    Parameters
    ----------
    impl : type
        the implementation class
    target : FacadeTarget
        the names of the facades and the gating feature

    Returns
    -------
    FacadePair
        the generated facades. The aio facade is None if the gating feature is disabled.

    Raises
    ------
    FacadeGenerationError
        if the implementation class or the target is malformed, or if an operation cannot be
        classified unambiguously
    """

    _validate(impl, target)

    with logg.scoped_debug(
        "Generating facades '{}' and '{}' for '{}'".format(
            target.sync, target.aio, impl.__qualname__
        )
    ):
        interfaces, interface_names = _interface_names(impl, target)
        l_ops = parse_operations(impl)
        suspending_interface = any(
            op.is_async for op in l_ops if op.name in interface_names
        )

        l_triplets = []
        for op in l_ops:
            kind = classify_constructor(op, impl)
            preserve = suspending_interface and op.name in interface_names
            l_triplets.append((op, kind, preserve))
            logg.debug(
                "{}: receiver={} async={} constructor={} preserved={}".format(
                    op.name, op.has_receiver, op.is_async, kind.value, preserve
                )
            )

        sync_cls = _make_facade(target.sync, impl, interfaces, l_triplets, drive=True)
        if features.enabled(target.feature):
            aio_cls = _make_facade(
                target.aio, impl, interfaces, l_triplets, drive=False
            )
        else:
            logg.debug(
                "Feature '{}' is disabled. Skipped facade '{}'.".format(
                    target.feature, target.aio
                )
            )
            aio_cls = None

    pair = FacadePair(sync_cls, aio_cls)
    _registry[impl] = pair
    return pair


def dual(
    sync: str = None,
    aio: str = None,
    feature: str = None,
    interfaces: tp.Tuple[type, ...] = (),
):
    """Class decorator generating and publishing a sync facade and an aio facade.

    The facades are generated via :func:`generate_facades` and bound under their names in the
    module where the implementation class is defined. The implementation class itself is
    returned unchanged.

    >>> from duo.facade import dual
    >>> @dual(sync="SyncGreeter", aio="AioGreeter", feature="aio")
    ... class Greeter:
    ...     def __init__(self, name):
    ...         self.name = name
    ...     @classmethod
    ...     def new(cls, name) -> "Greeter":
    ...         return cls(name)
    ...     async def greet(self) -> str:
    ...         return "Hello, " + self.name
    >>> SyncGreeter.new("world").greet()
    'Hello, world'

    Parameters
    ----------
    sync : str
        name of the sync facade
    aio : str
        name of the aio facade
    feature : str
        name of the feature gating the aio facade
    interfaces : tuple
        extra interface classes, see :class:`FacadeTarget`
    """

    target = FacadeTarget(sync=sync, aio=aio, feature=feature, interfaces=interfaces)

    def decorator(impl):
        pair = generate_facades(impl, target)
        module = sys.modules.get(impl.__module__)
        if module is not None:
            setattr(module, target.sync, pair.sync)
            if pair.aio is not None:
                setattr(module, target.aio, pair.aio)
        return impl

    return decorator
