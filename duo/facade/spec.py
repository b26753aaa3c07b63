"""Parsing an implementation class into operation specs, and classifying constructors."""

import ast
import enum
import inspect
import types
import typing as tp
from dataclasses import dataclass, field

from duo.traceback import LogicError


__all__ = [
    "FacadeGenerationError",
    "ParameterSpec",
    "OperationSpec",
    "ConstructorKind",
    "TypeDescriptor",
    "describe_type",
    "parse_operations",
    "classify_constructor",
]


class FacadeGenerationError(LogicError):
    """Raised when a pair of facades cannot be generated from an implementation class.

    The `debug` dictionary tells which implementing type and which operation are at fault, and
    why.
    """


def _generation_error(reason: str, impl=None, operation: tp.Optional[str] = None):
    debug = {}
    if impl is not None:
        debug["implementing_type"] = getattr(impl, "__qualname__", repr(impl))
    if operation is not None:
        debug["operation"] = operation
    debug["reason"] = reason
    if operation is None:
        msg = "Unable to generate facades: {}".format(reason)
    else:
        msg = "Unable to generate facades for operation '{}': {}".format(
            operation, reason
        )
    return FacadeGenerationError(msg, debug=debug)


# -----------------------------------------------------------------------------
# operation specs
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ParameterSpec:
    """One parameter of an operation, receiver excluded."""

    name: str
    annotation: tp.Any = inspect.Parameter.empty
    kind: tp.Any = inspect.Parameter.POSITIONAL_OR_KEYWORD
    default: tp.Any = inspect.Parameter.empty


@dataclass(frozen=True)
class OperationSpec:
    """One operation declared in the body of an implementation class.

    Attributes
    ----------
    name : str
        the name of the operation, preserved verbatim by both facades
    parameters : tuple
        the parameters of the operation as :class:`ParameterSpec` instances, receiver and class
        parameters excluded
    returns : object
        the return annotation, either a type object or a string, or `inspect.Signature.empty`
    has_receiver : bool
        whether the operation is bound to an instance
    is_async : bool
        whether the operation is declared with 'async def'
    qualifier : {'method', 'staticmethod', 'classmethod', 'property'}
        how the operation is declared
    attributes : dict
        extra attributes set on the function object, copied through to both facades
    function : callable
        the function, or the property object for properties
    """

    name: str
    parameters: tp.Tuple[ParameterSpec, ...]
    returns: tp.Any
    has_receiver: bool
    is_async: bool
    qualifier: str
    attributes: tp.Dict[str, tp.Any] = field(default_factory=dict, compare=False)
    function: tp.Any = field(default=None, compare=False, repr=False)


def _parameters(func, skip_first: bool) -> tp.Tuple[ParameterSpec, ...]:
    try:
        params = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return ()
    if skip_first and params:
        params = params[1:]
    return tuple(ParameterSpec(p.name, p.annotation, p.kind, p.default) for p in params)


def _returns(func):
    try:
        return inspect.signature(func).return_annotation
    except (TypeError, ValueError):
        return inspect.Signature.empty


def parse_operations(impl: type) -> tp.List[OperationSpec]:
    """Parses the operations declared in the body of an implementation class.

    Every function, staticmethod, classmethod and property defined in the class body is an
    operation, except those with dunder names. Inherited attributes are ignored. The operations
    are listed in definition order.

    Parameters
    ----------
    impl : type
        the implementation class

    Returns
    -------
    list
        list of :class:`OperationSpec`

    Raises
    ------
    FacadeGenerationError
        if an operation is an asynchronous generator function
    """

    l_ops = []
    for name, attr in vars(impl).items():
        if name.startswith("__") and name.endswith("__"):
            continue

        if isinstance(attr, property):
            getter = attr.fget
            op = OperationSpec(
                name=name,
                parameters=(),
                returns=_returns(getter) if getter else inspect.Signature.empty,
                has_receiver=True,
                is_async=False,
                qualifier="property",
                attributes={},
                function=attr,
            )
        elif isinstance(attr, (staticmethod, classmethod)):
            func = attr.__func__
            is_class = isinstance(attr, classmethod)
            op = OperationSpec(
                name=name,
                parameters=_parameters(func, skip_first=is_class),
                returns=_returns(func),
                has_receiver=False,
                is_async=inspect.iscoroutinefunction(func),
                qualifier="classmethod" if is_class else "staticmethod",
                attributes=dict(getattr(func, "__dict__", {})),
                function=func,
            )
        elif inspect.isfunction(attr):
            func = attr
            op = OperationSpec(
                name=name,
                parameters=_parameters(func, skip_first=True),
                returns=_returns(func),
                has_receiver=True,
                is_async=inspect.iscoroutinefunction(func),
                qualifier="method",
                attributes=dict(func.__dict__),
                function=func,
            )
        else:
            continue

        if op.qualifier != "property" and inspect.isasyncgenfunction(op.function):
            raise _generation_error(
                "asynchronous generators cannot be driven synchronously",
                impl=impl,
                operation=name,
            )
        l_ops.append(op)

    return l_ops


# -----------------------------------------------------------------------------
# constructor classification
# -----------------------------------------------------------------------------


class ConstructorKind(enum.Enum):
    """Whether and how an operation constructs a new instance of the implementing type."""

    PLAIN = "plain"
    RESULT = "result"
    OPTION = "option"
    NOT_A_CONSTRUCTOR = "not-a-constructor"


@dataclass(frozen=True)
class TypeDescriptor:
    """A normalised return type: a name plus type arguments.

    The implementing type and the self-type token are both normalised to name 'Self'. Optional
    and union types are normalised to name 'Union'. None is normalised to name 'None'.
    """

    name: str
    args: tp.Tuple["TypeDescriptor", ...] = ()

    def __str__(self):
        if not self.args:
            return self.name
        return "{}[{}]".format(self.name, ", ".join(str(x) for x in self.args))


_SELF = TypeDescriptor("Self")
_NONE = TypeDescriptor("None")


def _union(members) -> TypeDescriptor:
    flat = []
    for m in members:
        if m.name == "Union":
            flat.extend(m.args)
        else:
            flat.append(m)
    return TypeDescriptor("Union", tuple(flat))


def _describe_node(node, self_names) -> TypeDescriptor:
    if isinstance(node, ast.Constant):
        if node.value is None:
            return _NONE
        if isinstance(node.value, str):  # nested forward reference
            return _describe_str(node.value, self_names)
        return TypeDescriptor(repr(node.value))
    if isinstance(node, ast.Name):
        if node.id in self_names:
            return _SELF
        return _NONE if node.id == "NoneType" else TypeDescriptor(node.id)
    if isinstance(node, ast.Attribute):
        if node.attr == "Self":
            return _SELF
        return TypeDescriptor(node.attr)
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return _union(
            [
                _describe_node(node.left, self_names),
                _describe_node(node.right, self_names),
            ]
        )
    if isinstance(node, ast.Subscript):
        origin = _describe_node(node.value, self_names).name
        elts = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
        args = [_describe_node(x, self_names) for x in elts]
        if origin == "Optional":
            return _union(args + [_NONE])
        if origin == "Union":
            return _union(args)
        return TypeDescriptor(origin, tuple(args))
    return TypeDescriptor(ast.unparse(node))


def _describe_str(annotation: str, self_names) -> TypeDescriptor:
    try:
        node = ast.parse(annotation.strip(), mode="eval").body
    except SyntaxError as e:
        raise ValueError(
            "Unable to parse annotation {!r}.".format(annotation)
        ) from e
    return _describe_node(node, self_names)


def describe_type(annotation, impl: type) -> TypeDescriptor:
    """Normalises a return annotation into a :class:`TypeDescriptor`.

    Parameters
    ----------
    annotation : object
        a type object, a typing construct, a string or a ForwardRef
    impl : type
        the implementing type, recognised either as a class object or by name

    Returns
    -------
    TypeDescriptor
        the normalised descriptor

    Raises
    ------
    ValueError
        if the annotation is a string that cannot be parsed
    """

    self_names = {"Self", impl.__name__, impl.__qualname__}

    if annotation is impl or annotation is tp.Self:
        return _SELF
    if annotation is None or annotation is type(None):
        return _NONE
    if isinstance(annotation, str):
        return _describe_str(annotation, self_names)
    if isinstance(annotation, tp.ForwardRef):
        return _describe_str(annotation.__forward_arg__, self_names)

    origin = tp.get_origin(annotation)
    if origin is None:
        name = getattr(annotation, "__qualname__", None) or repr(annotation)
        return TypeDescriptor(name)

    args = [describe_type(x, impl) for x in tp.get_args(annotation)]
    if origin is tp.Union or origin is types.UnionType:
        return _union(args)
    name = getattr(origin, "__name__", None) or repr(origin)
    return TypeDescriptor(name, tuple(args))


def _carries_self(desc: TypeDescriptor) -> bool:
    if desc == _SELF:
        return True
    return desc.name == "Result" and bool(desc.args) and desc.args[0] == _SELF


def classify_constructor(op: OperationSpec, impl: type) -> ConstructorKind:
    """Classifies an operation as a constructor of the implementing type, or not.

    Only free-standing operations can be constructors. The return annotation is compared, in
    this order, against the implementing type itself, the self-type token `Self`,
    `Result[Self, E]` and `Optional[Self]`.

    Parameters
    ----------
    op : OperationSpec
        the operation to classify
    impl : type
        the implementing type

    Returns
    -------
    ConstructorKind
        PLAIN, RESULT, OPTION or NOT_A_CONSTRUCTOR

    Raises
    ------
    FacadeGenerationError
        if the return annotation cannot be parsed or mixes constructor shapes ambiguously
    """

    if op.has_receiver:
        return ConstructorKind.NOT_A_CONSTRUCTOR
    if op.returns is inspect.Signature.empty:
        return ConstructorKind.NOT_A_CONSTRUCTOR

    try:
        desc = describe_type(op.returns, impl)
    except ValueError as e:
        raise _generation_error(str(e), impl=impl, operation=op.name) from e

    if desc == _SELF:
        return ConstructorKind.PLAIN

    if desc.name == "Result" and desc.args and desc.args[0] == _SELF:
        return ConstructorKind.RESULT

    if desc.name == "Union":
        carriers = [x for x in desc.args if _carries_self(x)]
        if not carriers:
            return ConstructorKind.NOT_A_CONSTRUCTOR
        others = [x for x in desc.args if not _carries_self(x) and x != _NONE]
        if carriers == [_SELF] and _NONE in desc.args and not others:
            return ConstructorKind.OPTION
        raise _generation_error(
            "return type '{}' mixes the implementing type with other shapes".format(desc),
            impl=impl,
            operation=op.name,
        )

    return ConstructorKind.NOT_A_CONSTRUCTOR
