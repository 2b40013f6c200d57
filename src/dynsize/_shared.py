import sys
import types
from typing import Protocol, Sequence, Mapping, Callable, Iterable, Any



# [Dynamic Code Generation]

_DEFAULT_MODULE = types.ModuleType('dynsize._generated', None)


def create_function(
    name: str,
    args: Sequence[str],
    body: Sequence[str],
    return_type: Any = Any,
    module: str = '',
    *,
    globals: dict[str, Any] | None = None,
    locals: Mapping[str, Any] | Iterable[tuple[str, Any]] = (),
) -> Callable[..., Any]:
    """Compile a new function from source.

    Args:
        * name: Name for the new function.

        * args: Argument signatures (as strings), one per item.

        * body: Source lines of the function body, one per item.

        * return_type: Object used as the return annotation.

        * module: Value of the function's `__module__`. When *globals*
        is None, the module's dictionary (if imported) becomes the
        function's global scope.

        * globals: The global scope for the new function.

        * locals: Names made available to the function through its
        closure.

    """
    assert not isinstance(body, str)
    source = '\n'.join(f'        {line}' for line in body)

    locals = dict(locals)
    locals["_return_type"] = return_type

    if globals is None:
        if module in sys.modules:
            globals = sys.modules[module].__dict__
        else:
            globals = _DEFAULT_MODULE.__dict__

    closure = (
        f"def __create_function__({', '.join(locals)}):\n"
        f"    def {name}({', '.join(args)}) -> _return_type:\n{source}\n"
        f"    return {name}"
    )

    scope = {}
    exec(closure, globals, scope)

    fn = scope["__create_function__"](**locals)
    fn.__module__   = module or _DEFAULT_MODULE.__name__
    fn.__qualname__ = fn.__name__ = name

    return fn




# [ Types ]

class AbstractComposition(Protocol):
    """Base class for classes that wrap other objects.

    Instances of a base composition class must have a `_object_value_`
    attribute pointing to the wrapped object.
    """
    __slots__ = ()

    _object_value_: Any
