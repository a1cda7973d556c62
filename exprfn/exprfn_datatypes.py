"""
Defines the core data types for the expression function library.

This module provides the error classes raised by the functions and the
argument expression nodes they consume. Nodes know how to compile
themselves into client-side script; evaluation lives in the interpreter.
"""

import collections.abc
from typing import List, Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from exprfn.exprfn_functions import Function


class FunctionNotFound(KeyError):
    def __init__(self, key: str):
        super().__init__(key)
        self.key = key


class FormatError(ValueError):
    """A `{n}` placeholder referenced a substitution value that does not exist."""
    def __init__(self, template: str, index: int, count: int):
        super().__init__(
            f"placeholder {{{index}}} out of range in {template!r} ({count} value(s) given)"
        )
        self.template = template
        self.index = index
        self.count = count


class DefinitionNotReady(Exception):
    """The current application definition cannot be resolved yet."""
    pass


class InvalidApplication(TypeError):
    """The resolved application definition is not of the expected kind."""
    pass


# =================================================================
# Argument Expression Nodes
# =================================================================

class ExprNode:
    """Base class for argument expressions that can compile themselves."""
    loc: Optional[dict] = None

    def compile(self, out) -> None:
        raise NotImplementedError


class Literal(ExprNode):
    """A constant value."""
    def __init__(self, value: Any):
        self.value = value

    def compile(self, out) -> None:
        from exprfn.exprfn_printer import JsPrinter
        out.write(JsPrinter().pformat(self.value))

    def __eq__(self, other):
        return isinstance(other, Literal) and type(other.value) is type(self.value) \
            and other.value == self.value

    def __repr__(self) -> str:
        return f"<Literal {self.value!r}>"


class PropertyReference(ExprNode):
    """A dotted lookup such as `v.name`, resolved against the caller's values."""
    def __init__(self, path: str):
        if not isinstance(path, str) or not path:
            raise ValueError("PropertyReference requires a non-empty path")
        self.path = path

    @property
    def segments(self) -> List[str]:
        return self.path.split(".")

    def resolve(self, values: Any) -> Any:
        """Walks the path through mappings, sequences and attributes; missing → None."""
        current = values
        for seg in self.segments:
            if current is None:
                return None
            if isinstance(current, collections.abc.Mapping):
                current = current.get(seg)
            elif isinstance(current, collections.abc.Sequence) and not isinstance(current, str) \
                    and seg.isdigit():
                idx = int(seg)
                current = current[idx] if idx < len(current) else None
            else:
                current = getattr(current, seg, None)
        return current

    def compile(self, out) -> None:
        from exprfn.exprfn_printer import JsPrinter
        out.write(f"cmp.get({JsPrinter().pformat(self.path)})")

    def __eq__(self, other):
        return isinstance(other, PropertyReference) and other.path == self.path

    def __repr__(self) -> str:
        return f"<PropertyReference {self.path}>"


class FunctionCall(ExprNode):
    """A call of a registered function with argument sub-expressions."""
    def __init__(self, name: str, args: List[Optional[ExprNode]], function: Optional['Function'] = None):
        from exprfn.exprfn_functions import get_function
        self.name = name
        self.args = list(args)
        self.function = function if function is not None else get_function(name)

    def compile(self, out) -> None:
        self.function.compile(out, self.args)

    def __eq__(self, other):
        return isinstance(other, FunctionCall) and other.function is self.function \
            and other.args == self.args

    def __repr__(self) -> str:
        return f"<FunctionCall {self.name} argc={len(self.args)}>"


def is_null_node(node: Optional[ExprNode]) -> bool:
    """True for an absent argument or a literal null."""
    return node is None or (isinstance(node, Literal) and node.value is None)
