"""
Utility functions for the expression language, mirroring the client-side
helper library.

Each function evaluates against concrete values and compiles to a script
fragment that calls the matching client helper; both paths must agree.
"""
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from exprfn.exprfn_datatypes import FunctionNotFound, FormatError, ExprNode, is_null_node
from exprfn.exprfn_stringify import stringify
from exprfn.exprfn_tokens import resolve_token

# Client runtime helper names and the empty string literal
JS_EMPTY = '""'
JS_FN_EMPTY = "fn.empty"
JS_FN_FORMAT = "fn.format"
JS_FN_TOKEN = "fn.token"
JS_FN_JOIN = "fn.join"

_PLACEHOLDER = re.compile(r"\{(\d+)\}")


def is_empty(obj: Any) -> bool:
    """Checks if the object is empty: null, an empty string or an empty list.

    An object with no properties is not considered empty.
    """
    if obj is None:
        return True
    if isinstance(obj, str):
        return obj == ""
    if isinstance(obj, (list, tuple)):
        return len(obj) == 0
    return False


def format_positional(template: str, values: List[str]) -> str:
    """Replaces `{n}` placeholders with values[n]; raises FormatError when n is out of range."""
    def substitute(match):
        index = int(match.group(1))
        if index >= len(values):
            raise FormatError(template, index, len(values))
        return values[index]
    return _PLACEHOLDER.sub(substitute, template)


def _compile_arg(out, arg: Optional[ExprNode]) -> None:
    if arg is None:
        out.write("null")
    else:
        arg.compile(out)


def _compile_call(out, helper: str, args: List[Optional[ExprNode]]) -> None:
    out.write(helper)
    out.write("(")
    for index, arg in enumerate(args):
        if index > 0:
            out.write(",")
        _compile_arg(out, arg)
    out.write(")")


class Function(ABC):
    """A named, stateless expression function."""
    keys: Tuple[str, ...] = ()

    @abstractmethod
    def evaluate(self, args: List[Any], context: Any = None) -> Any: raise NotImplementedError

    @abstractmethod
    def compile(self, out, args: List[Optional[ExprNode]]) -> None: raise NotImplementedError

    def __repr__(self) -> str:
        return f"<Function {'/'.join(self.keys)}>"


class Empty(Function):
    """Matches isEmpty() on the client."""
    keys = ("empty",)

    def evaluate(self, args, context=None):
        return is_empty(args[0])

    def compile(self, out, args):
        _compile_call(out, JS_FN_EMPTY, args[:1])


class Format(Function):
    """Matches format() on the client, except that a missing or null format
    string renders as an empty string.

    Expressions are shown in the UI, so nulls never leak into the text.
    """
    keys = ("format",)

    def evaluate(self, args, context=None):
        size = len(args)
        if size == 0 or args[0] is None:
            return ""
        template = stringify(args[0])
        if size == 1:
            return template
        values = ["" if a is None else stringify(a) for a in args[1:]]
        return format_positional(template, values)

    def compile(self, out, args):
        if not args or is_null_node(args[0]):
            out.write(JS_EMPTY)
            return
        _compile_call(out, JS_FN_FORMAT, args)


class Token(Function):
    """Application level configuration injection."""
    keys = ("token", "t")

    def evaluate(self, args, context=None):
        key = args[0] if args else None
        return resolve_token(context, key).collapse()

    def compile(self, out, args):
        out.write(JS_FN_TOKEN)
        out.write("(")
        a0 = args[0] if args else None
        if is_null_node(a0):
            out.write(JS_EMPTY)
        else:
            a0.compile(out)
        out.write(")")


class Join(Function):
    """Concatenates values with a separator; null values are skipped."""
    keys = ("join",)

    def evaluate(self, args, context=None):
        size = len(args)
        if size < 2:
            return ""
        if size == 2:
            return stringify(args[1])
        separator = stringify(args[0] if args[0] is not None else "")
        parts = (stringify(a) for a in args[1:])
        return separator.join(p for p in parts if p is not None)

    def compile(self, out, args):
        size = len(args)
        if size < 2:
            out.write(JS_EMPTY)
            return
        if size == 2:
            _compile_arg(out, args[1])
            return
        _compile_call(out, JS_FN_JOIN, args)


EMPTY = Empty()
FORMAT = Format()
TOKEN = Token()
JOIN = Join()

FUNCTIONS: Dict[str, Function] = {
    key: fn for fn in (EMPTY, FORMAT, TOKEN, JOIN) for key in fn.keys
}


def get_function(name: str) -> Function:
    """Looks up a function by exact key."""
    try:
        return FUNCTIONS[name]
    except (KeyError, TypeError):
        raise FunctionNotFound(name) from None


__all__ = [
    "Function", "Empty", "Format", "Token", "Join",
    "EMPTY", "FORMAT", "TOKEN", "JOIN", "FUNCTIONS",
    "get_function", "is_empty", "format_positional",
    "JS_EMPTY", "JS_FN_EMPTY", "JS_FN_FORMAT", "JS_FN_TOKEN", "JS_FN_JOIN",
]
