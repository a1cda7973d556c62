import math
import re

import pytest

from exprfn.exprfn_datatypes import FormatError, PropertyReference
from exprfn.exprfn_stringify import stringify


class ClientHelpers:
    """Stand-in for the client helper library the compiled fragments call."""

    def __init__(self, tokens=None):
        self.tokens = tokens or {}

    def empty(self, value):
        if value is None:
            return True
        if isinstance(value, str):
            return value == ""
        if isinstance(value, (list, tuple)):
            return len(value) == 0
        return False

    def format(self, template, *args):
        if template is None:
            return ""
        template = stringify(template)
        if not args:
            return template
        values = ["" if a is None else stringify(a) for a in args]

        def sub(match):
            index = int(match.group(1))
            if index >= len(values):
                raise FormatError(template, index, len(values))
            return values[index]
        return re.sub(r"\{(\d+)\}", sub, template)

    def token(self, key):
        value = self.tokens.get(key) if isinstance(key, str) else None
        return "" if value is None else value

    def join(self, separator, *values):
        separator = "" if separator is None else stringify(separator)
        parts = [stringify(v) for v in values]
        return separator.join(p for p in parts if p is not None)


class ClientComponent:
    def __init__(self, values):
        self.values = values

    def get(self, path):
        return PropertyReference(path).resolve(self.values)


def run_fragment(fragment, values=None, tokens=None):
    """Executes a compiled fragment the way the client runtime would."""
    scope = {
        "fn": ClientHelpers(tokens),
        "cmp": ClientComponent(values or {}),
        "null": None,
        "true": True,
        "false": False,
        "NaN": math.nan,
        "Infinity": math.inf,
    }
    return eval(fragment, {"__builtins__": {}}, scope)


@pytest.fixture
def client():
    return run_fragment
