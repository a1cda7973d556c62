"""
A printer that renders Python values as client-side script literals.
"""
import collections.abc
import json
import math

from exprfn.exprfn_stringify import stringify


class JsPrinter:
    """Formats Python values into valid script source for the client runtime."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj)

    def _get_handler(self, obj):
        """Dispatcher to find the correct formatting method."""
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        # Fallback for subclasses and other containers
        if isinstance(obj, bool): return self._pformat_bool
        if isinstance(obj, str): return self._pformat_str
        if isinstance(obj, (int, float)): return self._pformat_number
        if isinstance(obj, collections.abc.Mapping): return self._pformat_dict
        if isinstance(obj, (list, tuple)): return self._pformat_array
        # Unknown types become their canonical string
        return lambda o: self._pformat_str(stringify(o))

    def _create_handlers(self):
        return {
            str: self._pformat_str,
            int: self._pformat_number,
            float: self._pformat_number,
            bool: self._pformat_bool,
            type(None): self._pformat_none,
            list: self._pformat_array,
            tuple: self._pformat_array,
            dict: self._pformat_dict,
        }

    def _pformat_str(self, obj):
        # JSON string syntax with U+2028 and U+2029 escaped
        text = json.dumps(obj, ensure_ascii=False)
        return text.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")

    def _pformat_number(self, obj):
        if isinstance(obj, float):
            if math.isnan(obj):
                return "NaN"
            if math.isinf(obj):
                return "Infinity" if obj > 0 else "-Infinity"
        return stringify(obj)

    def _pformat_bool(self, obj):
        return 'true' if obj else 'false'

    def _pformat_none(self, obj):
        return 'null'

    def _pformat_array(self, obj):
        return "[" + ",".join(self.pformat(item) for item in obj) + "]"

    def _pformat_dict(self, obj):
        if not obj:
            return "{}"
        items = (f"{self._pformat_str(str(k))}:{self.pformat(v)}" for k, v in obj.items())
        return "{" + ",".join(items) + "}"
