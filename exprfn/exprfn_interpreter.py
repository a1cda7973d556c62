"""
The expression evaluator: computes argument values, then calls functions.
"""
import os
import sys
from typing import Any, Optional

from exprfn.exprfn_datatypes import ExprNode, Literal, PropertyReference, FunctionCall


class Evaluator:
    """Evaluates expression nodes against caller-supplied values.

    `token_source` is the context handle passed to every function; only
    `token` reads it.
    """

    def __init__(self, token_source: Any = None):
        self.token_source = token_source

    def _dbg(self, *parts):
        if os.environ.get("EXPRFN_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    def eval(self, node: Optional[ExprNode], values: Any = None) -> Any:
        match node:
            case None:
                return None
            case Literal():
                return node.value
            case PropertyReference():
                return node.resolve(values)
            case FunctionCall():
                args = [self.eval(arg, values) for arg in node.args]
                self._dbg("Evaluator.call", node.name, "argc", len(args))
                try:
                    return node.function.evaluate(args, self.token_source)
                except Exception as e:
                    # Innermost failing call wins
                    if getattr(e, "expr_node", None) is None:
                        e.expr_node = node
                    raise
            case _:
                raise TypeError(f"Cannot evaluate {type(node).__name__}")
