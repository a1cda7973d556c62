import io
from dataclasses import dataclass
from typing import Any, Literal, Optional

import pystache

from exprfn.exprfn_datatypes import ExprNode, FunctionNotFound, FormatError
from exprfn.exprfn_interpreter import Evaluator
from exprfn.exprfn_transformer import ExprTransformer

# Client-side wrapper for a compiled expression
FUNCTION_TEMPLATE = "function(cmp,fn){return {{body}};}"


@dataclass
class ExecutionResult:
    """The structured result of evaluating an expression."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None
    error_loc: Optional[dict] = None

    def format_error(self) -> str:
        """Formats an error message with line and column if available."""
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")
        if self.error_loc and self.error_loc.get('line') is not None:
            line = self.error_loc.get('line')
            col = self.error_loc.get('col')
            col_info = f", col {col}" if col is not None else ""
            return f"Error on line {line}{col_info}: {msg}"
        return msg


class ExpressionRunner:
    """Evaluates or compiles expression trees.

    Trees may be nodes or plain dict trees; the latter are transformed first.
    """

    _transformer: Optional[ExprTransformer] = None

    def __init__(self, token_source: Any = None):
        if ExpressionRunner._transformer is None:
            ExpressionRunner._transformer = ExprTransformer()
        self.transformer = ExpressionRunner._transformer
        self.evaluator = Evaluator(token_source)
        self.renderer = pystache.Renderer(escape=lambda u: u)

    @property
    def token_source(self):
        return self.evaluator.token_source

    def _node(self, tree: Any) -> ExprNode:
        return self.transformer.transform(tree)

    def evaluate(self, tree: Any, values: Any = None) -> Any:
        """Evaluates a tree; errors propagate to the caller."""
        return self.evaluator.eval(self._node(tree), values)

    def _format_runtime_error(self, e: Exception) -> str:
        match e:
            case FormatError():
                return f"FormatError: {e}"
            case FunctionNotFound() as nf:
                return f"FunctionNotFound: {nf.key}"
            case SyntaxError():
                return f"SyntaxError: {e}"
            case IndexError() | TypeError():
                node = getattr(e, 'expr_node', None)
                name = getattr(node, 'name', None)
                return "TypeError: invalid-args" + (f" in ({name})" if name else "")
            case _:
                return f"InternalError: {e}"

    def run(self, tree: Any, values: Any = None) -> ExecutionResult:
        """Evaluates a tree, capturing failures in the result."""
        try:
            value = self.evaluate(tree, values)
        except Exception as e:
            node = getattr(e, 'expr_node', None)
            loc = getattr(node, 'loc', None)
            self.evaluator._dbg("run failed:", type(e).__name__, e)
            return ExecutionResult('error', error_message=self._format_runtime_error(e), error_loc=loc)
        return ExecutionResult('success', value)

    def compile(self, tree: Any) -> str:
        """Returns the client-side fragment for a tree."""
        out = io.StringIO()
        self._node(tree).compile(out)
        fragment = out.getvalue()
        self.evaluator._dbg("compiled", fragment)
        return fragment

    def compile_function(self, tree: Any) -> str:
        """Returns the fragment wrapped as a client function of (cmp, fn)."""
        return self.renderer.render(FUNCTION_TEMPLATE, {'body': self.compile(tree)})
