"""
Transforms a plain expression tree into argument expression nodes.

The tree is what an external parser hands over (or what was stored as
JSON/YAML): dicts tagged `call`, `property` or `literal`, and bare scalars.
"""

from exprfn.exprfn_datatypes import ExprNode, Literal, PropertyReference, FunctionCall


class ExprTransformer:
    def _attach_loc(self, obj, node):
        line = node.get('line'); col = node.get('col')
        if line is not None and col is not None:
            obj.loc = {'line': line, 'col': col, 'tag': node.get('tag'), 'text': node.get('text')}
        return obj

    def transform(self, node: object) -> ExprNode:
        # Already transformed
        if isinstance(node, ExprNode):
            return node

        # Scalars and lists are literal values
        if not isinstance(node, dict):
            return Literal(node)

        tag = node.get('tag')
        match tag:
            case 'call':
                name = node.get('name')
                if not isinstance(name, str):
                    raise SyntaxError(f"call node without a function name: {node!r}")
                children = node.get('children') or []
                args = [None if c is None else self.transform(c) for c in children]
                return self._attach_loc(FunctionCall(name, args), node)
            case 'property':
                path = node.get('path')
                if isinstance(path, list):
                    path = ".".join(str(p) for p in path)
                return self._attach_loc(PropertyReference(path), node)
            case 'literal':
                return self._attach_loc(Literal(node.get('value')), node)
            case None:
                # Untagged dicts are object literals
                return Literal(node)
            case _:
                raise SyntaxError(f"Unknown expression node tag: {tag!r}")
