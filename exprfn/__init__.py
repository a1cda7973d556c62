from exprfn.exprfn_datatypes import (
    FunctionNotFound, FormatError, DefinitionNotReady, InvalidApplication,
    ExprNode, Literal, PropertyReference, FunctionCall,
)
from exprfn.exprfn_stringify import stringify
from exprfn.exprfn_functions import (
    Function, Empty, Format, Token, Join,
    EMPTY, FORMAT, TOKEN, JOIN, FUNCTIONS, get_function,
)
from exprfn.exprfn_tokens import (
    INVALID_APPLICATION, TokenResult, ApplicationDefinition, ContextTokenSource,
    resolve_token, load_token_map, save_token_map,
)
from exprfn.exprfn_runtime import ExpressionRunner, ExecutionResult
