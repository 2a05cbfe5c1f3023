from saae.core.diagnostics import (
    DiagnosticExtractor,
    RawDiagnostic,
    RawFixIt,
    RawFixItChange,
    RawNote,
    extract_diagnostics,
)
from saae.core.mutation import (
    InsertionPosition,
    delete_node,
    insert_nodes,
    modify_leading_trivia,
    modify_leading_trivia_at_line,
    replace_file_header,
    replace_node,
)
from saae.core.parser import collect_raw_diagnostics, parse_file, parse_source
from saae.core.paths import (
    AddressingDomain,
    SelectionStrategy,
    compute_path,
    find_tokens_at_line,
    resolve_path,
)
from saae.core.tree import SyntaxTree, make_token
from saae.errors import (
    ASTModificationFailedError,
    InvalidInsertionPointError,
    InvalidReplacementContextError,
    NodeNotFoundError,
    NodeOperationError,
)
from saae.models import (
    Composite,
    DiagnosticRecord,
    FixItSuggestion,
    Note,
    Severity,
    SourceLocation,
    SourceSpan,
    Token,
    Trivia,
    TriviaKind,
)

__all__ = [
    "ASTModificationFailedError",
    "AddressingDomain",
    "Composite",
    "DiagnosticExtractor",
    "DiagnosticRecord",
    "FixItSuggestion",
    "InsertionPosition",
    "InvalidInsertionPointError",
    "InvalidReplacementContextError",
    "NodeNotFoundError",
    "NodeOperationError",
    "Note",
    "RawDiagnostic",
    "RawFixIt",
    "RawFixItChange",
    "RawNote",
    "SelectionStrategy",
    "Severity",
    "SourceLocation",
    "SourceSpan",
    "SyntaxTree",
    "Token",
    "Trivia",
    "TriviaKind",
    "collect_raw_diagnostics",
    "compute_path",
    "delete_node",
    "extract_diagnostics",
    "find_tokens_at_line",
    "insert_nodes",
    "make_token",
    "modify_leading_trivia",
    "modify_leading_trivia_at_line",
    "parse_file",
    "parse_source",
    "replace_file_header",
    "replace_node",
    "resolve_path",
]
