class NodeOperationError(Exception):
    """Base class for recoverable failures of path resolution and tree edits.

    Subclasses correspond to the four failure kinds a caller can act on; the
    string form is meant to be shown to users verbatim.
    """

    kind = "astModificationFailed"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeOperationError):
            return NotImplemented
        return type(self) is type(other) and self.reason == other.reason

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.reason))


class NodeNotFoundError(NodeOperationError):
    kind = "nodeNotFound"

    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.path = path

    def __str__(self) -> str:
        return f"Node not found at path: {self.path}"


class InvalidInsertionPointError(NodeOperationError):
    kind = "invalidInsertionPoint"

    def __str__(self) -> str:
        return f"Invalid insertion point: {self.reason}"


class InvalidReplacementContextError(NodeOperationError):
    kind = "invalidReplacementContext"

    def __str__(self) -> str:
        return f"Invalid replacement context: {self.reason}"


class ASTModificationFailedError(NodeOperationError):
    kind = "astModificationFailed"

    def __str__(self) -> str:
        return f"AST modification failed: {self.reason}"
