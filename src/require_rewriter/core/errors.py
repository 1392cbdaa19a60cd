class RequireConversionError(Exception):
    """A top-level ``require`` statement that cannot be turned into an ``import``.

    Fatal for the file being transformed; other files are unaffected.
    """

    def __init__(self, snippet: str, file_path: str | None = None, line: int = 0, column: int = 0) -> None:
        self.snippet = snippet
        self.file_path = file_path
        self.line = line
        self.column = column
        super().__init__(self._render())

    def _render(self) -> str:
        location = f" ({self.file_path}:{self.line}:{self.column})" if self.file_path else ""
        return (
            f"The following require statement cannot be converted{location}.\n"
            f"      -> {self.snippet}\n"
            f"         {'^' * len(self.snippet)}"
        )


class SourceParseError(ValueError):
    """The source text has syntax errors and cannot be rewritten safely."""


class GlobDerivationError(ValueError):
    """A dynamic ``require`` argument cannot be turned into a filesystem glob."""
