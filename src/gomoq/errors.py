"""Domain-specific errors for gomoq."""

from __future__ import annotations


class GoMoqError(Exception):
    """Base error for gomoq."""


class NoInterfaceSpecifiedError(GoMoqError):
    """Raised when a generation request names no interfaces."""


class DirectoryParseError(GoMoqError):
    """Raised when the source directory cannot be read or parsed."""


class NoPackageFoundError(GoMoqError):
    """Raised when no non-test package can be selected from the source directory."""


class TypeCheckError(GoMoqError):
    """Raised when the selected package fails Go type checking."""

    def __init__(self, message: str, diagnostics: list[str] | None = None):
        super().__init__(message)
        self.diagnostics = list(diagnostics or [])


class InterfaceNotFoundError(GoMoqError):
    """Raised when a requested name is absent from the package scope."""


class NotAnInterfaceError(GoMoqError):
    """Raised when a requested name resolves to something other than an interface type."""


class UnsupportedInterfaceError(GoMoqError):
    """Raised for generic or constraint-only interfaces, which cannot be mocked."""


class ResolverError(GoMoqError):
    """Raised when the Go resolver helper fails or prints unusable output."""


class GoToolchainError(GoMoqError):
    """Raised when a required Go tool (`go`, `gofmt`) is not available."""


class FormatError(GoMoqError):
    """Raised when gofmt rejects the generated source."""
