"""Domain-specific errors for gogen."""

from __future__ import annotations


class GogenError(Exception):
    """Base error for gogen."""


class ResolutionError(GogenError):
    """Raised when a Go package or the requested declaration cannot be resolved."""


class AnnotationSyntaxError(GogenError):
    """Raised when a `gogen` struct tag cannot be parsed."""


# Name used by callers that think of tags as annotations.
MalformedAnnotation = AnnotationSyntaxError


class TemplateError(GogenError):
    """Raised when a template fails to compile or to render a description."""


class FormatError(GogenError):
    """Raised when the generated source cannot be formatted."""


class FileIOError(GogenError):
    """Raised when reading the template or writing the output fails."""
