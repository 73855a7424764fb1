"""Custom exceptions for RBAC definition resolution.

Exception Hierarchy:
    RBACManagerError (base)
    ├── DefinitionValidationError (also a ValueError)
    ├── NamespaceLookupError (also a LookupError)
    └── DefinitionLoadError

Example:
    >>> from rbac_manager.errors import DefinitionValidationError
    >>> raise DefinitionValidationError(
    ...     "No subjects specified",
    ...     definition="example",
    ...     binding="admin",
    ... )
    DefinitionValidationError: Invalid RBAC binding 'example-admin': No subjects specified
"""

from __future__ import annotations


class RBACManagerError(Exception):
    """Base exception for all rbac-manager errors.

    Allows callers to catch every resolution failure with a single
    except clause and treat it as "apply nothing".

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class DefinitionValidationError(RBACManagerError, ValueError):
    """Raised when a definition cannot be resolved as written.

    Covers bindings without subjects and role binding specs without a
    single role reference or without a namespace target.

    Attributes:
        definition: Name of the RBACDefinition being resolved.
        binding: Name of the offending binding, if known.
        reason: Why the entry is invalid.

    Example:
        >>> err = DefinitionValidationError(
        ...     "role or clusterRole required",
        ...     definition="example",
        ...     binding="admin",
        ... )
        >>> err.binding
        'admin'
    """

    def __init__(
        self,
        reason: str,
        *,
        definition: str,
        binding: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            reason: Why the entry is invalid.
            definition: Name of the RBACDefinition.
            binding: Name of the offending binding.
        """
        self.definition = definition
        self.binding = binding
        self.reason = reason
        location = f"{definition}-{binding}" if binding else definition
        RBACManagerError.__init__(self, f"Invalid RBAC binding '{location}': {reason}")


class NamespaceLookupError(RBACManagerError, LookupError):
    """Raised when the namespace directory cannot answer a selector query.

    Attributes:
        selector: Label selector string that was queried.
        reason: Sanitized description of the underlying failure.

    Example:
        >>> raise NamespaceLookupError(selector="env=prod", reason="Forbidden (HTTP 403)")
        NamespaceLookupError: Failed to list namespaces matching 'env=prod': Forbidden (HTTP 403)
    """

    def __init__(self, *, selector: str = "", reason: str = "") -> None:
        """Initialize the exception.

        Args:
            selector: Label selector string that was queried.
            reason: Description of the underlying failure.
        """
        self.selector = selector
        self.reason = reason
        message = "Failed to list namespaces"
        if selector:
            message = f"{message} matching '{selector}'"
        if reason:
            message = f"{message}: {reason}"
        RBACManagerError.__init__(self, message)


class DefinitionLoadError(RBACManagerError):
    """Raised when a definition document cannot be read or parsed.

    Attributes:
        source: File path or description of the document.
    """

    def __init__(self, message: str, *, source: str = "") -> None:
        """Initialize the exception.

        Args:
            message: What went wrong.
            source: File path or description of the document.
        """
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


__all__ = [
    "RBACManagerError",
    "DefinitionValidationError",
    "NamespaceLookupError",
    "DefinitionLoadError",
]
