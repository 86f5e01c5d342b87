"""Domain exceptions.

All errors raised by the variant engine when its structural rules are
violated or a whole-run precondition cannot be met. Batch operations
record per-item failures in their result objects instead of raising.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching engine-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Synthesis Errors
# ============================================================================


class StructuralError(DomainError):
    """Raised when attribute lines cannot be expanded into combinations.

    A line with zero values would silently zero the combination count,
    so it is rejected before any code is assigned.
    """

    def __init__(self, reason: str, line_index: int | None = None) -> None:
        """Initialize structural error.

        Args:
            reason: What is wrong with the attribute lines.
            line_index: Index of the offending line, if any.
        """
        super().__init__(
            f"Invalid attribute lines: {reason}",
            details={"reason": reason, "line_index": line_index},
        )


class CollisionExhaustionError(DomainError):
    """Raised when no free product code is found within the retry bound."""

    def __init__(self, base_code: str, candidate: str, retries: int) -> None:
        """Initialize collision exhaustion error.

        Args:
            base_code: Base product code.
            candidate: Unsuffixed code that kept colliding.
            retries: Number of suffixes tried.
        """
        super().__init__(
            f"No free code for '{candidate}' (base '{base_code}') "
            f"after {retries} suffix retries",
            details={
                "base_code": base_code,
                "candidate": candidate,
                "retries": retries,
            },
        )


class LookupMissError(DomainError):
    """Raised when an attribute value is not present in the catalog."""

    def __init__(self, value: str, attribute_type: str | None = None) -> None:
        """Initialize lookup miss error.

        Args:
            value: Attribute value name that was looked up.
            attribute_type: Attribute type searched, if known.
        """
        where = f" in {attribute_type}" if attribute_type else ""
        super().__init__(
            f"Attribute value '{value}' not found{where}",
            details={"value": value, "attribute_type": attribute_type},
        )


# ============================================================================
# Sync Errors
# ============================================================================


class SyncError(DomainError):
    """Base class for sync-related errors."""

    pass


class PerItemUpdateError(SyncError):
    """Raised by a local store when writing one variant fails."""

    def __init__(self, code: str, reason: str) -> None:
        """Initialize per-item update error.

        Args:
            code: Product code of the variant being written.
            reason: Underlying failure description.
        """
        super().__init__(
            f"Failed to update {code}: {reason}",
            details={"code": code, "reason": reason},
        )


class ParentProductNotFoundError(SyncError):
    """Raised when the parent product of a sync run is not stored locally."""

    def __init__(self, code: str) -> None:
        """Initialize parent product not found error.

        Args:
            code: Parent product code.
        """
        super().__init__(
            f"Parent product {code} not found",
            details={"code": code},
        )


class RemoteTemplateNotFoundError(SyncError):
    """Raised when the remote catalog has no template for a parent code."""

    def __init__(self, code: str) -> None:
        """Initialize remote template not found error.

        Args:
            code: Parent product code.
        """
        super().__init__(
            f"Product {code} does not exist in the remote catalog yet; "
            "upload it before syncing variants",
            details={"code": code},
        )


# ============================================================================
# Distribution Errors
# ============================================================================


class InvalidQuantityError(DomainError):
    """Raised when a quantity to distribute is invalid."""

    def __init__(self, quantity: int, reason: str = "Quantity must not be negative") -> None:
        """Initialize invalid quantity error.

        Args:
            quantity: The invalid quantity value.
            reason: Explanation of why the quantity is invalid.
        """
        super().__init__(
            f"Invalid quantity {quantity}: {reason}",
            details={"quantity": quantity, "reason": reason},
        )
