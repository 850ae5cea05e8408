"""
QuestMap Engine - Custom Error Types
Structured exceptions for game-specific errors with recovery hints.
"""
from typing import Dict, Any, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the game engine."""
    # General errors
    UNKNOWN = "UNKNOWN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # World generation errors
    SEED_OUT_OF_RANGE = "SEED_OUT_OF_RANGE"

    # Encounter errors
    ENCOUNTER_UNSUPPORTED_CATEGORY = "ENCOUNTER_UNSUPPORTED_CATEGORY"

    # Combat errors
    COMBAT_NOT_FOUND = "COMBAT_NOT_FOUND"
    COMBAT_INVALID_STATE = "COMBAT_INVALID_STATE"


class GameError(Exception):
    """
    Base exception for all game-related errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Human-readable message
    - Additional context details
    - Recovery hints for the caller
    """

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNKNOWN,
        message: str = "An unexpected error occurred",
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: Optional[str] = None,
        http_status: int = 500
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON response."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
                "recoverable": self.recoverable,
                "recovery_hint": self.recovery_hint
            }
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# =============================================================================
# World Generation Errors
# =============================================================================

class OutOfRangeSeedError(GameError):
    """Raised when a seed falls outside the non-negative 31-bit domain."""

    def __init__(self, seed: Any):
        super().__init__(
            code=ErrorCode.SEED_OUT_OF_RANGE,
            message=f"Seed {seed!r} is outside the accepted range [0, 2^31)",
            details={"seed": str(seed)},
            http_status=400,
            recovery_hint="Use a non-negative integer below 2147483648"
        )


# =============================================================================
# Encounter Errors
# =============================================================================

class UnsupportedCategoryError(GameError):
    """Raised when a POI category has no encounter generator."""

    def __init__(self, category: Any):
        value = getattr(category, "value", category)
        super().__init__(
            code=ErrorCode.ENCOUNTER_UNSUPPORTED_CATEGORY,
            message=f"No encounter can be materialized for category '{value}'",
            details={"category": str(value)},
            http_status=400,
            recovery_hint="Route this POI to the content service that owns its category"
        )


# =============================================================================
# Combat Errors
# =============================================================================

class CombatError(GameError):
    """Combat-related errors."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.COMBAT_INVALID_STATE,
        message: str = "Invalid combat action",
        **kwargs
    ):
        kwargs.setdefault("http_status", 400)
        super().__init__(code=code, message=message, **kwargs)


class InvalidCombatStateError(CombatError):
    """Raised when a round is resolved on a finished combat or with a bad action."""

    def __init__(self, message: str = "Combat cannot continue", outcome: Optional[str] = None):
        details = {}
        if outcome:
            details["outcome"] = outcome
        super().__init__(
            code=ErrorCode.COMBAT_INVALID_STATE,
            message=message,
            details=details,
            http_status=409,
            recovery_hint="Start a new encounter to fight again"
        )


class CombatNotFoundError(CombatError):
    """Raised when a combat id does not match any active encounter."""

    def __init__(self, combat_id: Optional[str] = None):
        details = {}
        if combat_id:
            details["combat_id"] = combat_id
        super().__init__(
            code=ErrorCode.COMBAT_NOT_FOUND,
            message="Combat not found",
            details=details,
            http_status=404,
            recovery_hint="The encounter may have ended or been abandoned"
        )


# =============================================================================
# Generic Errors
# =============================================================================

class ValidationError(GameError):
    """Input validation errors."""

    def __init__(self, field: str, message: str, value: Any = None):
        details = {"field": field}
        if value is not None:
            details["value"] = str(value)
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            details=details,
            http_status=400,
            recovery_hint=f"Check the value for '{field}'"
        )

