"""Tests for the structured error types."""
from questmap.core.errors import (
    CombatNotFoundError,
    ErrorCode,
    GameError,
    InvalidCombatStateError,
    OutOfRangeSeedError,
    UnsupportedCategoryError,
    ValidationError,
)
from questmap.core.world import POICategory


class TestGameError:
    """Tests for the base error."""

    def test_to_dict_shape(self):
        """Errors serialize under an 'error' key."""
        error = GameError(code=ErrorCode.CONFLICT, message="Busy", details={"a": 1}, http_status=409)
        assert error.to_dict() == {
            "error": {
                "code": "CONFLICT",
                "message": "Busy",
                "details": {"a": 1},
                "recoverable": True,
                "recovery_hint": None,
            }
        }
        assert "CONFLICT" in repr(error)

    def test_defaults(self):
        """Unknown errors default to a 500."""
        error = GameError()
        assert error.code == ErrorCode.UNKNOWN
        assert error.http_status == 500
        assert str(error) == "An unexpected error occurred"


class TestSpecificErrors:
    """Tests for each error type's code and status."""

    def test_seed_out_of_range(self):
        error = OutOfRangeSeedError(-1)
        assert error.code == ErrorCode.SEED_OUT_OF_RANGE
        assert error.http_status == 400
        assert error.details == {"seed": "-1"}

    def test_unsupported_category(self):
        error = UnsupportedCategoryError(POICategory.NPC)
        assert error.code == ErrorCode.ENCOUNTER_UNSUPPORTED_CATEGORY
        assert error.http_status == 400
        assert error.details == {"category": "npc"}
        assert "npc" in error.message

    def test_invalid_combat_state(self):
        error = InvalidCombatStateError("done", outcome="victory")
        assert error.code == ErrorCode.COMBAT_INVALID_STATE
        assert error.http_status == 409
        assert error.details == {"outcome": "victory"}
        assert InvalidCombatStateError().details == {}

    def test_combat_not_found(self):
        error = CombatNotFoundError("abc")
        assert error.code == ErrorCode.COMBAT_NOT_FOUND
        assert error.http_status == 404
        assert error.details == {"combat_id": "abc"}

    def test_validation_error(self):
        error = ValidationError("max_hp", "Must be positive", 0)
        assert error.http_status == 400
        assert error.details == {"field": "max_hp", "value": "0"}

