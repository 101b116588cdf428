"""Engine errors. Each carries translation-ready data for transports."""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..validation import ValidationResult


class EngineError(Exception):
    code = "ENGINE_ERROR"

    def __init__(self, message_key: str, params: Optional[Dict[str, Any]] = None):
        super().__init__(message_key)
        self.message_key = message_key
        self.params = params or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message_key": self.message_key, "params": dict(self.params)}


class ValidationFailedError(EngineError):
    """Input has at least one Fatal validation issue; no metrics were computed."""
    code = "VALIDATION_FAILED"

    def __init__(self, validation: ValidationResult):
        fatal = [i.code for i in validation.fatal_errors()]
        super().__init__("engine.error.validation_failed", {"fatal_codes": fatal})
        self.validation = validation

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["validation"] = self.validation.to_dict()
        return data


class InvalidInputError(EngineError):
    code = "INVALID_INPUT"


class CalculationError(EngineError):
    code = "CALCULATION_ERROR"
