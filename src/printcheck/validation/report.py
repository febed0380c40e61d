from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

@dataclass(frozen=True)
class CheckResult:
    """
    Outcome of a single assessment check (resolution, effective DPI, aspect ratio, blur).
    """
    check_id: str
    passed: bool
    message: str = ""
    suggestion: str = ""
    metrics: dict[str, Any] | None = None

@dataclass(frozen=True)
class ValidationResult:
    """
    Verdict for one image against one print target.

    Metrics are None when the check that computes them never ran.
    """
    valid: bool
    message: str
    suggestion: str = ""
    effective_dpi: Optional[float] = None
    width_pct: Optional[float] = None
    height_pct: Optional[float] = None
    checks: list[CheckResult] = field(default_factory=list)

    @classmethod
    def rejected(cls, message: str) -> "ValidationResult":
        """An invalid result for input that never reached the numeric checks."""
        return cls(valid=False, message=message)

    @property
    def status(self) -> str:
        return "valid" if self.valid else "invalid"

    def to_response(self) -> dict[str, Any]:
        """Response envelope used by the HTTP API and the CLI's --json output."""
        return {
            "status": self.status,
            "message": self.message,
            "suggestion": self.suggestion,
            "effectiveDpi": self.effective_dpi,
            "widthPct": self.width_pct,
            "heightPct": self.height_pct,
        }


def error_response(message: str, status: str = "error") -> dict[str, Any]:
    """Envelope for a response that carries no metrics (processing fault or rejected request)."""
    return {
        "status": status,
        "message": message,
        "suggestion": None,
        "effectiveDpi": None,
        "widthPct": None,
        "heightPct": None,
    }
