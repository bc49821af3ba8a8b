# ============================================================
# NARRATION EXCEPTIONS
# ============================================================

class NarrationError(Exception):
    """Base exception for narrator failures"""
    pass


class JSONExtractionError(NarrationError):
    """Could not extract JSON from LLM response"""
    pass


class ValidationFailedError(NarrationError):
    """JSON was extracted but failed Pydantic validation"""
    pass


class QuotaExceededError(NarrationError):
    """The quota tracker refused the request"""
    def __init__(self, message: str, blocked_until: float | None = None):
        super().__init__(message)
        self.blocked_until = blocked_until
