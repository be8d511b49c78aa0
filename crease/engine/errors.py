class InvalidSelection(ValueError):
    """A rejected driver action (selection, substitution) with a readable reason"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InningsStateError(RuntimeError):
    """Raised when an operation is applied to an innings in the wrong state"""
