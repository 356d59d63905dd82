from __future__ import annotations


class FrtuError(RuntimeError):
    pass


class ConfigurationError(FrtuError):
    """Service credentials are missing on a path that cannot degrade."""


class NotFoundError(FrtuError):
    pass


class ValidationError(FrtuError):
    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class TransientNetworkError(FrtuError):
    """Outbound call failed. Callers recover locally and never surface this."""


class DeserializationError(FrtuError):
    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Stored blob {key!r} is unreadable: {reason}")
