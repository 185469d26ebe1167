"""Errors raised by the asset staging layer."""


class ObjectStoreError(Exception):
    """Raised when an object store call fails."""

    def __init__(self, code: str, key: str | None, cause: Exception | None = None):
        self.code = code
        self.key = key
        self.cause = cause
        target = f" for '{key}'" if key else ""
        super().__init__(f"Object store error {code}{target}")


class AssetFinalizeError(Exception):
    """Raised when a staged asset cannot be promoted to its final location."""

    def __init__(self, key: str, cause: Exception | None = None):
        self.key = key
        self.cause = cause
        super().__init__(f"Failed to finalize asset upload '{key}'")
