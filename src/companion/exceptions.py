"""Exceptions raised while replacing the transport client."""

from __future__ import annotations

from companion.config.errors import ConfigurationError


class TransportConstructionError(RuntimeError):
    """Raised when the transport factory fails to build a replacement client."""

    def __init__(self, attempt: int, cause: BaseException) -> None:
        super().__init__(f"Transport construction failed on attempt {attempt}: {cause}")
        self.attempt = attempt


class TransportBindingError(RuntimeError):
    """Raised when handlers cannot be attached to a freshly built client."""

    def __init__(self, attempt: int, cause: BaseException) -> None:
        super().__init__(f"Attaching handlers failed on attempt {attempt}: {cause}")
        self.attempt = attempt


__all__ = ["ConfigurationError", "TransportBindingError", "TransportConstructionError"]
