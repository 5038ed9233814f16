from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when an operation needs a collaborator that was never configured."""


__all__ = ["ConfigurationError"]
