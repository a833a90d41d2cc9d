from __future__ import annotations


class ClientforgeError(Exception):
    pass


class SpecError(ClientforgeError):
    pass


class ResolutionError(ClientforgeError):
    """Raised when a shape reference points at a missing definition."""

    def __init__(self, reference: str, context: str | None = None) -> None:
        self.reference = reference
        self.context = context
        message = f"Unresolvable reference: {reference}"
        if context:
            message = f"{context}: {message}"
        super().__init__(message)

    def with_context(self, context: str) -> "ResolutionError":
        return ResolutionError(self.reference, context)


class RenderingError(ClientforgeError):
    pass
