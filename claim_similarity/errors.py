"""Exceptions raised by feature extraction and similarity computation."""


class ImageUnreadable(ValueError):
    """The image could not be opened, decoded or resized."""

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        message = f"Unreadable image: {source}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class DimensionMismatch(ValueError):
    """Two feature vectors of different lengths were compared."""

    def __init__(self, len_a: int, len_b: int):
        self.len_a = len_a
        self.len_b = len_b
        super().__init__(
            f"Feature dimension {len_a} doesn't match "
            f"feature dimension {len_b}"
        )
