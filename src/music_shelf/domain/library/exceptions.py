"""Catalog-specific exceptions for error handling."""


class MusicShelfError(Exception):
    """Base exception for catalog operations."""

    pass


class DuplicateSongError(MusicShelfError):
    """Raised when a song name is already taken by another song."""

    def __init__(self, name: str, message: str = None):
        self.name = name
        super().__init__(
            message
            or f'A song named "{name}" already exists. Please choose a different name.'
        )


class EntityNotFoundError(MusicShelfError):
    """Raised when a song or playlist reference cannot be resolved."""

    def __init__(self, kind: str, reference: str):
        self.kind = kind
        self.reference = reference
        super().__init__(f"No {kind} matching '{reference}'")
