"""Library domain - songs, identities and the catalog.

This domain handles:
- Song and playlist data models
- ID generation and volume rules
- The in-memory catalog and single-song edits

Load-time normalization lives in ``normalizer`` and folder sync in
``scanner``; both depend on the playlists domain so they are imported by
module path rather than re-exported here.
"""

# Models
from .models import DEFAULT_VOLUME, Playlist, Song

# Identity rules
from .identity import (
    is_valid_id,
    clamp_volume,
    generate_id,
    format_display_index,
    dedupe_ids,
)

# Catalog
from .catalog import SORT_MODES, Catalog

# Exceptions
from .exceptions import DuplicateSongError, EntityNotFoundError, MusicShelfError

__all__ = [
    # Models
    "DEFAULT_VOLUME",
    "Playlist",
    "Song",
    # Identity
    "is_valid_id",
    "clamp_volume",
    "generate_id",
    "format_display_index",
    "dedupe_ids",
    # Catalog
    "SORT_MODES",
    "Catalog",
    # Exceptions
    "DuplicateSongError",
    "EntityNotFoundError",
    "MusicShelfError",
]
