"""Game Boy sound player components: mappers, output writers, playlists and tables."""

__version__ = "0.1.0"

__all__ = [
    "util",
    "impulsegen",
    "notes",
    "status",
    "mapper",
    "midifile",
    "midi_plugouts",
    "filewriters",
    "plugout",
    "player",
]