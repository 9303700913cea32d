"""Application state - Estado en memoria del motor y del terminal."""
