"""Application services - Motor de ticks y sus piezas."""
