"""Domain value objects - Objetos inmutables."""
