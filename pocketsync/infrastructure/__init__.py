"""
PocketSync – Infrastructure Layer
===================================
Implementaciones concretas: bus de broadcast y adaptadores externos
de análisis (Gemini vía httpx, heurística local).
"""
