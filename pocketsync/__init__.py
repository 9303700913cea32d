"""
PocketSync – Simulated OTC trading terminal backend
=====================================================
Motor sintético de mercado (ticks → velas OHLCV alineadas al reloj),
handshake simulado, broadcast a suscriptores y análisis de señales.
"""

__version__ = "0.3.0"
