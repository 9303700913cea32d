"""
PocketSync – Domain Value Object: ConnectionStatus
====================================================
Estados del handshake simulado:

    disconnected → connecting → authorizing → synced

`error` existe para los consumidores pero el motor nunca transiciona a él:
connect() siempre termina en `synced`.
"""

from __future__ import annotations

from enum import Enum


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHORIZING = "authorizing"
    SYNCED = "synced"
    ERROR = "error"

    @property
    def has_data(self) -> bool:
        """Solo `synced` garantiza velas válidas."""
        return self is ConnectionStatus.SYNCED
