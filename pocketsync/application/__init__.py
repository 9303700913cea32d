"""
PocketSync – Application Layer
================================
Orquesta el dominio: motor de ticks, estado de sesión y terminal,
puertos hacia infraestructura y casos de uso.
"""
