"""
Módulo de Autenticación

Registro, login por JWT (header Bearer o cookie) y roles user/admin.
"""
