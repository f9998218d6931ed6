"""Shared utilities — logging setup and type-name rendering.

Rules
-----
* No business logic.
* Importable by any layer.
"""
