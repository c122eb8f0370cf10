"""
Admin Use Cases

Setup and operator tooling.
"""

from .admin_exists_use_case import AdminExistsUseCase

__all__ = [
    "AdminExistsUseCase",
]
