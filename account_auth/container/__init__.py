"""
Dependency injection container.
"""

from .container import Container, build_container

__all__ = ["Container", "build_container"]
