"""
go-scaffold

Scaffolds feature modules and CRUD entities into a layered Go backend project.
"""

from .codegen import __version__

__all__ = ["__version__"]
