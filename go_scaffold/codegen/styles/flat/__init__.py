"""
Flat (4-tier) architecture style.

Emits a plain model, a repository, a service combining validation and
orchestration, and a controller per entity.
"""

from .generator import FlatTemplateSet

__all__ = ["FlatTemplateSet"]
