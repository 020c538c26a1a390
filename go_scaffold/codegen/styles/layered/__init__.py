"""
Layered (DDD) architecture style.

Emits a domain entity with constructor, restore factory and validation hook,
a repository contract with its MySQL implementation, five use cases and a
controller per entity.
"""

from .generator import USE_CASE_OPERATIONS, LayeredTemplateSet

__all__ = ["LayeredTemplateSet", "USE_CASE_OPERATIONS"]
