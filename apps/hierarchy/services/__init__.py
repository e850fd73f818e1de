from .registry import HierarchyRegistry

__all__ = ['HierarchyRegistry']
