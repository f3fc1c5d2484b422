"""
Store module with abstraction layer.

This module provides:
- MappingStore interface: Abstract base class for store implementations
- InMemoryMappingStore: Process-local implementation (default)
- UrlRecord / ClickDetails / ClickEvent: the stored models

To add a new backend:
1. Create a new class inheriting from MappingStore
2. Implement all abstract methods, keeping put() a compare-and-insert
3. Construct it in create_app() instead of InMemoryMappingStore
"""

from shortener.store.interface import MappingStore
from shortener.store.memory import InMemoryMappingStore
from shortener.store.models import ClickDetails, ClickEvent, UrlRecord

__all__ = [
    "MappingStore",
    "InMemoryMappingStore",
    "ClickDetails",
    "ClickEvent",
    "UrlRecord",
]
