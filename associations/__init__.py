"""Persistent word -> image associations."""

from associations.store import AssociationStore, normalize_key

__all__ = ["AssociationStore", "normalize_key"]
