"""Bounds-checking policies; each module is discovered by nibvm.registry."""
