"""
Persistence adapters.

These modules encapsulate how data is stored/retrieved (SQL tables and the
bundled catalog seed). Services depend on the repository rather than opening
sessions themselves.
"""
