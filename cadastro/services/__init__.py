"""
High-level use cases for the client registry.

Routers, the console and scripts call these services instead of touching
the JSON file or database sessions directly.
"""
