"""In-memory stores owned by the application container.

Each store is an explicitly constructed object; nothing here keeps
module-level state.
"""
