"""
Boundary layer: database persistence and embedding provider adapters.
"""
