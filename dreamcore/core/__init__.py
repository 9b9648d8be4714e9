"""
Core domain layer: document processing pipeline, fragment retrieval and
the exception hierarchy.
"""
