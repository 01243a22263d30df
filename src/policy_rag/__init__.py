"""Retrieval-augmented chat over PDF policy documents."""

__version__ = "0.1.0"
