"""Document integrity and lifecycle service for signed PDFs."""

__version__ = "1.0.0"
