"""cachebust - Content-hash versioning for ES module imports."""

__version__ = "0.1.0"
