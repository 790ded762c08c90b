"""autodocs: semantic code search and documentation for TypeScript/JavaScript projects."""

__version__ = "1.0.0"
