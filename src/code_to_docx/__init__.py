"""Export a project's source files into a line-numbered Word document."""

__version__ = "0.1.0"
