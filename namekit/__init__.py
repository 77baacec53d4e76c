"""namekit - batch rename and convert files with AI-suggested names."""

__version__ = "0.1.0"
