"""
spacelint - blank line and end-of-file layout checks for JavaScript sources.
"""

__version__ = "0.1.0"
