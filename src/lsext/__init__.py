"""lsext - summary of files by extension"""

__version__ = "0.1.0"
