"""
Batch data sink writers.
"""

from .file_writer import FileWriter

__all__ = [
    "FileWriter",
]
