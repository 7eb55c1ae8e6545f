"""
Batch cleaning pipeline and Spark file adapters.
"""

from .pipeline import CleaningPipeline
from .readers import CSVReader, FileReader
from .writers import FileWriter

__all__ = [
    "CleaningPipeline",
    "CSVReader",
    "FileReader",
    "FileWriter",
]
