"""Discovery of statement files on disk."""

import os
from typing import List

from ..models.core import ParserConfig


class FileScanner:
    """Scans directories for supported statement files"""

    def __init__(self, config: ParserConfig):
        self.config = config
        self.supported_extensions = {ext.lower() for ext in config.supported_extensions}

    def scan_directory(self, directory: str, recursive: bool = True) -> List[str]:
        """
        Scan directory for supported file types

        Args:
            directory: Directory path to scan
            recursive: Whether to scan subdirectories recursively

        Returns:
            Sorted list of file paths that match supported extensions

        Raises:
            FileNotFoundError: If directory does not exist
            NotADirectoryError: If directory is not a directory
        """
        if not os.path.exists(directory):
            raise FileNotFoundError(f"Directory not found: {directory}")

        if not os.path.isdir(directory):
            raise NotADirectoryError(f"Path is not a directory: {directory}")

        found_files = []

        if recursive:
            for root, dirs, files in os.walk(directory):
                for file in files:
                    file_path = os.path.join(root, file)
                    if self.is_supported_file(file_path):
                        found_files.append(file_path)
        else:
            for item in os.listdir(directory):
                item_path = os.path.join(directory, item)
                if self.is_supported_file(item_path):
                    found_files.append(item_path)

        return sorted(found_files)

    def is_supported_file(self, file_path: str) -> bool:
        """Check if file has a supported extension and is not empty"""
        _, ext = os.path.splitext(file_path.lower())
        if ext not in self.supported_extensions:
            return False

        try:
            return os.path.isfile(file_path) and os.path.getsize(file_path) > 0
        except OSError:
            return False
