"""Abstract base class for statement file parsers."""

import os
from abc import ABC, abstractmethod
from typing import List

from ..models.core import Document, ParserConfig


class FileParser(ABC):
    """Abstract base class for all statement parsers"""

    def __init__(self, config: ParserConfig):
        self.config = config

    @abstractmethod
    def parse(self, data: bytes) -> Document:
        """Parse raw file contents into a Document"""
        pass

    @abstractmethod
    def get_supported_extensions(self) -> List[str]:
        """Return list of supported file extensions"""
        pass

    def parse_file(self, file_path: str) -> Document:
        """Read file_path in one go and parse it.

        OSError from reading the file propagates unchanged.
        """
        with open(file_path, 'rb') as f:
            data = f.read()
        return self.parse(data)

    def validate_file(self, file_path: str) -> bool:
        """Check that file_path exists and has a supported extension"""
        if not os.path.isfile(file_path):
            return False
        _, ext = os.path.splitext(file_path.lower())
        return ext in self.get_supported_extensions()
