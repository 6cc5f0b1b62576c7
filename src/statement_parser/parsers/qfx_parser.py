"""QFX/OFX statement parser: locate, tokenize, repair, map."""

import logging
from typing import List, Optional

from .base import FileParser
from .locator import locate_body
from .repair import RepairEngine
from .schema import XML_DEPTH_LIMIT, SchemaMapper
from .tokenizer import tokenize
from ..models.core import Document, ParserConfig
from ..utils.diagnostics import DiagnosticSink


logger = logging.getLogger(__name__)


class QFXParser(FileParser):
    """Parser for SGML-style QFX and OFX statements.

    Each call works on its own state, so a single instance can be shared
    by worker threads.
    """

    def __init__(self, config: Optional[ParserConfig] = None, sink: Optional[DiagnosticSink] = None):
        super().__init__(config or ParserConfig())
        self.sink = sink
        self.engine = RepairEngine(
            auto_close=self.config.auto_close,
            max_depth=self._max_depth(),
            strict_mixed_content=self.config.strict_mixed_content,
            sink=sink,
        )
        self.mapper = SchemaMapper(root=self._root_name())

    def get_supported_extensions(self) -> List[str]:
        """Return list of supported file extensions"""
        return list(self.config.supported_extensions)

    def repair(self, data: bytes) -> str:
        """Return the well-formed markup recovered from data.

        Raises:
            FormatError: If the root marker is missing or a tag is malformed
        """
        body = locate_body(data, self.config.root_marker)
        text = body.decode(self.config.encoding, errors='replace')
        markup = self.engine.repair(tokenize(text))
        logger.debug(f"Repaired markup: {len(body)} bytes in, {len(markup)} characters out")
        return markup

    def parse(self, data: bytes) -> Document:
        """Parse raw QFX/OFX bytes into a Document.

        Raises:
            FormatError: If the input cannot be recovered into markup
            SchemaError: If the markup does not fit the statement model
        """
        document = self.mapper.map(self.repair(data))
        logger.debug(f"Parsed document with {len(document.transactions)} transactions")
        return document

    def _root_name(self) -> str:
        return self.config.root_marker.strip().lstrip('<').rstrip('>').strip()

    def _max_depth(self) -> int:
        """Configured depth bound, never deeper than the XML parser accepts"""
        if self.config.max_depth is None:
            return XML_DEPTH_LIMIT
        return min(self.config.max_depth, XML_DEPTH_LIMIT)


def parse(data: bytes, config: Optional[ParserConfig] = None,
          sink: Optional[DiagnosticSink] = None) -> Document:
    """Parse raw QFX/OFX bytes into a Document"""
    return QFXParser(config, sink).parse(data)


def parse_file(file_path: str, config: Optional[ParserConfig] = None,
               sink: Optional[DiagnosticSink] = None) -> Document:
    """Read and parse a QFX/OFX file"""
    return QFXParser(config, sink).parse_file(file_path)


def repair_markup(data: bytes, config: Optional[ParserConfig] = None,
                  sink: Optional[DiagnosticSink] = None) -> str:
    """Return the repaired, well-formed markup for raw QFX/OFX bytes"""
    return QFXParser(config, sink).repair(data)
