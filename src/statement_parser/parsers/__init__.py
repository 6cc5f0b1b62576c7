"""Statement parsing pipeline"""

from .base import FileParser
from .locator import locate_body, ROOT_MARKER
from .tokenizer import Tokenizer, tokenize, StartElement, EndElement, CharData, Attribute
from .repair import RepairEngine
from .schema import SchemaMapper, FieldSpec, map_document
from .qfx_parser import QFXParser, parse, parse_file, repair_markup

__all__ = [
    'FileParser',
    'locate_body',
    'ROOT_MARKER',
    'Tokenizer',
    'tokenize',
    'StartElement',
    'EndElement',
    'CharData',
    'Attribute',
    'RepairEngine',
    'SchemaMapper',
    'FieldSpec',
    'map_document',
    'QFXParser',
    'parse',
    'parse_file',
    'repair_markup',
]
