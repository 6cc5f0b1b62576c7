"""Permissive markup tokenizer.

Splits an OFX body into start-element, character-data and end-element
tokens. Every individual tag must be lexically valid, but the sequence of
tags is never checked for balance: an end tag without a matching open
element, or an element that is never closed, is passed through untouched
for the repair engine to reconcile.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, Tuple, Union

from ..utils.error_handler import FormatError


logger = logging.getLogger(__name__)

NAME_RE = re.compile(r'[^\W\d][\w.:\-]*')
WHITESPACE_RE = re.compile(r'\s*')
REFERENCE_RE = re.compile(r'&(#[0-9]+|#[xX][0-9A-Fa-f]+|[^\W\d][\w.\-]*);')

PREDEFINED_ENTITIES = {
    'amp': '&',
    'lt': '<',
    'gt': '>',
    'quot': '"',
    'apos': "'",
}


@dataclass(frozen=True)
class Attribute:
    """A decoded attribute of a start tag"""
    name: str
    value: str
    namespace: str = ''


@dataclass(frozen=True)
class StartElement:
    name: str
    namespace: str = ''
    attributes: Tuple[Attribute, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class EndElement:
    name: str
    namespace: str = ''
    line: int = 0


@dataclass(frozen=True)
class CharData:
    """Character data with references already decoded"""
    text: str
    line: int = 0


Token = Union[StartElement, EndElement, CharData]


def split_name(qualified: str) -> Tuple[str, str]:
    """Split prefix:local into (namespace, local)"""
    index = qualified.find(':')
    if 0 < index < len(qualified) - 1:
        return qualified[:index], qualified[index + 1:]
    return '', qualified


class Tokenizer:
    """Lexes markup text into tokens without enforcing nesting"""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self._line = 1
        self._line_pos = 0

    def tokens(self) -> Iterator[Token]:
        """Yield tokens until the end of input.

        Raises:
            FormatError: On the first lexically invalid construct
        """
        text = self.text
        length = len(text)

        while self.pos < length:
            start = self.pos
            lt = text.find('<', start)
            if lt == -1:
                self.pos = length
                yield CharData(self._decode(text[start:], start), self.line_at(start))
                break

            if lt > start:
                self.pos = lt
                yield CharData(self._decode(text[start:lt], start), self.line_at(start))

            if text.startswith('<!--', lt):
                self.pos = self._skip_past('-->', lt + 4, 'comment')
            elif text.startswith('<![CDATA[', lt):
                end = self._find_required(']]>', lt + 9, 'CDATA section')
                self.pos = end + 3
                content = text[lt + 9:end].replace('\r\n', '\n').replace('\r', '\n')
                yield CharData(content, self.line_at(lt))
            elif text.startswith('<?', lt):
                self.pos = self._skip_past('?>', lt + 2, 'processing instruction')
            elif text.startswith('<!', lt):
                self.pos = self._skip_past('>', lt + 2, 'directive')
            elif text.startswith('</', lt):
                yield self._end_element(lt)
            else:
                for token in self._start_element(lt):
                    yield token

    def line_at(self, pos: int) -> int:
        """Return the 1-based line number of pos (pos must not move backwards)"""
        if pos > self._line_pos:
            self._line += self.text.count('\n', self._line_pos, pos)
            self._line_pos = pos
        return self._line

    def _find_required(self, terminator: str, pos: int, what: str) -> int:
        end = self.text.find(terminator, pos)
        if end == -1:
            raise FormatError(f"unexpected end of input inside {what}", line=self.line_at(pos))
        return end

    def _skip_past(self, terminator: str, pos: int, what: str) -> int:
        end = self._find_required(terminator, pos, what)
        logger.debug(f"Skipping {what} at line {self.line_at(pos)}")
        return end + len(terminator)

    def _name(self, pos: int, what: str) -> Tuple[str, int]:
        match = NAME_RE.match(self.text, pos)
        if not match:
            if pos >= len(self.text):
                raise FormatError(f"unexpected end of input, expected {what}", line=self.line_at(pos))
            raise FormatError(
                f"invalid character {self.text[pos]!r}, expected {what}",
                line=self.line_at(pos)
            )
        return match.group(), match.end()

    def _skip_whitespace(self, pos: int) -> int:
        return WHITESPACE_RE.match(self.text, pos).end()

    def _expect_tag_end(self, pos: int, name: str) -> None:
        if pos >= len(self.text):
            raise FormatError("unexpected end of input inside tag", line=self.line_at(pos), tag=name)

    def _end_element(self, lt: int) -> EndElement:
        line = self.line_at(lt)
        qualified, pos = self._name(lt + 2, 'element name after </')
        pos = self._skip_whitespace(pos)
        self._expect_tag_end(pos, qualified)
        if self.text[pos] != '>':
            raise FormatError(
                f"invalid character {self.text[pos]!r} in end tag </{qualified}>",
                line=line, tag=qualified
            )
        self.pos = pos + 1
        namespace, name = split_name(qualified)
        return EndElement(name, namespace, line)

    def _start_element(self, lt: int) -> Iterator[Token]:
        text = self.text
        line = self.line_at(lt)
        qualified, pos = self._name(lt + 1, 'element name after <')
        attributes = []
        self_closing = False

        while True:
            after_name = pos
            pos = self._skip_whitespace(pos)
            self._expect_tag_end(pos, qualified)
            char = text[pos]
            if char == '>':
                pos += 1
                break
            if char == '/':
                if not text.startswith('/>', pos):
                    self._expect_tag_end(pos + 1, qualified)
                    raise FormatError(f"expected /> in element <{qualified}>", line=line, tag=qualified)
                pos += 2
                self_closing = True
                break
            if pos == after_name:
                raise FormatError(
                    f"invalid character {char!r} in element <{qualified}>",
                    line=line, tag=qualified
                )
            attribute, pos = self._attribute(pos, qualified, line)
            attributes.append(attribute)

        self.pos = pos
        namespace, name = split_name(qualified)
        yield StartElement(name, namespace, tuple(attributes), line)
        if self_closing:
            yield EndElement(name, namespace, line)

    def _attribute(self, pos: int, element: str, line: int) -> Tuple[Attribute, int]:
        text = self.text
        qualified, pos = self._name(pos, f"attribute name in element <{element}>")
        pos = self._skip_whitespace(pos)
        self._expect_tag_end(pos, element)
        if text[pos] != '=':
            raise FormatError(
                f"attribute {qualified} without value in element <{element}>",
                line=line, tag=element
            )
        pos = self._skip_whitespace(pos + 1)
        self._expect_tag_end(pos, element)
        quote = text[pos]
        if quote not in ('"', "'"):
            raise FormatError(
                f"unquoted or missing attribute value in element <{element}>",
                line=line, tag=element
            )
        end = text.find(quote, pos + 1)
        if end == -1:
            raise FormatError("unexpected end of input inside tag", line=line, tag=element)
        raw = text[pos + 1:end]
        if '<' in raw:
            raise FormatError(
                f"unescaped < inside attribute value in element <{element}>",
                line=line, tag=element
            )
        namespace, name = split_name(qualified)
        return Attribute(name, self._decode(raw, pos + 1), namespace), end + 1

    def _decode(self, raw: str, pos: int) -> str:
        """Normalize line endings and resolve references"""
        value = raw.replace('\r\n', '\n').replace('\r', '\n')
        if '&' not in value:
            return value

        def replace(match):
            reference = match.group(1)
            if reference.startswith('#'):
                try:
                    if reference[1] in 'xX':
                        codepoint = int(reference[2:], 16)
                    else:
                        codepoint = int(reference[1:])
                    if codepoint == 0 or 0xD800 <= codepoint <= 0xDFFF:
                        raise ValueError(codepoint)
                    return chr(codepoint)
                except (ValueError, OverflowError):
                    raise FormatError(
                        f"invalid character reference &{reference};",
                        line=self.line_at(pos)
                    ) from None
            if reference in PREDEFINED_ENTITIES:
                return PREDEFINED_ENTITIES[reference]
            raise FormatError(f"unknown entity &{reference};", line=self.line_at(pos))

        return REFERENCE_RE.sub(replace, value)


def tokenize(text: str) -> Iterator[Token]:
    """Tokenize markup text"""
    return Tokenizer(text).tokens()
