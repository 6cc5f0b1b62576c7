"""Closing-tag inference for SGML-style OFX bodies.

OFX 1.x files routinely leave leaf elements unclosed::

    <STMTTRN><TRNTYPE>DEBIT<TRNAMT>-5.00<FITID>42</STMTTRN>

The engine walks the token stream once and writes strictly nested XML,
synthesizing the missing closing tags. It relies on the leaf-content
rule: an element holds either character data or child elements, never
both. After text has been written for the element on top of the stack,
that element is marked as pending close and the next start tag closes it
first. An end tag closes every open element up to and including the one
it names.

Mixed content breaks that rule and cannot be repaired reliably. It is
reported (or rejected in strict mode), not guessed at.
"""

import logging
from typing import Iterable, Iterator, List, Optional

from .tokenizer import CharData, EndElement, StartElement, Token
from ..utils.diagnostics import DiagnosticEvent, DiagnosticSink, EventKind, NULL_SINK
from ..utils.error_handler import FormatError
from ..utils.escaper import escape_text


logger = logging.getLogger(__name__)


def _merge_text(tokens: Iterable[Token]) -> Iterator[Token]:
    """Join adjacent character data runs.

    A comment or CDATA section splits one text node into several tokens;
    the leaf-content rule applies to the joined text.
    """
    run: List[CharData] = []
    for token in tokens:
        if isinstance(token, CharData):
            run.append(token)
            continue
        if run:
            yield _joined(run)
            run = []
        yield token
    if run:
        yield _joined(run)


def _joined(run: List[CharData]) -> CharData:
    if len(run) == 1:
        return run[0]
    return CharData(''.join(piece.text for piece in run), run[0].line)


class _OpenElement:
    __slots__ = ('element', 'has_children')

    def __init__(self, element: StartElement):
        self.element = element
        self.has_children = False

    @property
    def name(self) -> str:
        return self.element.name


class RepairEngine:
    """Rebuilds well-formed markup from a permissive token stream.

    Args:
        auto_close: Close elements still open at end of input. Turning this
            off reproduces the legacy behaviour of leaving them open, which
            yields markup a strict XML parser rejects.
        max_depth: Optional bound on the number of simultaneously open
            elements. None means unbounded.
        strict_mixed_content: Raise FormatError instead of only reporting
            character data that violates the leaf-content rule.
        sink: Receiver for trace events; defaults to a no-op sink.
    """

    def __init__(self,
                 auto_close: bool = True,
                 max_depth: Optional[int] = None,
                 strict_mixed_content: bool = False,
                 sink: Optional[DiagnosticSink] = None):
        if max_depth is not None and max_depth < 1:
            raise ValueError("max_depth must be a positive integer or None")
        self.auto_close = auto_close
        self.max_depth = max_depth
        self.strict_mixed_content = strict_mixed_content
        self.sink = sink or NULL_SINK

    def repair(self, tokens: Iterable[Token]) -> str:
        """Consume tokens and return the repaired markup.

        State lives in locals, so one engine can serve concurrent calls.

        Raises:
            FormatError: On tokenizer errors, when max_depth is exceeded, or
                on mixed content in strict mode
        """
        stack: List[_OpenElement] = []
        output: List[str] = []
        pending_close = False
        root_closed = False

        for token in _merge_text(tokens):
            if root_closed:
                self._trailing(token)
                continue

            if isinstance(token, StartElement):
                if pending_close and stack:
                    self._close(stack, output, synthesized=True)
                    pending_close = False
                if self.max_depth is not None and len(stack) >= self.max_depth:
                    raise FormatError(
                        f"maximum nesting depth {self.max_depth} exceeded at <{token.name}>",
                        line=token.line, tag=token.name, error_type="NESTING_TOO_DEEP"
                    )
                if stack:
                    stack[-1].has_children = True
                stack.append(_OpenElement(token))
                output.append(self._start_tag(token))
                self.sink.emit(DiagnosticEvent(EventKind.PUSH, token.name, len(stack)))

            elif isinstance(token, CharData):
                text = token.text.strip()
                if not text:
                    continue
                if pending_close or (stack and stack[-1].has_children):
                    self._mixed_content(stack, token, text)
                output.append(escape_text(text))
                self.sink.emit(DiagnosticEvent(
                    EventKind.TEXT, stack[-1].name if stack else None, len(stack), text
                ))
                pending_close = True

            elif isinstance(token, EndElement):
                if not stack:
                    self.sink.emit(DiagnosticEvent(EventKind.UNMATCHED_END, token.name, 0))
                    continue
                matched = False
                while stack:
                    synthesized = stack[-1].name != token.name
                    popped = self._close(stack, output, synthesized=synthesized)
                    if popped.name == token.name:
                        matched = True
                        break
                if matched:
                    pending_close = False
                else:
                    logger.debug(f"End tag </{token.name}> at line {token.line} matched no open element")
                    self.sink.emit(DiagnosticEvent(EventKind.UNMATCHED_END, token.name, 0))
                if not stack:
                    root_closed = True

        if stack:
            if self.auto_close:
                while stack:
                    self._close(stack, output, synthesized=True)
            else:
                logger.debug(f"Leaving {len(stack)} elements open at end of input")

        return ''.join(output)

    def _close(self, stack: List[_OpenElement], output: List[str], synthesized: bool) -> _OpenElement:
        entry = stack.pop()
        output.append(f'</{entry.name}>')
        kind = EventKind.SYNTHESIZED_CLOSE if synthesized else EventKind.POP
        self.sink.emit(DiagnosticEvent(kind, entry.name, len(stack)))
        return entry

    def _mixed_content(self, stack: List[_OpenElement], token: CharData, text: str) -> None:
        name = stack[-1].name if stack else None
        message = f"unexpected character data in <{name}> at line {token.line}"
        self.sink.emit(DiagnosticEvent(EventKind.MIXED_CONTENT, name, len(stack), text))
        if self.strict_mixed_content:
            raise FormatError(f"mixed content in <{name}>", line=token.line, tag=name)
        logger.warning(f"Mixed content, nesting may be wrong: {message}")

    def _trailing(self, token: Token) -> None:
        if isinstance(token, CharData) and not token.text.strip():
            return
        name = getattr(token, 'name', None)
        logger.warning(f"Ignoring content after the root element at line {token.line}")
        self.sink.emit(DiagnosticEvent(EventKind.TRAILING_TOKEN, name, 0))

    @staticmethod
    def _start_tag(element: StartElement) -> str:
        parts = ['<', element.name]
        if element.namespace:
            parts.append(f' xmlns="{escape_text(element.namespace)}"')
        for attribute in element.attributes:
            if not attribute.name:
                continue
            parts.append(f' {attribute.name}="{escape_text(attribute.value)}"')
        parts.append('>')
        return ''.join(parts)
