"""
First-feature extraction from WMS GetFeatureInfo GML.

MapServer's msGMLOutput has no fixed schema; the only stable thing is that
each result record is an element named ``<something>_feature`` whose
children are the record's fields:

    <msGMLOutput>
      <Berggrunn_..._layer>
        <Berggrunn_..._feature>
          <hovedbergart_tekst>Leirskifer</hovedbergart_tekst>
          ...
        </Berggrunn_..._feature>
      </Berggrunn_..._layer>
    </msGMLOutput>

The document is read in one forward pass as a lazy stream of START / TEXT /
END tokens (expat, the parser behind ElementTree) and fed to a two-state
machine. No tree is built, and reading stops as soon as the first feature
closes.
"""

from collections.abc import AsyncIterable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO
from xml.parsers import expat

from norgesglass.core.constants import GML_FEATURE_SUFFIX
from norgesglass.core.exceptions import FeatureParseError
from norgesglass.core.parsers import local_name

READ_SIZE = 64 * 1024

# Expat errors that only mean "the input stopped early"
_END_OF_INPUT_ERRORS = {
    expat.errors.codes[expat.errors.XML_ERROR_NO_ELEMENTS],
    expat.errors.codes[expat.errors.XML_ERROR_UNCLOSED_TOKEN],
    expat.errors.codes[expat.errors.XML_ERROR_PARTIAL_CHAR],
    expat.errors.codes[expat.errors.XML_ERROR_UNCLOSED_CDATA_SECTION],
}


class TokenKind(Enum):
    START = "start"
    TEXT = "text"
    END = "end"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str  # local element name for START/END, character data for TEXT


class GMLTokenizer:
    """
    Incremental XML tokenizer.

    feed() returns the tokens completed by that chunk. Adjacent character
    data (split by expat at buffer or entity boundaries) is merged into a
    single TEXT token, emitted when the next tag arrives.
    """

    def __init__(self) -> None:
        self._parser = expat.ParserCreate()
        self._parser.buffer_text = True
        self._parser.StartElementHandler = self._on_start
        self._parser.EndElementHandler = self._on_end
        self._parser.CharacterDataHandler = self._on_text
        self._tokens: list[Token] = []
        self._text: list[str] = []
        self._closed = False
        self._error: FeatureParseError | None = None

    def _flush_text(self) -> None:
        if self._text:
            self._tokens.append(Token(TokenKind.TEXT, "".join(self._text)))
            self._text = []

    def _on_start(self, name: str, attrs: dict[str, str]) -> None:
        self._flush_text()
        self._tokens.append(Token(TokenKind.START, local_name(name)))

    def _on_end(self, name: str) -> None:
        self._flush_text()
        self._tokens.append(Token(TokenKind.END, local_name(name)))

    def _on_text(self, data: str) -> None:
        self._text.append(data)

    def _take(self) -> list[Token]:
        tokens, self._tokens = self._tokens, []
        return tokens

    def _raise_pending(self) -> None:
        if self._error is not None:
            raise self._error

    def feed(self, data: bytes) -> list[Token]:
        """
        Tokenize the next chunk of the document.

        Tokens completed before a syntax error in the chunk are still
        returned; the error is raised on the following feed()/close(), so
        a consumer that is already done never sees it.

        Raises:
            FeatureParseError: if the document is malformed
        """
        self._raise_pending()
        try:
            self._parser.Parse(data, False)
        except expat.ExpatError as e:
            error = FeatureParseError(
                f"parsing GML: {expat.errors.messages[e.code]}",
                {"line": e.lineno, "column": e.offset},
            )
            error.__cause__ = e
            self._error = error

        tokens = self._take()
        if not tokens:
            self._raise_pending()
        return tokens

    def close(self) -> list[Token]:
        """
        Signal end of stream and return any remaining tokens.

        Running out of input is not an error even when elements are still
        open (empty body, truncated document); the caller just gets no
        more tokens.

        Raises:
            FeatureParseError: a syntax error found by an earlier feed()
        """
        self._raise_pending()
        if self._closed:
            return []
        self._closed = True
        try:
            self._parser.Parse(b"", True)
        except expat.ExpatError as e:
            if e.code not in _END_OF_INPUT_ERRORS:
                raise FeatureParseError(
                    f"parsing GML: {expat.errors.messages[e.code]}",
                    {"line": e.lineno, "column": e.offset},
                ) from e
        self._flush_text()
        return self._take()


def iter_tokens(chunks: Iterable[bytes]) -> Iterator[Token]:
    """Lazily tokenize a document given as byte chunks. Not restartable."""
    tokenizer = GMLTokenizer()
    for chunk in chunks:
        yield from tokenizer.feed(chunk)
    yield from tokenizer.close()


class _State(Enum):
    OUTSIDE = "outside"
    IN_FEATURE = "in_feature"


class FirstFeatureMachine:
    """
    Collects the child fields of the first feature container.

    OUTSIDE    --START *suffix-->  IN_FEATURE
    IN_FEATURE --START other-->    current field = tag
    IN_FEATURE --TEXT-->           fields[current] = text.strip() (if non-empty)
    IN_FEATURE --END other-->      current field cleared
    IN_FEATURE --END *suffix-->    done
    """

    def __init__(self, suffix: str = GML_FEATURE_SUFFIX):
        self.suffix = suffix
        self.state = _State.OUTSIDE
        self.current_field: str | None = None
        self.fields: dict[str, str] = {}
        self.done = False

    def process(self, token: Token) -> bool:
        """Advance by one token. Returns True once the first feature has closed."""
        if self.done:
            return True

        if token.kind is TokenKind.START:
            if token.value.endswith(self.suffix):
                self.state = _State.IN_FEATURE
            elif self.state is _State.IN_FEATURE:
                self.current_field = token.value

        elif token.kind is TokenKind.TEXT:
            if self.state is _State.IN_FEATURE and self.current_field:
                text = token.value.strip()
                if text:
                    self.fields[self.current_field] = text

        elif token.kind is TokenKind.END and self.state is _State.IN_FEATURE:
            if token.value.endswith(self.suffix):
                self.done = True
            else:
                self.current_field = None

        return self.done

    @property
    def result(self) -> dict[str, str]:
        """Fields of the first closed feature, or {} if none closed."""
        return self.fields if self.done else {}


def _iter_chunks(source: bytes | str | BinaryIO | Iterable[bytes]) -> Iterable[bytes]:
    if isinstance(source, str):
        return [source.encode("utf-8")]
    if isinstance(source, (bytes, bytearray)):
        return [bytes(source)]
    if hasattr(source, "read"):
        return iter(lambda: source.read(READ_SIZE), b"")
    return source


def extract_first_feature(
    source: bytes | str | BinaryIO | Iterable[bytes],
    suffix: str = GML_FEATURE_SUFFIX,
) -> dict[str, str]:
    """
    Extract the fields of the first ``*_feature`` element.

    Args:
        source: Whole document, binary file object or iterable of byte chunks
        suffix: Element name suffix marking a feature container

    Returns:
        Field name -> trimmed text. Empty when no feature container was
        closed, which is indistinguishable from a feature without fields.

    Raises:
        FeatureParseError: malformed XML before the first feature closed
    """
    machine = FirstFeatureMachine(suffix)
    for token in iter_tokens(_iter_chunks(source)):
        if machine.process(token):
            break
    return machine.result


async def aextract_first_feature(
    chunks: AsyncIterable[bytes],
    suffix: str = GML_FEATURE_SUFFIX,
) -> dict[str, str]:
    """Async counterpart of extract_first_feature() for a streamed body."""
    machine = FirstFeatureMachine(suffix)
    tokenizer = GMLTokenizer()

    async for chunk in chunks:
        for token in tokenizer.feed(chunk):
            if machine.process(token):
                return machine.result

    for token in tokenizer.close():
        if machine.process(token):
            break
    return machine.result
