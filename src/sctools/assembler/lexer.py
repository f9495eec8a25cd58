"""
Configuration Text Tokenizer
============================

Splits one line of configuration text into whitespace-separated tokens.
The grammar is line-oriented and has no operators, so tokenizing is a
matter of skipping whitespace, with one exception: a token that starts
with a double quote extends to the next double quote and may contain
whitespace. The quotes are not part of the token.

Comments
--------
``#`` starts a comment that runs to the end of the line. It is stripped
before tokenizing, including inside quotes.

Unterminated Quotes
-------------------
A quote with no closing quote runs to the end of the line and is not an
error. Existing configuration files may rely on it.

Example
-------
>>> scanner = LineScanner('include "my layouts/base.sc"  # shared')
>>> scanner.next()
'include'
>>> scanner.peek()
'my layouts/base.sc'
"""

from typing import Iterator, Optional


COMMENT_CHAR = "#"
QUOTE_CHAR = '"'


def strip_comment(line: str) -> str:
    """Remove a trailing comment and the line terminator."""
    index = line.find(COMMENT_CHAR)
    if index >= 0:
        line = line[:index]
    return line.rstrip("\r\n")


class LineScanner:
    """
    Incremental tokenizer over a single line.

    Callers consume a line token by token with peek()/advance() instead of
    building a full token list, so a handler can hand the unconsumed rest
    of the line to a sub-parser.

    Attributes:
        text: The line being scanned (comment already stripped)
    """

    def __init__(self, text: str):
        self.text = text
        self._pos = 0
        self._skip_whitespace()

    def _skip_whitespace(self) -> None:
        while self._pos < len(self.text) and self.text[self._pos].isspace():
            self._pos += 1

    def _token_bounds(self) -> Optional[tuple[int, int, int]]:
        """
        Locate the next token.

        Returns (start, end, resume) where text[start:end] is the token
        contents and resume is the position just past the token, or None
        at end of line.
        """
        pos = self._pos
        if pos >= len(self.text):
            return None

        if self.text[pos] == QUOTE_CHAR:
            close = self.text.find(QUOTE_CHAR, pos + 1)
            if close < 0:
                return pos + 1, len(self.text), len(self.text)
            return pos + 1, close, close + 1

        end = pos
        while end < len(self.text) and not self.text[end].isspace():
            end += 1
        return pos, end, end

    def at_end(self) -> bool:
        return self._pos >= len(self.text)

    def peek(self) -> Optional[str]:
        """Return the next token without consuming it, or None at end of line."""
        bounds = self._token_bounds()
        if bounds is None:
            return None
        start, end, _ = bounds
        return self.text[start:end]

    def advance(self) -> None:
        """Move past the next token and the whitespace after it."""
        bounds = self._token_bounds()
        if bounds is not None:
            self._pos = bounds[2]
            self._skip_whitespace()

    def next(self) -> Optional[str]:
        """Consume and return the next token, or None at end of line."""
        token = self.peek()
        self.advance()
        return token

    def rest(self) -> str:
        """The unconsumed remainder of the line, leading whitespace removed."""
        return self.text[self._pos:]

    def remaining(self) -> list[str]:
        """Consume and return all remaining tokens."""
        return list(self)

    def __iter__(self) -> Iterator[str]:
        while not self.at_end():
            token = self.next()
            if token is None:
                break
            yield token


def tokenize(line: str) -> list[str]:
    """Strip the comment from a line and split it into tokens."""
    return LineScanner(strip_comment(line)).remaining()
