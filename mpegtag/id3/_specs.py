# Copyright (C) 2005  Michael Urman
#               2026  mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import codecs
from enum import IntEnum
from typing import Any

from mpegtag._util import encode_endian, find_terminator


class Encoding(IntEnum):
    """Text Encoding"""

    LATIN1 = 0
    """ISO-8859-1"""

    UTF16 = 1
    """UTF-16 with BOM"""

    UTF16BE = 2
    """UTF-16BE without BOM"""

    UTF8 = 3
    """UTF-8"""


# codec name and NULL terminator per encoding
ENCODINGS = {
    Encoding.LATIN1: ('latin1', b'\x00'),
    Encoding.UTF16: ('utf16', b'\x00\x00'),
    Encoding.UTF16BE: ('utf_16_be', b'\x00\x00'),
    Encoding.UTF8: ('utf8', b'\x00'),
}


def decode_text(data: bytes, charset: str) -> str:
    """Decodes data, dropping anything which isn't valid in charset.

    For UTF-16 the BOM decides the byte order, without one little endian
    is assumed.
    """

    charset = codecs.lookup(charset).name
    if charset == "utf-16":
        if data[:2] == codecs.BOM_UTF16_BE:
            return data[2:].decode("utf-16-be", "ignore")
        if data[:2] == codecs.BOM_UTF16_LE:
            data = data[2:]
        charset = "utf-16-le"
    return data.decode(charset, "ignore")


def encode_text(text: str, charset: str) -> bytes:
    """Encodes text, dropping characters charset can't represent.
    UTF-16 is written little endian with a BOM.
    """

    return encode_endian(text, charset, errors="ignore", le=True)


def convert(data: bytes, from_charset: str, to_charset: str) -> bytes:
    """Converts data between two charsets. Never raises for lossy
    conversions, unrepresentable characters get dropped.
    """

    return encode_text(decode_text(data, from_charset), to_charset)


def is_latin1(text: str) -> bool:
    try:
        text.encode("latin1")
    except UnicodeEncodeError:
        return False
    return True


def pick_encoding(*texts: str) -> Encoding:
    """LATIN1 if all texts can be represented in it, UTF16 otherwise"""

    if all(is_latin1(t) for t in texts):
        return Encoding.LATIN1
    return Encoding.UTF16


class SpecError(Exception):
    pass


class Spec:
    """One field of a frame body.

    A frame body is read by passing the remaining data through the specs
    of its family in order, each one consuming its part. `record` holds
    the values read or to be written so far, keyed by spec name, which
    lets text specs find the encoding byte read before them.
    """

    def __init__(self, name: str, default: Any = None):
        self.name = name
        self.default = default

    def __hash__(self) -> int:
        raise TypeError("Spec objects are unhashable")

    def read(self, record: dict[str, Any], data: bytes) -> tuple[Any, bytes]:
        """
        Returns:
            (value: object, left_data: bytes)
        Raises:
            SpecError
        """

        raise NotImplementedError

    def write(self, record: dict[str, Any], value: Any) -> bytes:
        """
        Returns:
            bytes: The serialized data
        """

        raise NotImplementedError


class EncodingSpec(Spec):

    def __init__(self, name: str, default: Encoding = Encoding.LATIN1):
        super().__init__(name, default)

    def read(self, record, data):
        if not data:
            raise SpecError("missing encoding byte")
        enc = data[0]
        if enc not in ENCODINGS:
            raise SpecError(f'Invalid Encoding: {enc!r}')
        return Encoding(enc), data[1:]

    def write(self, record, value):
        return bytes([value])


class StringSpec(Spec):
    """A fixed length Latin-1 string, e.g. a language code"""

    def __init__(self, name: str, length: int, default: str | None = None):
        if default is None:
            default = " " * length
        super().__init__(name, default)
        self.len = length

    def read(self, record, data):
        if len(data) < self.len:
            raise SpecError('not enough data')
        return data[:self.len].decode('latin1'), data[self.len:]

    def write(self, record, value):
        data = encode_text(value, "latin1")[:self.len]
        return data.ljust(self.len, b"\x00")


class EncodedTextSpec(Spec):
    """NULL terminated text in the encoding of the frame"""

    def __init__(self, name: str, default: str = ""):
        super().__init__(name, default)

    def read(self, record, data):
        enc, term = ENCODINGS[record["encoding"]]
        index = find_terminator(data, term)
        if index == -1:
            return decode_text(data, enc), b""
        return decode_text(data[:index], enc), data[index + len(term):]

    def write(self, record, value):
        enc, term = ENCODINGS[record["encoding"]]
        return encode_text(value, enc) + term


class EncodedTrailingTextSpec(EncodedTextSpec):
    """Text in the encoding of the frame up to the end of the body.
    Trailing NULLs are removed.
    """

    def read(self, record, data):
        enc, term = ENCODINGS[record["encoding"]]
        return decode_text(data, enc).rstrip("\x00"), b""

    def write(self, record, value):
        enc, term = ENCODINGS[record["encoding"]]
        return encode_text(value, enc)


class Latin1TextSpec(Spec):
    """Latin-1 text without encoding byte up to the end of the body"""

    def __init__(self, name: str, default: str = ""):
        super().__init__(name, default)

    def read(self, record, data):
        return decode_text(data, "latin1").rstrip("\x00"), b""

    def write(self, record, value):
        return encode_text(value, "latin1")


class BinaryDataSpec(Spec):

    def __init__(self, name: str, default: bytes = b""):
        super().__init__(name, default)

    def read(self, record, data):
        return data, b''

    def write(self, record, value):
        if isinstance(value, bytes):
            return value
        elif isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)
