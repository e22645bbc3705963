# Copyright (C) 2005  Michael Urman
#               2026  mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import logging
import struct
from enum import Enum
from typing import Any

from ._specs import (
    BinaryDataSpec,
    EncodedTextSpec,
    EncodedTrailingTextSpec,
    EncodingSpec,
    Latin1TextSpec,
    Spec,
    SpecError,
    StringSpec,
    pick_encoding,
)
from ._util import BitPaddedInt, ID3BadFrameError, is_valid_frame_id, resync

logger = logging.getLogger(__name__)


class FrameFamily(Enum):
    """How the body of a frame is laid out"""

    PLAIN_TEXT = 1
    """Encoding byte + text"""

    LANG_DESCRIBED = 2
    """Encoding byte + language + description + text (COMM, USLT)"""

    URL = 3
    """Latin-1 URL, no encoding byte"""

    URL_WITH_DESCRIPTION = 4
    """Encoding byte + description + Latin-1 URL (WXXX)"""

    OPAQUE = 5
    """Binary data, passed through unchanged"""


BINARY_FRAMES = frozenset([
    "APIC", "PIC", "PRIV", "GEOB", "GEO", "UFID", "UFI", "MCDI", "MCI",
    "POPM", "POP", "PCNT", "CNT", "RVAD", "RVA", "RVA2", "EQUA", "EQU",
    "EQU2", "SYLT", "SLT", "ETCO", "ETC", "MLLT", "MLL", "SYTC", "STC",
    "AENC", "CRA", "RBUF", "BUF", "LINK", "LNK", "POSS", "USER", "OWNE",
    "COMR", "ENCR", "GRID", "SIGN", "SEEK", "ASPI", "CHAP", "CTOC", "CRM",
    "RVRB", "REV",
])
"""Frame ids whose body isn't text"""

LANG_DESCRIBED_FRAMES = frozenset(["COMM", "USLT", "COM", "ULT"])

_FAMILY_SPECS: dict[FrameFamily, list[Spec]] = {
    FrameFamily.PLAIN_TEXT: [
        EncodingSpec("encoding"),
        EncodedTrailingTextSpec("value"),
    ],
    FrameFamily.LANG_DESCRIBED: [
        EncodingSpec("encoding"),
        StringSpec("lang", 3, default="ENG"),
        EncodedTextSpec("desc"),
        EncodedTrailingTextSpec("value"),
    ],
    FrameFamily.URL: [
        Latin1TextSpec("value"),
    ],
    FrameFamily.URL_WITH_DESCRIPTION: [
        EncodingSpec("encoding"),
        EncodedTextSpec("desc"),
        Latin1TextSpec("value"),
    ],
    FrameFamily.OPAQUE: [
        BinaryDataSpec("value"),
    ],
}


def frame_family(frame_id: str) -> FrameFamily:
    """The body layout used by frames with the given id"""

    if frame_id in ("WXXX", "WXX"):
        return FrameFamily.URL_WITH_DESCRIPTION
    elif frame_id.startswith("W"):
        return FrameFamily.URL
    elif frame_id in LANG_DESCRIBED_FRAMES:
        return FrameFamily.LANG_DESCRIBED
    elif frame_id in BINARY_FRAMES:
        return FrameFamily.OPAQUE
    return FrameFamily.PLAIN_TEXT


def encode_tag(frame_id: str, value: str | bytes, lang: str = "ENG",
               desc: str = "") -> bytes:
    """Serializes value into a frame body for frame_id.

    Text is stored as Latin-1 if possible, else as UTF-16. Characters
    which can't be represented where only Latin-1 is allowed (URLs) are
    dropped. Bytes are taken as an already encoded body.
    """

    if isinstance(value, bytes):
        return value
    elif not isinstance(value, str):
        value = str(value)

    family = frame_family(frame_id)
    if family is FrameFamily.URL_WITH_DESCRIPTION:
        encoding = pick_encoding(desc)
    elif family is FrameFamily.LANG_DESCRIBED:
        encoding = pick_encoding(desc, value)
    else:
        encoding = pick_encoding(value)

    record: dict[str, Any] = {
        "encoding": encoding, "lang": lang, "desc": desc, "value": value}
    return b"".join(
        spec.write(record, record[spec.name])
        for spec in _FAMILY_SPECS[family])


def decode_frame(frame_id: str, data: bytes) -> dict[str, Any] | None:
    """All fields of a frame body, or None if the body doesn't match the
    layout of the frame's family.
    """

    record: dict[str, Any] = {}
    for spec in _FAMILY_SPECS[frame_family(frame_id)]:
        try:
            record[spec.name], data = spec.read(record, data)
        except SpecError as e:
            logger.debug("can't decode %s frame: %s", frame_id, e)
            return None
    return record


def decode_tag(frame_id: str, data: bytes) -> str | bytes | None:
    """The value stored in a frame body, see decode_frame"""

    record = decode_frame(frame_id, data)
    if record is None:
        return None
    return record["value"]


# v2.2 frame ids and their v2.3 counterparts
UPGRADE_V22 = {
    "BUF": "RBUF", "CNT": "PCNT", "COM": "COMM", "CRA": "AENC",
    "ETC": "ETCO", "EQU": "EQUA", "GEO": "GEOB", "IPL": "IPLS",
    "MCI": "MCDI", "MLL": "MLLT", "PIC": "APIC", "POP": "POPM",
    "REV": "RVRB", "RVA": "RVAD", "SLT": "SYLT", "STC": "SYTC",
    "TAL": "TALB", "TBP": "TBPM", "TCM": "TCOM", "TCO": "TCON",
    "TCR": "TCOP", "TDA": "TDAT", "TDY": "TDLY", "TEN": "TENC",
    "TFT": "TFLT", "TIM": "TIME", "TKE": "TKEY", "TLA": "TLAN",
    "TLE": "TLEN", "TMT": "TMED", "TOA": "TOPE", "TOF": "TOFN",
    "TOL": "TOLY", "TOR": "TORY", "TOT": "TOAL", "TP1": "TPE1",
    "TP2": "TPE2", "TP3": "TPE3", "TP4": "TPE4", "TPA": "TPOS",
    "TPB": "TPUB", "TRC": "TSRC", "TRD": "TRDA", "TRK": "TRCK",
    "TSI": "TSIZ", "TSS": "TSSE", "TT1": "TIT1", "TT2": "TIT2",
    "TT3": "TIT3", "TXT": "TEXT", "TXX": "TXXX", "TYE": "TYER",
    "UFI": "UFID", "ULT": "USLT", "WAF": "WOAF", "WAR": "WOAR",
    "WAS": "WOAS", "WCM": "WCOM", "WCP": "WCOP", "WPB": "WPUB",
    "WXX": "WXXX",
}


def _upgrade_pic(data: bytes) -> bytes:
    # PIC has a 3 char image format where APIC has a mime type
    if len(data) < 4:
        return data
    fmt = data[1:4].decode("latin1").lower()
    if fmt == "jpg":
        fmt = "jpeg"
    return data[:1] + ("image/" + fmt).encode("latin1") + b"\x00" + data[4:]


class FrameFlags:
    """The two flag bytes of a v2.3 / v2.4 frame header.

    The bit layout depends on the major version; v2.2 frames have no
    flags at all.
    """

    FLAG23_ALTERTAG = 0x8000
    FLAG23_ALTERFILE = 0x4000
    FLAG23_READONLY = 0x2000
    FLAG23_COMPRESS = 0x0080
    FLAG23_ENCRYPT = 0x0040
    FLAG23_GROUP = 0x0020

    FLAG24_ALTERTAG = 0x4000
    FLAG24_ALTERFILE = 0x2000
    FLAG24_READONLY = 0x1000
    FLAG24_GROUPID = 0x0040
    FLAG24_COMPRESS = 0x0008
    FLAG24_ENCRYPT = 0x0004
    FLAG24_UNSYNCH = 0x0002
    FLAG24_DATALEN = 0x0001

    def __init__(self, value: int = 0, major: int = 3):
        self.value = value
        self.major = major

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FrameFlags):
            return NotImplemented
        return (self.value, self.major) == (other.value, other.major)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "%s(0x%04x, major=%d)" % (
            type(self).__name__, self.value, self.major)

    def _test(self, flag23: int, flag24: int) -> bool:
        if self.major == 4:
            return bool(self.value & flag24)
        elif self.major == 3:
            return bool(self.value & flag23)
        return False

    @property
    def unsynch(self) -> bool:
        # some v2.3 writers use the v2.4 bit as well
        return self._test(self.FLAG24_UNSYNCH, self.FLAG24_UNSYNCH)

    @property
    def data_length(self) -> bool:
        return self._test(0, self.FLAG24_DATALEN)

    @property
    def compressed(self) -> bool:
        return self._test(self.FLAG23_COMPRESS, self.FLAG24_COMPRESS)

    @property
    def encrypted(self) -> bool:
        return self._test(self.FLAG23_ENCRYPT, self.FLAG24_ENCRYPT)

    @property
    def grouped(self) -> bool:
        return self._test(self.FLAG23_GROUP, self.FLAG24_GROUPID)

    @property
    def opaque(self) -> bool:
        """If the body can't be interpreted"""

        return self.compressed or self.encrypted

    def for_write(self) -> int:
        """The flags to store with a frame whose body gets written without
        unsynchronization and, unless it is opaque, without a data length
        indicator.
        """

        if self.major not in (3, 4):
            return 0
        value = self.value & ~self.FLAG24_UNSYNCH
        if self.major == 4 and not self.opaque:
            value &= ~self.FLAG24_DATALEN
        return value


class Frame:
    """A single ID3v2 frame.

    The body is kept as read (resynchronized, without a v2.4 data length
    indicator unless the frame is compressed or encrypted) so a frame which
    wasn't changed gets written back byte for byte.
    """

    def __init__(self, frame_id: str, data: bytes = b"",
                 flags: FrameFlags | None = None, version: int = 3):
        if not is_valid_frame_id(frame_id):
            raise ValueError("Invalid frame id %r" % frame_id)
        self.id = frame_id
        self.data = data
        self.flags = flags if flags is not None else FrameFlags(0, version)
        self.version = version

    @classmethod
    def from_value(cls, frame_id: str, value: str | bytes, version: int = 3,
                   lang: str = "ENG", desc: str = "") -> Frame:
        data = encode_tag(frame_id, value, lang=lang, desc=desc)
        return cls(frame_id, data, FrameFlags(0, version), version)

    @property
    def family(self) -> FrameFamily:
        return frame_family(self.id)

    @property
    def value(self) -> str | bytes | None:
        if self.flags.opaque:
            return self.data
        return decode_tag(self.id, self.data)

    @property
    def fields(self) -> dict[str, Any] | None:
        """All decoded fields (encoding, lang, desc, value), see
        decode_frame
        """

        if self.flags.opaque:
            return {"value": self.data}
        return decode_frame(self.id, self.data)

    def upgraded(self) -> Frame | None:
        """The v2.3 version of a v2.2 frame or None if there is none"""

        if len(self.id) == 4:
            return self
        new_id = UPGRADE_V22.get(self.id)
        if new_id is None:
            return None
        data = self.data
        if self.id == "PIC":
            data = _upgrade_pic(data)
        return type(self)(new_id, data, FrameFlags(0, 3), 3)

    def to_bytes(self, major: int) -> bytes:
        """Frame header and body for a tag of the given major version"""

        frame_id = self.id.encode("ascii")
        size = len(self.data)
        if major == 2:
            if len(frame_id) != 3:
                raise ValueError("%r can't be written to a v2.2 tag" % self.id)
            header = frame_id + struct.pack(">I", size)[1:]
            return header + self.data

        if len(frame_id) != 4:
            raise ValueError("%r can't be written to a v2.%d tag" % (
                self.id, major))
        flags = self.flags.for_write() if self.flags.major == major else 0
        if major == 4:
            size_bytes = BitPaddedInt.to_str(size, width=4)
        else:
            size_bytes = struct.pack(">I", size)
        return frame_id + size_bytes + struct.pack(">H", flags) + self.data

    @classmethod
    def from_tag_data(cls, frame_id: str, flags: int, data: bytes,
                      major: int, tag_unsynch: bool) -> Frame:
        """Construct a frame from the raw body found in a v2.4 or older tag.

        For v2.2/v2.3 tag level unsynchronization has to be removed by the
        caller before splitting the frame table.
        """

        frame_flags = FrameFlags(flags, major)
        datalen_bytes = b""
        if frame_flags.data_length:
            if len(data) < 4:
                raise ID3BadFrameError(
                    "frame %s too small for data length" % frame_id)
            datalen_bytes = data[:4]
            data = data[4:]

        if major == 4:
            needs_resync = frame_flags.unsynch or tag_unsynch
        else:
            needs_resync = frame_flags.unsynch and not tag_unsynch
        if needs_resync:
            data = resync(data)

        if frame_flags.opaque:
            data = datalen_bytes + data
        return cls(frame_id, data, frame_flags, major)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return (self.id, self.data) == (other.id, other.data)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "%s(%r, %r)" % (type(self).__name__, self.id, self.value)

    def pprint(self) -> str:
        value = self.value
        if isinstance(value, bytes):
            return "%s=[%d bytes]" % (self.id, len(value))
        return "%s=%s" % (self.id, value)
