# Copyright (C) 2005  Michael Urman
#               2013  Christoph Reiter
#               2026  mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import re

from mpegtag._util import FormatError, MpegTagError


class error(MpegTagError):
    pass


class ID3NoHeaderError(error, ValueError):
    pass


class ID3UnsupportedVersionError(error, NotImplementedError):
    pass


class ID3BadFrameError(error, FormatError):
    """A frame header or size in the frame table is not valid"""


class ID3BadUnsynchData(error, ValueError):
    pass


_FRAME_ID = re.compile(rb"[A-Z0-9]{3,4}\Z")


def is_valid_frame_id(frame_id: bytes | str) -> bool:
    if isinstance(frame_id, str):
        return frame_id.isascii() and bool(_FRAME_ID.match(frame_id.encode()))
    return bool(_FRAME_ID.match(frame_id))


class unsynch:
    @staticmethod
    def decode(value: bytes) -> bytes:
        """Strict reverse of encode.

        Raises:
            ID3BadUnsynchData: the data contains a false sync or ends
                with an unescaped 0xFF
        """

        output = bytearray()
        safe = True
        append = output.append
        for val in value:
            if safe:
                append(val)
                safe = val != 0xFF
            else:
                if val >= 0xE0:
                    raise ID3BadUnsynchData('invalid sync-safe string')
                elif val != 0x00:
                    append(val)
                safe = True
        if not safe:
            raise ID3BadUnsynchData('string ended unsafe')
        return bytes(output)

    @staticmethod
    def encode(value: bytes) -> bytes:
        output = bytearray()
        safe = True
        append = output.append
        for val in value:
            if safe:
                append(val)
                if val == 0xFF:
                    safe = False
            elif val == 0x00 or val >= 0xE0:
                append(0x00)
                append(val)
                safe = val != 0xFF
            else:
                append(val)
                safe = True
        if not safe:
            append(0x00)
        return bytes(output)


def resync(data: bytes) -> bytes:
    """Removes the stuffing byte of every FF 00 pair, scanning once from
    left to right. Never fails, unlike unsynch.decode.
    """

    return data.replace(b"\xff\x00", b"\xff")


class BitPaddedInt(int):
    """An int stored using only the lower `bits` bits of each byte.

    ID3 uses this with 7 bits ("syncsafe") for sizes, so no size field can
    contain a false MPEG sync.
    """

    bits: int
    bigendian: bool

    def __new__(cls, value: int | bytes, bits: int = 7,
                bigendian: bool = True) -> BitPaddedInt:

        mask = (1 << (bits)) - 1
        numeric_value = 0
        shift = 0

        if isinstance(value, int):
            if value < 0:
                raise ValueError("negative values are not supported")
            while value:
                numeric_value += (value & mask) << shift
                value >>= 8
                shift += bits
        elif isinstance(value, bytes):
            if bigendian:
                value = bytes(reversed(value))
            for byte in value:
                numeric_value += (byte & mask) << shift
                shift += bits
        else:
            raise TypeError

        self = int.__new__(cls, numeric_value)
        self.bits = bits
        self.bigendian = bigendian
        return self

    @staticmethod
    def to_str(value: int, bits: int = 7, bigendian: bool = True,
               width: int = 4, minwidth: int = 4) -> bytes:
        mask = (1 << bits) - 1

        if width != -1:
            index = 0
            bytes_ = bytearray(width)
            try:
                while value:
                    bytes_[index] = value & mask
                    value >>= bits
                    index += 1
            except IndexError:
                raise ValueError('Value too wide (>%d bytes)' % width)
        else:
            # growing integers of at least minwidth bytes
            bytes_ = bytearray()
            append = bytes_.append
            while value:
                append(value & mask)
                value >>= bits
            bytes_ = bytes_.ljust(minwidth, b"\x00")

        if bigendian:
            bytes_.reverse()
        return bytes(bytes_)


SYNCSAFE_MAX = 0x0FFFFFFF


def decode_syncsafe(data: bytes) -> int:
    """Four syncsafe bytes to an int. The high bit of each byte is
    ignored.
    """

    return int(BitPaddedInt(data))


def encode_syncsafe(value: int) -> bytes:
    """Raises ValueError for values that don't fit into 28 bits"""

    if not 0 <= value <= SYNCSAFE_MAX:
        raise ValueError("%d doesn't fit into a syncsafe integer" % value)
    return BitPaddedInt.to_str(value, width=4)


def decode_be32(data: bytes) -> int:
    return int(BitPaddedInt(data, bits=8))


def encode_be32(value: int) -> bytes:
    return BitPaddedInt.to_str(value, bits=8, width=4)
