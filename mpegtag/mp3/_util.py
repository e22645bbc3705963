# Copyright 2015 Christoph Reiter
#           2026 mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""
Summary headers some encoders put into the first MPEG frame.

http://www.codeproject.com/Articles/8295/MPEG-Audio-Frame-Header
http://wiki.hydrogenaud.io/index.php?title=MP3
"""

from __future__ import annotations

from enum import IntFlag
from io import BytesIO
from typing import TYPE_CHECKING

from mpegtag._util import cdata

if TYPE_CHECKING:
    from . import MPEGFrame


class XingHeaderError(Exception):
    pass


class XingHeaderFlags(IntFlag):
    FRAMES = 0x1
    BYTES = 0x2


class XingHeader:

    frames: int = -1
    """Number of frames, -1 if unknown"""

    bytes: int = -1
    """Number of bytes, -1 if unknown"""

    is_info: bool = False
    """If the header started with 'Info' and not 'Xing'. Info headers
    get written for CBR streams.
    """

    def __init__(self, fileobj: BytesIO):
        """Parses the Xing header or raises XingHeaderError.

        The file position after this returns is undefined.
        """

        data = fileobj.read(8)
        if len(data) != 8 or data[:4] not in (b"Xing", b"Info"):
            raise XingHeaderError("Not a Xing header")

        self.is_info = (data[:4] == b"Info")

        flags = XingHeaderFlags(cdata.uint32_be_from(data, 4)[0] & 0x3)

        def read_uint32() -> int:
            data = fileobj.read(4)
            if len(data) != 4:
                raise XingHeaderError("Xing header truncated")
            return cdata.uint32_be(data)

        if flags & XingHeaderFlags.FRAMES:
            self.frames = read_uint32()

        if flags & XingHeaderFlags.BYTES:
            self.bytes = read_uint32()

    @classmethod
    def get_offset(cls, info: MPEGFrame) -> int:
        """Calculate the offset to the Xing header from the start of the
        MPEG header including sync based on the MPEG header's content.
        """

        assert info.layer == 3

        if info.version == 1:
            if info.mode != 3:
                return 36
            else:
                return 21
        else:
            if info.mode != 3:
                return 21
            else:
                return 13


class VBRIHeaderError(Exception):
    pass


class VBRIHeader:

    version = 0
    """VBRI header version"""

    quality = 0
    """Quality indicator"""

    bytes = 0
    """Number of bytes"""

    frames = 0
    """Number of frames"""

    def __init__(self, fileobj: BytesIO):
        """Reads the VBRI header or raises VBRIHeaderError.

        The file position is undefined after this returns
        """

        data = fileobj.read(26)
        if len(data) != 26 or not data.startswith(b"VBRI"):
            raise VBRIHeaderError("Not a VBRI header")

        offset = 4
        self.version, offset = cdata.uint16_be_from(data, offset)
        if self.version != 1:
            raise VBRIHeaderError(
                f"Unsupported header version: {self.version!r}")

        offset += 2  # float16.. can't do
        self.quality, offset = cdata.uint16_be_from(data, offset)
        self.bytes, offset = cdata.uint32_be_from(data, offset)
        self.frames, offset = cdata.uint32_be_from(data, offset)

    @classmethod
    def get_offset(cls, info: MPEGFrame) -> int:
        """Offset in bytes from the start of the MPEG header including sync"""

        assert info.layer == 3

        return 36
