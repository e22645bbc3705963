# Copyright (C) 2005  Michael Urman
#               2013  Christoph Reiter
#               2026  mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import logging
import struct
from io import BytesIO
from typing import Any

from mpegtag._util import DictMixin

from ._frames import Frame
from ._util import (
    BitPaddedInt,
    ID3BadFrameError,
    ID3NoHeaderError,
    ID3UnsupportedVersionError,
    is_valid_frame_id,
    resync,
)

logger = logging.getLogger(__name__)


class ID3Header:
    """The 10 byte header of an ID3v2 tag, followed by the extended header
    if there is one.
    """

    _V24 = (2, 4, 0)
    _V23 = (2, 3, 0)
    _V22 = (2, 2, 0)

    F_UNSYNCH = 0x80
    F_EXTENDED = 0x40
    F_FOOTER = 0x10

    version: tuple[int, int, int] = _V23
    size: int = 0
    """Size of the tag without the header (and footer)"""

    _flags: int = 0
    _extdata: bytes = b""

    def __init__(self, fileobj: BytesIO | None = None):
        """Raises ID3NoHeaderError, ID3UnsupportedVersionError"""

        if fileobj is None:
            # for testing
            self._flags = 0
            return

        fn = getattr(fileobj, "name", "<unknown>")
        data = fileobj.read(10)
        if len(data) != 10:
            raise ID3NoHeaderError(f"{fn}: too small")

        id3, vmaj, vrev, flags, size = struct.unpack('>3sBBB4s', data)
        self._flags = flags
        self.size = BitPaddedInt(size)
        self.version = (2, vmaj, vrev)

        if id3 != b'ID3':
            raise ID3NoHeaderError(f"{fn!r} doesn't start with an ID3 tag")

        if vmaj not in [2, 3, 4]:
            raise ID3UnsupportedVersionError(
                f"{fn!r} ID3v2.{vmaj} not supported")

        if self.f_extended and vmaj > 2:
            extsize_data = fileobj.read(4)

            if is_valid_frame_id(extsize_data):
                # Some tagger sets the extended header flag but
                # doesn't write an extended header; in this case, the
                # ID3 data follows immediately. Since no extended
                # header is going to be long enough to actually match
                # a frame, and if it's *not* a frame we're going to be
                # completely lost anyway, this seems to be the most
                # correct check.
                # https://github.com/quodlibet/quodlibet/issues/126
                self._flags ^= self.F_EXTENDED
                fileobj.seek(-4, 1)
                return

            if len(extsize_data) != 4:
                raise ID3BadFrameError(f"{fn!r}: extended header truncated")

            if self.version >= self._V24:
                # "Where the 'Extended header size' is the size of the whole
                # extended header, stored as a 32 bit synchsafe integer."
                extsize = BitPaddedInt(extsize_data) - 4
            else:
                # "Where the 'Extended header size', currently 6 or 10 bytes,
                # excludes itself."
                extsize = struct.unpack('>L', extsize_data)[0]

            self._extdata = fileobj.read(extsize) if extsize > 0 else b""
            if len(self._extdata) != max(extsize, 0):
                raise ID3BadFrameError(f"{fn!r}: extended header truncated")

    @property
    def f_unsynch(self) -> bool:
        return bool(self._flags & self.F_UNSYNCH)

    @property
    def f_extended(self) -> bool:
        return bool(self._flags & self.F_EXTENDED)

    @property
    def f_footer(self) -> bool:
        return bool(self._flags & self.F_FOOTER)

    @property
    def ext_length(self) -> int:
        """Bytes of the extended header, part of `size`"""

        if not self.f_extended:
            return 0
        return 4 + len(self._extdata)

    @property
    def tag_length(self) -> int:
        """Space the tag takes up on disk including header and footer"""

        footer = 10 if self.f_footer and self.version >= self._V24 else 0
        return 10 + self.size + footer


def _determine_bpi(data: bytes) -> type[int]:
    """Takes id3v2.4 frame data and determines if ints or bitpaddedints
    should be used for parsing. Needed because iTunes used to write
    normal ints for frame sizes.
    """

    def walk(bpi: type[int]) -> tuple[int, int]:
        o = 0
        found = 0
        while o < len(data) - 10:
            part = data[o:o + 10]
            name, size, flags = struct.unpack('>4sLH', part)
            size = bpi(size)
            o += 10 + size
            if is_valid_frame_id(name):
                found += 1
        return found, o - len(data)

    # count number of tags found as BitPaddedInt and how far past
    asbpi, bpioff = walk(BitPaddedInt)
    # count number of tags found as int and how far past
    asint, intoff = walk(int)

    # if more tags as int, or equal and bpi is past and int is not
    if asint > asbpi or (asint == asbpi and (bpioff >= 1 and intoff <= 1)):
        return int
    return BitPaddedInt


def read_frames(header: ID3Header, data: bytes) -> tuple[list[Frame], bytes]:
    """Splits the frame area of a tag into frames.

    Returns the frames and the data following the last frame (padding).
    Reading stops at the first id starting with a NULL byte.

    Raises:
        ID3BadFrameError: for an invalid frame id or a frame size pointing
            past the end of the frame area
    """

    frames = []
    major = header.version[1]

    if header.f_unsynch and major < 4:
        data = resync(data)

    if major >= 3:
        hsize, fmt = 10, '>4sLH'
        bpi: type[int] = _determine_bpi(data) if major == 4 else int
    else:
        hsize, fmt = 6, '>3s3s'
        bpi = int

    while data:
        if data[:1] == b'\x00':
            break
        if len(data) < hsize:
            logger.debug("%d bytes of junk after the last frame", len(data))
            break

        if major >= 3:
            name, size, flags = struct.unpack(fmt, data[:hsize])
            size = bpi(size)
        else:
            name, size_bytes = struct.unpack(fmt, data[:hsize])
            size = struct.unpack('>L', b'\x00' + size_bytes)[0]
            flags = 0

        if not is_valid_frame_id(name):
            raise ID3BadFrameError("invalid frame id %r" % name)
        if size > len(data) - hsize:
            raise ID3BadFrameError(
                "frame %r claims %d bytes, only %d left" % (
                    name, size, len(data) - hsize))

        framedata = data[hsize:hsize + size]
        data = data[hsize + size:]
        if size == 0:
            # drop empty frames
            continue

        frames.append(Frame.from_tag_data(
            name.decode("ascii"), flags, framedata, major, header.f_unsynch))

    return frames, data


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == b"" or value == []


class ID3Tags(DictMixin):
    """An ordered collection of ID3v2 frames.

    Maps frame ids to the decoded values. If a tag contains more than one
    frame with the same id the value is a list of all their values.
    Assigning None or an empty string removes the frames.

    The values present after parsing are remembered, `changed` tells if
    the tag differs from them.
    """

    __module__ = "mpegtag.id3"

    def __init__(self, *args, **kwargs):
        self._frames: list[Frame] = []
        self._version: tuple[int, int, int] = ID3Header._V23
        self._snapshot: dict[str, Any] = {}
        self._discard_writes = False
        super().__init__(*args, **kwargs)

    @property
    def version(self) -> str:
        """Version string of the tag, e.g. ``"2.3.0"``"""

        return "%d.%d.%d" % self._version

    @property
    def major(self) -> int:
        return self._version[1]

    def _read(self, header: ID3Header, data: bytes) -> bytes:
        self._version = header.version
        self._frames, remaining = read_frames(header, data)
        self._take_snapshot()
        return remaining

    def _take_snapshot(self) -> None:
        self._snapshot = {
            k: v for k, v in self.items() if not _is_empty(v)}

    def keys(self) -> list[str]:
        seen = []
        for frame in self._frames:
            if frame.id not in seen:
                seen.append(frame.id)
        return seen

    def getall(self, frame_id: str) -> list[Frame]:
        """All frames with the given id (the list may be empty)"""

        return [f for f in self._frames if f.id == frame_id]

    def add(self, frame: Frame) -> None:
        """Add a frame, keeping frames with the same id"""

        if self._discard_writes:
            return
        self._frames.append(frame)

    def __getitem__(self, frame_id: str) -> Any:
        frames = self.getall(frame_id)
        if not frames:
            raise KeyError(frame_id)
        if len(frames) == 1:
            return frames[0].value
        return [f.value for f in frames]

    def __setitem__(self, frame_id: str, value: Any) -> None:
        if self._discard_writes:
            return

        if _is_empty(value):
            if frame_id in self:
                del self[frame_id]
            return

        if self.get(frame_id) == value:
            # keep the frames as they are on disk
            return

        values = value if isinstance(value, list) else [value]
        new = [Frame.from_value(frame_id, v, self.major) for v in values]

        index = len(self._frames)
        for i, frame in enumerate(self._frames):
            if frame.id == frame_id:
                index = i
                break
        self._frames = (
            [f for f in self._frames[:index] if f.id != frame_id] + new +
            [f for f in self._frames[index:] if f.id != frame_id])

    def __delitem__(self, frame_id: str) -> None:
        if self._discard_writes:
            return
        if frame_id not in self:
            raise KeyError(frame_id)
        self._frames = [f for f in self._frames if f.id != frame_id]

    def __getattr__(self, name: str) -> Any:
        # frame ids as attributes: tag.TIT2
        if is_valid_frame_id(name):
            try:
                return self[name]
            except KeyError:
                return None
        raise AttributeError(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if is_valid_frame_id(name):
            self[name] = value
        else:
            super().__setattr__(name, value)

    @property
    def changed(self) -> bool:
        """If the frames differ from what was read"""

        current = {k: v for k, v in self.items() if not _is_empty(v)}
        return current != self._snapshot

    def _write(self, major: int) -> bytes:
        frames = self._frames
        if self.major == 2 and major != 2:
            upgraded = []
            for frame in frames:
                new = frame.upgraded()
                if new is None:
                    logger.debug("dropping v2.2 frame %s", frame.id)
                    continue
                upgraded.append(new)
            frames = upgraded
        return b"".join(f.to_bytes(major) for f in frames)

    def pprint(self) -> str:
        """
        Returns:
            text: tags in a human readable format, one frame per line
        """

        return "\n".join(sorted(f.pprint() for f in self._frames))
