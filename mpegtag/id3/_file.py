# Copyright (C) 2005  Michael Urman
#               2006  Lukas Lalinsky
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

from mpegtag._filething import FileThing
from mpegtag._tags import ID3_HEADER_SIZE, Metadata, PaddingInfo, TagOptions
from mpegtag._util import (
    convert_error,
    get_size,
    loadfile,
    overwrite_bytes,
    rewrite_file,
)

from ._tags import ID3Header, ID3Tags
from ._util import BitPaddedInt, ID3BadFrameError, ID3NoHeaderError, error

logger = logging.getLogger(__name__)


class ID3(ID3Tags, Metadata):
    """ID3(filething=None)

    A file with an ID3v2 tag.

    If any arguments are given, the :meth:`load` is called with them. If no
    arguments are given then an empty `ID3` object is created.

    ::

        ID3("foo.mp3")
        # same as
        t = ID3()
        t.load("foo.mp3")

    Arguments:
        filething (filething): or `None`

    Attributes:
        version (str): ID3 tag version, e.g. ``"2.3.0"``
        tag_length (int): the space the tag takes up on disk, including the
            header and padding. 0 if there is no tag
        io_position (int): offset of the first byte after the tag
    """

    __module__ = "mpegtag.id3"

    _header: ID3Header | None = None
    _padding: int = 0
    filename: str | None = None

    @property
    def f_unsynch(self) -> bool:
        if self._header is not None:
            return self._header.f_unsynch
        return False

    @property
    def f_extended(self) -> bool:
        if self._header is not None:
            return self._header.f_extended
        return False

    @property
    def tag_length(self) -> int:
        if self._header is not None:
            return self._header.tag_length
        return 0

    @property
    def io_position(self) -> int:
        return self.tag_length

    @property
    def padding(self) -> int:
        """Zero bytes following the last frame"""

        return self._padding

    def _reset(self) -> None:
        self._header = None
        self._padding = 0
        self._frames = []
        self._version = ID3Header._V23
        self._take_snapshot()

    def _parse(self, fileobj: BytesIO) -> None:
        self._reset()
        fileobj.seek(0, 0)
        header = ID3Header(fileobj)

        size = header.size - header.ext_length
        data = fileobj.read(size)
        if len(data) != size:
            raise ID3BadFrameError(
                "tag claims %d bytes, only %d available" % (size, len(data)))

        remaining = self._read(header, data)
        self._header = header
        self._padding = len(remaining)
        logger.debug("read ID3v%s tag: %d frames, %d bytes padding",
                     self.version, len(self._frames), self._padding)

    @convert_error(IOError, error)
    @loadfile()
    def load(self, filething: FileThing) -> None:
        """Load tags from a filename or file object.

        Raises:
            ID3NoHeaderError: the file doesn't start with an ID3v2 tag
            ID3UnsupportedVersionError: not ID3v2.2, 2.3 or 2.4
            ID3BadFrameError: the frame table is corrupt
        """

        self.filename = filething.filename
        self._parse(filething.fileobj)

    def _write_major(self) -> int:
        # v2.2 tags get upgraded, everything else keeps its version
        return 4 if self.major == 4 else 3

    def _prepare_data(self, framedata: bytes, tag_length: int,
                      major: int) -> bytes:
        new_framesize = BitPaddedInt.to_str(
            tag_length - ID3_HEADER_SIZE, width=4)
        header = struct.pack(
            '>3sBBB4s', b'ID3', major, 0, 0, new_framesize)

        data = header + framedata
        assert tag_length >= len(data)
        data += (tag_length - len(data)) * b'\x00'
        assert tag_length == len(data)

        return data

    @convert_error(IOError, error)
    @loadfile(writable=True)
    def save(self, filething: FileThing, options: TagOptions | None = None
             ) -> None:
        """save(filething=None, options=None)

        Save changes to a file.

        If the new tag fits into the space taken up by the current one it
        gets overwritten in place, otherwise the file is rebuilt with a tag
        sized according to `options` (see :class:`mpegtag.PaddingInfo`).
        A file object without a name gets rewritten in memory; for a path
        the rebuilt file replaces the old one.

        Args:
            filething (filething):
                Filename to save the tag to. If no filename is given,
                the one most recently loaded is used.
            options (TagOptions): padding options

        Raises:
            mpegtag.MpegTagError
        """

        fileobj = filething.fileobj

        fileobj.seek(0, 0)
        try:
            old_length = ID3Header(fileobj).tag_length
        except ID3NoHeaderError:
            old_length = 0

        major = self._write_major()
        framedata = self._write(major)
        trailing_size = get_size(fileobj) - old_length

        info = PaddingInfo(len(framedata), old_length, trailing_size, options)
        tag_length = info.get_tag_length()
        data = self._prepare_data(framedata, tag_length, major)

        if old_length and tag_length == old_length:
            logger.debug("%s: writing %d byte tag in place",
                         filething.name, tag_length)
            overwrite_bytes(fileobj, data, 0)
        else:
            logger.debug("%s: rebuilding file, tag %d -> %d bytes",
                         filething.name, old_length, tag_length)
            rewrite_file(filething, data, old_length)

        # what is on disk now
        self._parse(BytesIO(data))

    @convert_error(IOError, error)
    @loadfile(writable=True)
    def delete(self, filething: FileThing) -> None:
        """delete(filething=None)

        Remove the ID3v2 tag including its padding from a file.

        If no filename is given, the one most recently loaded is used.
        """

        delete(filething)
        self._reset()


@convert_error(IOError, error)
@loadfile(method=False)
def has_id3v2(filething: FileThing) -> bool:
    """If the file starts with an ID3v2 tag"""

    fileobj = filething.fileobj
    fileobj.seek(0, 0)
    try:
        ID3Header(fileobj)
    except error:
        return False
    return True


@convert_error(IOError, error)
@loadfile(method=False, writable=True)
def delete(filething: FileThing) -> bool:
    """Remove the ID3v2 tag from a file, returns if there was one.

    Raises:
        mpegtag.MpegTagError: In case deleting failed
    """

    fileobj = filething.fileobj
    fileobj.seek(0, 0)
    try:
        header = ID3Header(fileobj)
    except ID3NoHeaderError:
        return False

    logger.debug("%s: removing %d byte tag", filething.name, header.tag_length)
    rewrite_file(filething, b"", header.tag_length)
    return True
