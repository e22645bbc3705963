# Copyright (C) 2006  Joe Wreschnig
#               2026  mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""MPEG audio stream information and tags."""

from __future__ import annotations

import logging
import os
import struct
from enum import Enum
from io import BytesIO
from typing import Any

from mpegtag._tags import TagOptions
from mpegtag._util import (
    FormatError,
    MpegTagError,
    UnsupportedOperationError,
    cdata,
    convert_error,
    get_size,
    loadfile,
    open_filething,
)
from mpegtag.easytag import UniversalTag
from mpegtag.id3 import (
    ID3,
    BitPaddedInt,
    ID3Header,
    ID3NoHeaderError,
    ID3v1,
    delete,
    delete_id3v1,
    find_id3v1,
    has_id3v1 as _has_id3v1,
    has_id3v2 as _has_id3v2,
    write_id3v1,
)

from ._util import VBRIHeader, VBRIHeaderError, XingHeader, XingHeaderError

__all__ = ["MP3", "MPEGInfo", "MPEGFrame", "Open", "has_id3v1", "has_id3v2",
           "remove_id3v1", "remove_id3v2"]

logger = logging.getLogger(__name__)


class error(MpegTagError):
    pass


class HeaderNotFoundError(error, FormatError, IOError):
    pass


class BitrateMode(Enum):

    CBR = 1
    """Constant Bitrate"""

    VBR = 2
    """Variable Bitrate"""


class MPEGVersion(float, Enum):

    MPEG1 = 1
    MPEG2 = 2
    MPEG25 = 2.5


# Mode values.
STEREO, JOINTSTEREO, DUALCHANNEL, MONO = range(4)

CHANNEL_MODES = ["Stereo", "JStereo", "Dual", "Mono"]


class MPEGFrame:
    """A decoded 4 byte MPEG audio frame header.

    Raises HeaderNotFoundError if the data doesn't start with a frame sync
    or uses reserved values.
    """

    # Map (version, layer) tuples to bitrates.
    __BITRATE = {
        (1, 1): [0, 32, 64, 96, 128, 160, 192, 224,
                 256, 288, 320, 352, 384, 416, 448],
        (1, 2): [0, 32, 48, 56, 64, 80, 96, 112, 128,
                 160, 192, 224, 256, 320, 384],
        (1, 3): [0, 32, 40, 48, 56, 64, 80, 96, 112,
                 128, 160, 192, 224, 256, 320],
        (2, 1): [0, 32, 48, 56, 64, 80, 96, 112, 128,
                 144, 160, 176, 192, 224, 256],
        (2, 2): [0, 8, 16, 24, 32, 40, 48, 56, 64,
                 80, 96, 112, 128, 144, 160],
    }

    __BITRATE[(2, 3)] = __BITRATE[(2, 2)]
    for i in range(1, 4):
        __BITRATE[(2.5, i)] = __BITRATE[(2, i)]

    # Map version to sample rates.
    __RATES = {
        1: [44100, 48000, 32000],
        2: [22050, 24000, 16000],
        2.5: [11025, 12000, 8000]
    }

    def __init__(self, data: bytes):
        if len(data) != 4:
            raise HeaderNotFoundError("frame header truncated")

        frame_data = cdata.uint32_be(data)
        if (frame_data >> 21) != 0x7FF:
            raise HeaderNotFoundError("no frame sync")

        version = (frame_data >> 19) & 0x3
        layer = (frame_data >> 17) & 0x3
        protection = (frame_data >> 16) & 0x1
        bitrate = (frame_data >> 12) & 0xF
        sample_rate = (frame_data >> 10) & 0x3
        padding = (frame_data >> 9) & 0x1
        private = (frame_data >> 8) & 0x1
        self.mode = (frame_data >> 6) & 0x3
        self.mode_extension = (frame_data >> 4) & 0x3
        copyright_ = (frame_data >> 3) & 0x1
        original = (frame_data >> 2) & 0x1
        self.emphasis = (frame_data >> 0) & 0x3

        if (version == 1 or layer == 0 or sample_rate == 0x3 or
                bitrate == 0 or bitrate == 0xF):
            raise HeaderNotFoundError("invalid MPEG frame header")

        self.channels = 1 if self.mode == MONO else 2

        # There is a serious problem here, which is that many flags
        # in an MPEG header are backwards.
        raw_version = [2.5, None, 2, 1][version]
        self.version = MPEGVersion(raw_version)
        self.layer = 4 - layer
        self.protected = not protection
        self.padding = bool(padding)
        self.private = bool(private)
        self.copyright = bool(copyright_)
        self.original = bool(original)

        self.bitrate_index = bitrate
        self.bitrate = self.__BITRATE[(raw_version, self.layer)][bitrate]
        self.sample_rate = self.__RATES[raw_version][sample_rate]

        bps = self.bitrate * 1000
        if self.layer == 1:
            # layer I counts in 4 byte slots, the padding slot included
            self.frame_size = (
                (12 * bps // self.sample_rate) + padding) * 4
            self.samples_per_frame = 384
        elif self.version >= 2 and self.layer == 3:
            self.frame_size = (72 * bps // self.sample_rate) + padding
            self.samples_per_frame = 576
        else:
            self.frame_size = (144 * bps // self.sample_rate) + padding
            self.samples_per_frame = 1152

    @property
    def channel_mode(self) -> str:
        return CHANNEL_MODES[self.mode]

    @property
    def header(self) -> dict[str, Any]:
        """The flag fields of the header"""

        return {
            "original": self.original,
            "error_protection": self.protected,
            "padding": self.padding,
            "emphasis": self.emphasis,
            "private": self.private,
            "mode_extension": self.mode_extension,
            "copyright": self.copyright,
        }

    def is_continued_by(self, other: MPEGFrame) -> bool:
        """If other can be the next frame of the same stream"""

        return (other.version == self.version and
                other.layer == self.layer and
                other.sample_rate == self.sample_rate)


def _read_frame(fileobj: BytesIO, offset: int) -> MPEGFrame | None:
    fileobj.seek(offset, 0)
    try:
        return MPEGFrame(fileobj.read(4))
    except HeaderNotFoundError:
        return None


class MPEGInfo:
    """MPEG audio stream information

    Parse information about an MPEG audio file. This also reads the
    Xing and VBRI VBR header formats.

    This code was implemented based on the format documentation at
    http://mpgedit.org/mpgedit/mpeg_format/mpeghdr.htm.

    Useful attributes:

    * length -- audio length, in seconds
    * bitrate -- audio bitrate, in kbit per second (the average for VBR)
    * sample_rate -- audio sample rate, in Hz
    * vbr -- if the stream uses a variable bitrate
    * bitrate_mode -- a :class:`BitrateMode`
    * channel_mode -- "Stereo", "JStereo", "Dual" or "Mono"
    * audio_offset -- offset of the first MPEG frame
    * audio_size -- bytes from audio_offset to the end of the audio data

    Less useful attributes:

    * version -- MPEG version (1, 2, 2.5)
    * layer -- 1, 2, or 3
    * mode -- One of STEREO, JOINTSTEREO, DUALCHANNEL, or MONO (0-3)
    * header -- the flag fields of the first frame header
    * frames -- number of frames if known, else None
    """

    BLOCK_SIZE = 32768

    vbr = False
    bitrate_mode = BitrateMode.CBR
    frames: int | None = None

    def __init__(self, fileobj: BytesIO, offset: int | None = None,
                 end: int | None = None):
        """Parse MPEG stream information from a file-like object.

        If an offset argument is given, it is used to start looking
        for stream information; otherwise, ID3v2 tags will be skipped
        automatically. `end` is where the audio data ends, by default the
        end of the file.
        """

        size = get_size(fileobj)
        if end is None:
            end = size

        # If we don't get an offset, try to skip an ID3v2 tag.
        if offset is None:
            fileobj.seek(0, 0)
            idata = fileobj.read(10)
            try:
                id3, insize = struct.unpack('>3sxxx4s', idata)
            except struct.error:
                id3, insize = b'', 0
            insize = BitPaddedInt(insize)
            if id3 == b'ID3' and insize > 0:
                offset = insize + 10
            else:
                offset = 0

        frame, frame_offset = self.__sync(fileobj, offset, end)
        logger.debug("first MPEG frame at %d (searched from %d)",
                     frame_offset, offset)

        self.version = frame.version
        self.layer = frame.layer
        self.mode = frame.mode
        self.channels = frame.channels
        self.channel_mode = frame.channel_mode
        self.sample_rate = frame.sample_rate
        self.bitrate = frame.bitrate
        self.protected = frame.protected
        self.padding = frame.padding
        self.header = frame.header
        self.first_frame_offset = frame_offset

        self.audio_offset = frame_offset
        self.audio_size = end - frame_offset

        if not self.__read_vbr_header(fileobj, frame, frame_offset):
            self.__scan(fileobj, frame, frame_offset, end)

    def __sync(self, fileobj: BytesIO, start: int,
               end: int) -> tuple[MPEGFrame, int]:
        # We "know" we have an MPEG file if we find a frame followed by
        # another one, or by the end of the audio data.
        pos = start
        while pos <= end - 4:
            fileobj.seek(pos, 0)
            data = fileobj.read(min(self.BLOCK_SIZE, end - pos))

            frame_1 = data.find(b"\xff")
            while 0 <= frame_1 <= (len(data) - 4):
                try:
                    frame = MPEGFrame(data[frame_1:frame_1 + 4])
                except HeaderNotFoundError:
                    pass
                else:
                    offset = pos + frame_1
                    possible = offset + frame.frame_size
                    if possible == end:
                        return frame, offset
                    if possible + 4 <= end:
                        second = _read_frame(fileobj, possible)
                        if second is not None and \
                                frame.is_continued_by(second):
                            return frame, offset
                frame_1 = data.find(b"\xff", frame_1 + 1)

            # keep the last 3 bytes, they might start a header
            pos += max(len(data) - 3, 1)

        raise HeaderNotFoundError("can't sync to an MPEG frame")

    def __read_vbr_header(self, fileobj: BytesIO, frame: MPEGFrame,
                          offset: int) -> bool:
        """Try to find/parse the Xing or VBRI header, which trumps the
        frame scan. Returns True if it could be used.
        """

        if frame.layer != 3:
            return False

        # Xing
        fileobj.seek(offset + XingHeader.get_offset(frame), 0)
        try:
            xing = XingHeader(fileobj)
        except XingHeaderError:
            pass
        else:
            if xing.is_info:
                logger.debug("Info header, treating stream as CBR")
                self.__set_cbr(frame)
                if xing.frames != -1:
                    self.frames = xing.frames
                return True
            if xing.frames != -1:
                self.__set_vbr(frame, xing.frames, xing.bytes)
                logger.debug("Xing header: %d frames", xing.frames)
                return True

        # VBRI
        fileobj.seek(offset + VBRIHeader.get_offset(frame), 0)
        try:
            vbri = VBRIHeader(fileobj)
        except VBRIHeaderError:
            pass
        else:
            self.__set_vbr(frame, vbri.frames, vbri.bytes)
            logger.debug("VBRI header: %d frames", vbri.frames)
            return True

        return False

    def __set_vbr(self, frame: MPEGFrame, frames: int,
                  size: int) -> None:
        self.vbr = True
        self.bitrate_mode = BitrateMode.VBR
        self.frames = frames
        self.length = float(frames * frame.samples_per_frame) / \
            self.sample_rate
        if size <= 0:
            size = self.audio_size
        if self.length:
            self.bitrate = int(round(size * 8 / self.length / 1000))

    def __set_cbr(self, frame: MPEGFrame) -> None:
        self.vbr = False
        self.bitrate_mode = BitrateMode.CBR
        self.bitrate = frame.bitrate
        self.length = self.audio_size * 8 / float(frame.bitrate * 1000)

    def __scan(self, fileobj: BytesIO, frame: MPEGFrame, offset: int,
               end: int) -> None:
        # no summary header, look at every frame header up to the end
        # of the audio data
        indices = set()
        frames = samples = size = 0
        pos = offset
        current: MPEGFrame | None = frame
        while current is not None:
            indices.add(current.bitrate_index)
            frames += 1
            samples += current.samples_per_frame
            size += current.frame_size
            pos += current.frame_size
            if pos + 4 > end:
                break
            current = _read_frame(fileobj, pos)

        self.frames = frames
        if len(indices) > 1:
            logger.debug("%d frames with %d different bitrates, VBR",
                         frames, len(indices))
            self.vbr = True
            self.bitrate_mode = BitrateMode.VBR
            self.length = float(samples) / self.sample_rate
            self.bitrate = int(round(size * 8 / self.length / 1000))
        else:
            self.__set_cbr(frame)

    def pprint(self) -> str:
        info = self.bitrate_mode.name
        s = "MPEG %g layer %d, %d kbps (%s), %s Hz, %s, %.2f seconds" % (
            self.version, self.layer, self.bitrate, info,
            self.sample_rate, self.channel_mode, self.length)
        return s


class MP3:
    """MP3(filething, **options)

    An MPEG audio (usually MPEG-1 Layer 3) file.

    Reads the stream information and both tags on open. Tag changes are
    kept in memory until :meth:`flush` (or :meth:`close`) writes them.
    Can be used as a context manager, which writes pending changes on a
    normal exit and only releases the file if an exception was raised.

    ::

        with MP3("song.mp3", padding_size=4096) as mp3:
            mp3.tag.title = "title"

    Arguments:
        filething (filething): a path or a seekable file object
        options: see :class:`mpegtag.TagOptions`

    Attributes:
        info (MPEGInfo)
        tag (UniversalTag): merged view of both tags
        tag1 (ID3v1): the ID3v1 tag, empty if there is none
        tag2 (ID3): the ID3v2 tag, empty if there is none

    Raises:
        mpegtag.MpegTagError: the file can't be read or isn't MPEG audio
    """

    __module__ = "mpegtag.mp3"

    info: MPEGInfo
    tag2: ID3

    @convert_error(IOError, error)
    def __init__(self, filething, **options):
        self.options = TagOptions.from_kwargs(options)
        self._closed = False
        self._thing, self._owned = open_filething(filething)
        try:
            self._load()
        except BaseException:
            self._release()
            raise

    def _load(self) -> None:
        fileobj = self._thing.fileobj
        size = get_size(fileobj)
        self._size = size
        parse = self.options.parse_tags

        tag1, offset = find_id3v1(fileobj)
        self._has_tag1 = tag1 is not None
        self._tag1 = tag1 if tag1 is not None and parse else ID3v1()

        self.tag2 = ID3()
        self._has_tag2 = False
        if parse:
            try:
                self.tag2.load(self._thing)
            except ID3NoHeaderError:
                pass
            else:
                self._has_tag2 = True
            tag2_end = self.tag2.io_position
        else:
            fileobj.seek(0, 0)
            try:
                tag2_end = ID3Header(fileobj).tag_length
            except ID3NoHeaderError:
                tag2_end = 0
            else:
                self._has_tag2 = True

        self._tag1._discard_writes = not parse
        self.tag2._discard_writes = not parse
        self._remove_tag1 = False
        self._remove_tag2 = False

        self.info = MPEGInfo(fileobj, tag2_end, size + offset)
        self._tag = UniversalTag(self._tag1, self.tag2)

    @property
    def tag1(self) -> ID3v1:
        return self._tag1

    @tag1.setter
    def tag1(self, values: dict[str, Any]) -> None:
        self._tag1.clear()
        self._tag1.update(values)
        self._tag.refresh()

    @property
    def tag(self) -> UniversalTag:
        return self._tag

    @property
    def filename(self) -> str | None:
        return self._thing.filename

    @property
    def hastag1(self) -> bool:
        """If the file had an ID3v1 tag when it was read"""

        return self._has_tag1

    @property
    def hastag2(self) -> bool:
        """If the file had an ID3v2 tag when it was read"""

        return self._has_tag2

    @property
    def size(self) -> int:
        """Size of the file in bytes"""

        return self._size

    @property
    def audio_content(self) -> tuple[int, int]:
        """Position and size of the audio data. Tag changes never modify
        these bytes.
        """

        return self.info.audio_offset, self.info.audio_size

    @property
    def vbr(self) -> bool:
        return self.info.vbr

    @property
    def bitrate(self) -> int:
        return self.info.bitrate

    @property
    def length(self) -> float:
        return self.info.length

    @property
    def samplerate(self) -> int:
        return self.info.sample_rate

    @property
    def channel_mode(self) -> str:
        return self.info.channel_mode

    @property
    def mpeg_version(self) -> MPEGVersion:
        return self.info.version

    @property
    def layer(self) -> int:
        return self.info.layer

    @property
    def header(self) -> dict[str, Any]:
        return self.info.header

    def removetag1(self) -> None:
        """Remove the ID3v1 tag on the next flush"""

        if self._tag1._discard_writes:
            return
        self._tag1.clear()
        self._tag.refresh()
        self._remove_tag1 = True

    def removetag2(self) -> None:
        """Remove the ID3v2 tag including its padding on the next flush"""

        if self.tag2._discard_writes:
            return
        self.tag2.clear()
        self._tag.refresh()
        self._remove_tag2 = True

    def _writable(self) -> None:
        if self._thing.has_path:
            self._thing = self._thing.reopen(writable=True)

    @convert_error(IOError, error)
    def flush(self) -> None:
        """Write changed tags to the file.

        The ID3v1 tag is written in place at the end of the file. The ID3v2
        tag is overwritten in place if it still fits, else the file gets
        rebuilt (see :class:`mpegtag.PaddingInfo`). Afterwards everything
        gets read again from the file.
        """

        if self._closed:
            raise error("file already closed")
        if not self.options.parse_tags:
            return

        self._tag.apply()

        tag1 = self._tag1
        write1 = tag1.changed or (self._remove_tag1 and self._has_tag1)
        tag2 = self.tag2
        remove2 = self._has_tag2 and not len(tag2) and (
            self._remove_tag2 or tag2.changed)
        write2 = not remove2 and tag2.changed

        if not (write1 or write2 or remove2):
            logger.debug("%s: nothing to write", self._thing.name)
            return

        self._writable()
        if write1:
            write_id3v1(self._thing.fileobj, tag1 if len(tag1) else None)
        if remove2:
            delete(self._thing)
        elif write2:
            tag2.save(self._thing, options=self.options)

        if self._thing.has_path:
            self._thing = self._thing.reopen()
        self._load()

    def _release(self) -> None:
        if self._owned and not self._thing.fileobj.closed:
            self._thing.fileobj.close()
        self._closed = True

    def close(self) -> None:
        """Write pending changes and release the file"""

        if self._closed:
            return
        try:
            self.flush()
        finally:
            self._release()

    @convert_error(IOError, error)
    def reload(self) -> None:
        """Read everything again, discarding unsaved changes. Reopens the
        file after :meth:`close` if it was opened from a path.
        """

        if self._closed:
            if self._thing.has_path:
                self._thing, self._owned = open_filething(self._thing.filename)
            self._closed = False
        self._load()

    @convert_error(IOError, error)
    def rename(self, new_filename: str) -> None:
        """Rename the underlying file.

        Raises:
            mpegtag.UnsupportedOperationError: for file objects
        """

        if not self._thing.has_path:
            raise UnsupportedOperationError(
                "can't rename %r, it has no path" % self._thing.fileobj)
        new_filename = os.fspath(new_filename)
        os.rename(self._thing.filename, new_filename)
        self._thing = self._thing._replace(
            filename=new_filename, name=new_filename)

    def __enter__(self) -> MP3:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if exc_type is None:
            self.close()
        else:
            self._release()

    def pprint(self) -> str:
        """
        Returns:
            text: stream information and tags in a human readable format
        """

        stream = "%s (%s)" % (self.info.pprint(), "audio/mp3")
        tags = [t.pprint() for t in (self._tag1, self.tag2) if len(t)]
        return "\n".join([stream] + tags)

    def __repr__(self) -> str:
        return "<%s %r>" % (type(self).__name__, self._thing.name)


Open = MP3


@convert_error(IOError, error)
@loadfile(method=False)
def has_id3v1(filething) -> bool:
    """If the file ends with an ID3v1 tag"""

    return _has_id3v1(filething)


@convert_error(IOError, error)
@loadfile(method=False)
def has_id3v2(filething) -> bool:
    """If the file starts with an ID3v2 tag"""

    return _has_id3v2(filething)


@convert_error(IOError, error)
@loadfile(method=False, writable=True)
def remove_id3v1(filething) -> bool:
    """Remove the ID3v1 tag, returns if there was one"""

    return delete_id3v1(filething)


@convert_error(IOError, error)
@loadfile(method=False, writable=True)
def remove_id3v2(filething) -> bool:
    """Remove the ID3v2 tag including its padding, returns if there was
    one
    """

    return delete(filething)
