# Copyright (C) 2005  Michael Urman
#               2006  Lukas Lalinsky
#               2013  Christoph Reiter
#               2026  mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""ID3v2 and ID3v1 reading and writing.

This is based off of the following references:

* http://id3.org/id3v2.4.0-structure
* http://id3.org/id3v2.4.0-frames
* http://id3.org/id3v2.3.0
* http://id3.org/id3v2-00
* http://id3.org/ID3v1

Frames are not modeled one class per frame id. Every id belongs to one of
a few body layouts (:class:`FrameFamily`) and values are plain text for
the text and URL families and bytes for everything else. Frames which
weren't changed are written back exactly as they were read.

You are probably interested in the :class:`ID3` class to start with.
"""

from ._file import ID3 as ID3, delete as delete, has_id3v2 as has_id3v2
from ._frames import Frame as Frame, FrameFamily as FrameFamily, \
    FrameFlags as FrameFlags, frame_family as frame_family, \
    encode_tag as encode_tag, decode_tag as decode_tag, \
    decode_frame as decode_frame, BINARY_FRAMES as BINARY_FRAMES, \
    UPGRADE_V22 as UPGRADE_V22
from ._id3v1 import ID3v1 as ID3v1, find_id3v1 as find_id3v1, \
    write_id3v1 as write_id3v1, has_id3v1 as has_id3v1, \
    delete_id3v1 as delete_id3v1
from ._specs import Encoding as Encoding, convert as convert
from ._tags import ID3Header as ID3Header, ID3Tags as ID3Tags
from ._util import ID3NoHeaderError as ID3NoHeaderError, error as error, \
    ID3UnsupportedVersionError as ID3UnsupportedVersionError, \
    ID3BadFrameError as ID3BadFrameError, \
    ID3BadUnsynchData as ID3BadUnsynchData, \
    BitPaddedInt as BitPaddedInt, unsynch as unsynch, resync as resync, \
    decode_syncsafe as decode_syncsafe, encode_syncsafe as encode_syncsafe, \
    decode_be32 as decode_be32, encode_be32 as encode_be32

__all__ = [
    "ID3", "delete", "has_id3v2",
    "Frame", "FrameFamily", "FrameFlags", "frame_family", "encode_tag",
    "decode_tag", "decode_frame", "BINARY_FRAMES", "UPGRADE_V22",
    "ID3v1", "find_id3v1", "write_id3v1", "has_id3v1", "delete_id3v1",
    "Encoding", "convert",
    "ID3Header", "ID3Tags",
    "ID3NoHeaderError", "error", "ID3UnsupportedVersionError",
    "ID3BadFrameError", "ID3BadUnsynchData", "BitPaddedInt", "unsynch",
    "resync", "decode_syncsafe", "encode_syncsafe", "decode_be32",
    "encode_be32",
]
