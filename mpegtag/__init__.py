# Copyright (C) 2005  Michael Urman
#               2026  mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""mpegtag reads and rewrites the metadata of MPEG audio files.

    from mpegtag.mp3 import MP3

    with MP3("song.mp3") as mp3:
        print(mp3.info.pprint())
        mp3.tag.title = "New Title"

Both the ID3v1 tag at the end of the file and the ID3v2 tag at the start
are supported. Rewriting a tag never touches the audio data and reuses the
space already allocated on disk whenever the new tag fits.
"""

import logging

from mpegtag._util import FormatError, MpegTagError, UnsupportedOperationError
from mpegtag._filething import FileThing
from mpegtag._tags import Metadata, PaddingInfo, TagOptions, PADDING_BLOCK

version = (0, 1, 0)
"""Version tuple."""

version_string = ".".join(map(str, version))
"""Version string."""

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "FileThing",
    "FormatError",
    "Metadata",
    "MpegTagError",
    "PADDING_BLOCK",
    "PaddingInfo",
    "TagOptions",
    "UnsupportedOperationError",
    "version",
    "version_string",
]
