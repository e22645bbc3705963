# Copyright (C) 2005  Michael Urman
#               2026  mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, NamedTuple

logger = logging.getLogger(__name__)

PADDING_BLOCK = 1024
"""Default amount of padding added when a tag has to grow"""

ID3_HEADER_SIZE = 10


def default_minimum_tag_size(file_size: int) -> int:
    """The default lower bound for the size of a rebuilt tag.

    1 KiB + 0.1% of the data following the tag. Can be replaced at module
    level to change the policy for all sessions.
    """

    return 1024 + file_size // 1000


class TagOptions(NamedTuple):
    """Options controlling how tags are read and written back.

    All of them can be passed as keyword arguments to
    :class:`mpegtag.mp3.MP3`.
    """

    padding: bool = True
    """Whether to reserve padding when a tag gets rebuilt"""

    padding_size: int = PADDING_BLOCK
    """Padding added on top of the frame data when rebuilding"""

    smart_padding: bool = True
    """Scale the minimum tag size with the size of the audio data"""

    minimum_tag_size: int = 0
    """Lower bound for the size of a rebuilt tag, including the header"""

    minimum_tag_size_callback: Callable[[int], int] | None = None
    """Called with the size of the data following the tag, returns the
    minimum tag size. Overrides the other minimum size options.
    """

    parse_tags: bool = True
    """If False no tags are parsed and nothing gets written"""

    @classmethod
    def from_kwargs(cls, kwargs: dict[str, Any]) -> TagOptions:
        """Raises TypeError for unknown option names"""

        unknown = sorted(set(kwargs) - set(cls._fields))
        if unknown:
            raise TypeError(
                "unexpected option(s): %s" % ", ".join(unknown))
        return cls(**kwargs)


class PaddingInfo:
    """Decides how large a tag gets on disk when it is written back.

    ::

        info = PaddingInfo(len(framedata), old_tag_length, audio_size)
        new_length = info.get_tag_length()

    Tag lengths include the 10 byte header. A previous length of 0 means
    there is no tag on disk yet.
    """

    needed = 0
    """The amount of frame data which has to fit into the tag"""

    previous_length = 0
    """The on-disk length of the tag before saving, 0 if there was none"""

    file_size = 0
    """The amount of data following the tag"""

    def __init__(self, needed: int, previous_length: int, file_size: int,
                 options: TagOptions | None = None):
        self.needed = needed
        self.previous_length = previous_length
        self.file_size = file_size
        self.options = options if options is not None else TagOptions()

    @property
    def padding(self) -> int:
        """The padding left in the previous tag after saving in bytes (can be
        negative if more data needs to be added as padding is available)
        """

        available = max(self.previous_length - ID3_HEADER_SIZE, 0)
        return available - self.needed

    def minimum_tag_size(self) -> int:
        options = self.options
        if options.minimum_tag_size_callback is not None:
            return options.minimum_tag_size_callback(self.file_size)
        if options.smart_padding:
            return max(options.minimum_tag_size,
                       default_minimum_tag_size(self.file_size))
        return options.minimum_tag_size

    def get_tag_length(self) -> int:
        """The on-disk length of the written tag including the header

        :rtype: int
        """

        options = self.options
        exact = ID3_HEADER_SIZE + self.needed

        if not options.padding:
            return exact

        if self.previous_length and self.padding >= 0:
            return self.previous_length

        increment = max(options.padding_size, 0)
        length = max(exact + increment, self.minimum_tag_size())
        logger.debug("tag grows from %d to %d bytes",
                     self.previous_length, length)
        return length

    def get_padding(self) -> int:
        """Amount of zero bytes following the frames after saving"""

        return self.get_tag_length() - ID3_HEADER_SIZE - self.needed

    def __repr__(self) -> str:
        return "<%s needed=%d previous=%d size=%d>" % (
            type(self).__name__, self.needed, self.previous_length,
            self.file_size)


class Metadata:
    """An abstract dict-like object.

    Metadata is the base class for the tag objects in mpegtag.
    """

    __module__ = "mpegtag"

    def __init__(self, *args, **kwargs):
        if args or kwargs:
            self.load(*args, **kwargs)

    def load(self, *args, **kwargs):
        raise NotImplementedError

    def save(self, filething=None, **kwargs):
        """Save changes to a file."""

        raise NotImplementedError

    def delete(self, filething=None):
        """Remove tags from a file.

        In most cases this means any traces of the tag will be removed
        from the file.
        """

        raise NotImplementedError
