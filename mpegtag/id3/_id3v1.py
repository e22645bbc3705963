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
from io import BytesIO
from typing import Any

from mpegtag._constants import GENRES
from mpegtag._util import DictMixin, convert_error, loadfile

from ._util import error

logger = logging.getLogger(__name__)

ID3V1_SIZE = 128

NO_GENRE = 255


def _fix(data: bytes) -> str:
    return data.split(b"\x00")[0].rstrip(b" ").decode("latin1")


def _pad(text: str, size: int) -> bytes:
    return text.encode("latin1", "ignore")[:size].ljust(size, b" ")


class ID3v1(DictMixin):
    """An ID3v1 or ID3v1.1 tag.

    Maps the keys title, artist, album, year, comments, tracknum, genre
    and genre_s to their values. year, tracknum and genre are ints,
    genre_s is the name of the genre. Setting one of genre or genre_s
    updates the other.

    Empty fields are not present. Always written as v1.1.
    """

    __module__ = "mpegtag.id3"

    KEYS = ("title", "artist", "album", "year", "comments", "tracknum",
            "genre", "genre_s")

    def __init__(self, values: dict[str, Any] | None = None):
        self._values: dict[str, Any] = {}
        self._snapshot: dict[str, Any] = {}
        self._discard_writes = False
        if values:
            self.update(values)

    @classmethod
    def parse(cls, data: bytes) -> ID3v1 | None:
        """Parse a 128-byte string as an ID3v1 tag, None if it isn't one"""

        if len(data) != ID3V1_SIZE:
            return None

        try:
            tag, title, artist, album, year, comment, genre = struct.unpack(
                "3s30s30s30s4s30sB", data)
        except struct.error:
            return None

        if tag != b"TAG":
            return None

        track = None
        if comment[28] == 0 and comment[29] != 0:
            # v1.1
            comment, track = comment[:28], comment[29]

        self = cls()
        values = self._values
        for key, raw in [("title", title), ("artist", artist),
                         ("album", album), ("comments", comment)]:
            text = _fix(raw)
            if text:
                values[key] = text

        year = _fix(year).strip()
        if year.isdigit():
            values["year"] = int(year)
        elif year:
            logger.debug("ignoring non numeric ID3v1 year %r", year)

        if track is not None:
            values["tracknum"] = track

        if genre != NO_GENRE:
            values["genre"] = genre
            if genre < len(GENRES):
                values["genre_s"] = GENRES[genre]

        self._take_snapshot()
        return self

    def _take_snapshot(self) -> None:
        self._snapshot = dict(self._values)

    @property
    def changed(self) -> bool:
        return self._values != self._snapshot

    def keys(self) -> list[str]:
        return [k for k in self.KEYS if k in self._values]

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if key not in self.KEYS:
            raise KeyError(key)
        if self._discard_writes:
            return

        if value is None or value == "":
            self._values.pop(key, None)
            if key == "genre":
                self._values.pop("genre_s", None)
            elif key == "genre_s":
                self._values.pop("genre", None)
            return

        if key in ("year", "tracknum", "genre"):
            value = int(value)
        else:
            value = str(value)

        self._values[key] = value
        if key == "genre":
            self._values.pop("genre_s", None)
            if value < len(GENRES):
                self._values["genre_s"] = GENRES[value]
        elif key == "genre_s":
            try:
                self._values["genre"] = GENRES.index(value)
            except ValueError:
                self._values["genre"] = NO_GENRE

    def __delitem__(self, key: str) -> None:
        if key not in self._values:
            raise KeyError(key)
        self[key] = None

    def to_bytes(self) -> bytes:
        """The 128 byte ID3v1.1 representation"""

        v = self._values
        year = v.get("year")
        track = v.get("tracknum", 0)
        genre = v.get("genre", NO_GENRE)
        if not 0 <= track <= 255:
            track = 0
        if not 0 <= genre <= 255:
            genre = NO_GENRE

        return b"".join([
            b"TAG",
            _pad(v.get("title", ""), 30),
            _pad(v.get("artist", ""), 30),
            _pad(v.get("album", ""), 30),
            _pad("" if year is None else str(year), 4),
            _pad(v.get("comments", ""), 28),
            b"\x00",
            bytes([track, genre]),
        ])

    def pprint(self) -> str:
        return "\n".join("%s=%s" % (k, self[k]) for k in self.keys())


def find_id3v1(fileobj: BytesIO) -> tuple[ID3v1 | None, int]:
    """Returns a tuple of (ID3v1 or None, offset).

    The offset is negative, relative to the end of the file, and points
    to where a tag starts or would be appended (0).
    """

    fileobj.seek(0, 2)
    if fileobj.tell() < ID3V1_SIZE:
        return None, 0

    fileobj.seek(-ID3V1_SIZE, 2)
    tag = ID3v1.parse(fileobj.read(ID3V1_SIZE))
    if tag is None:
        return None, 0
    return tag, -ID3V1_SIZE


def write_id3v1(fileobj: BytesIO, tag: ID3v1 | None) -> None:
    """Replace, append or (for None) remove the ID3v1 tag in place"""

    old, offset = find_id3v1(fileobj)
    fileobj.seek(offset, 2)
    if tag is None:
        if old is not None:
            logger.debug("removing ID3v1 tag")
            fileobj.truncate()
    else:
        fileobj.write(tag.to_bytes())
    fileobj.flush()


@convert_error(IOError, error)
@loadfile(method=False)
def has_id3v1(filething) -> bool:
    """If the file ends with an ID3v1 tag"""

    return find_id3v1(filething.fileobj)[0] is not None


@convert_error(IOError, error)
@loadfile(method=False, writable=True)
def delete_id3v1(filething) -> bool:
    """Removes the ID3v1 tag if there is one, returns if one was removed.

    Raises:
        mpegtag.MpegTagError
    """

    fileobj = filething.fileobj
    tag, offset = find_id3v1(fileobj)
    if tag is None:
        return False
    write_id3v1(fileobj, None)
    return True
