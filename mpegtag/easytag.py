# Copyright 2006 Joe Wreschnig
#           2026 mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Easier access to the common fields of both tags.

UniversalTag merges an ID3v1 and an ID3v2 tag into one flat mapping with
the ID3v1 field names. Values of the ID3v2 tag win over the ones of the
ID3v1 tag.
"""

from __future__ import annotations

import re
from typing import Any

from mpegtag._constants import GENRES
from mpegtag._util import DictMixin

__all__ = ["UniversalTag"]


_NUMBER = re.compile(r"^\s*(\d+)")
_GENRE_REF = re.compile(r"^\((\d+)\)(.*)$")


def _to_int(value: Any) -> int | None:
    # "1/17" -> 1
    if isinstance(value, int):
        return value
    match = _NUMBER.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def _genre_name(value: str) -> str:
    # resolve "(17)" and "17" to the ID3v1 genre name
    match = _GENRE_REF.match(value)
    if match is not None:
        number, rest = match.groups()
        if rest:
            return rest
        value = number
    if value.isdigit() and int(value) < len(GENRES):
        return GENRES[int(value)]
    return value


class UniversalTag(DictMixin):
    """A merged view of an ID3v1 and an ID3v2 tag.

    Keys are the ones of :class:`mpegtag.id3.ID3v1`. Fields missing in
    both tags, empty strings and zero numbers are not present. The keys are
    also available as attributes; missing ones read as None.

    Changes are recorded and pushed into both tags by :meth:`apply`,
    which the MP3 session calls when flushing.
    """

    __module__ = "mpegtag.easytag"

    KEYS = ("title", "artist", "album", "year", "comments", "tracknum",
            "genre", "genre_s")

    V22_KEYS = {
        "title": "TT2",
        "artist": "TP1",
        "album": "TAL",
        "year": "TYE",
        "tracknum": "TRK",
        "comments": "COM",
        "genre_s": "TCO",
    }
    """Frame ids used for ID3v2.2 tags"""

    V23_KEYS = {
        "title": "TIT2",
        "artist": "TPE1",
        "album": "TALB",
        "year": "TYER",
        "tracknum": "TRCK",
        "comments": "COMM",
        "genre_s": "TCON",
    }
    """Frame ids used for ID3v2.3 and 2.4 tags, 2.4 uses TDRC for year"""

    def __init__(self, tag1, tag2):
        self.__dict__["_tag1"] = tag1
        self.__dict__["_tag2"] = tag2
        self.__dict__["_pending"] = {}
        self.__dict__["_values"] = {}
        self.refresh()

    def frame_ids(self) -> dict[str, str]:
        """Maps keys to the frame ids matching the ID3v2 tag version"""

        major = self._tag2.major
        if major == 2:
            return self.V22_KEYS
        ids = dict(self.V23_KEYS)
        if major == 4:
            ids["year"] = "TDRC"
        return ids

    def refresh(self) -> None:
        """Merge the tags again, keeping changes not applied yet"""

        values: dict[str, Any] = {}
        values.update(self._tag1.items())

        for key, frame_id in self.frame_ids().items():
            value = self._tag2.get(frame_id)
            if isinstance(value, list):
                value = value[0] if value else None
            if not isinstance(value, str) or not value:
                continue
            if key in ("year", "tracknum"):
                number = _to_int(value)
                if number is not None:
                    values[key] = number
            elif key == "genre_s":
                name = _genre_name(value)
                values["genre_s"] = name
                if name in GENRES:
                    values["genre"] = GENRES.index(name)
                else:
                    values.pop("genre", None)
            else:
                values[key] = value

        values.update(self._pending)
        self._values.clear()
        self._values.update({
            k: v for k, v in values.items()
            if v is not None and v != "" and v != 0})

    def keys(self) -> list[str]:
        return [k for k in self.KEYS if k in self._values]

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if key not in self.KEYS:
            raise KeyError(key)
        if self._tag1._discard_writes:
            return

        if key in ("year", "tracknum", "genre") and value is not None:
            value = _to_int(value)
        self._pending[key] = value
        if key == "genre":
            genre_s = GENRES[value] if \
                value is not None and value < len(GENRES) else None
            self._pending["genre_s"] = genre_s
        elif key == "genre_s":
            self._pending["genre"] = \
                GENRES.index(value) if value in GENRES else None

        if value is None or value == "" or value == 0:
            self._values.pop(key, None)
        else:
            self._values[key] = value
        for linked in ("genre", "genre_s"):
            if linked in self._pending:
                if self._pending[linked] is None:
                    self._values.pop(linked, None)
                else:
                    self._values[linked] = self._pending[linked]

    def __delitem__(self, key: str) -> None:
        if key not in self._values:
            raise KeyError(key)
        self[key] = None

    def __getattr__(self, name: str) -> Any:
        if name in self.KEYS:
            return self._values.get(name)
        raise AttributeError(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self.KEYS:
            self[name] = value
        else:
            raise AttributeError(name)

    @property
    def changed(self) -> bool:
        return bool(self._pending)

    def apply(self) -> None:
        """Write the recorded changes into both tags"""

        tag1 = self._tag1
        tag2 = self._tag2
        ids = self.frame_ids()
        pending = self._pending

        for key in self.KEYS:
            if key not in pending:
                continue
            value = pending[key]
            tag1[key] = value

            if key == "genre":
                if "genre_s" in pending:
                    continue
                key = "genre_s"
                value = GENRES[value] if \
                    value is not None and value < len(GENRES) else None
            frame_id = ids.get(key)
            if frame_id is None:
                continue
            if value is not None and not isinstance(value, str):
                value = str(value)
            tag2[frame_id] = value

        pending.clear()

    def pprint(self) -> str:
        return "\n".join("%s=%s" % (k, self[k]) for k in self.keys())
