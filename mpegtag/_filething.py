# Copyright (C) 2026  mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

from io import BytesIO
from typing import NamedTuple


class FileThing(NamedTuple):
    """A byte source together with where it came from.

    filename is None if the source is not a path but a file object passed
    in by the caller. name is the best name we have for the source and is
    only used in messages and reprs.
    """

    fileobj: BytesIO
    filename: str | None
    name: str | None

    @property
    def has_path(self) -> bool:
        return self.filename is not None

    def reopen(self, writable: bool = False) -> FileThing:
        """Close the current handle and open the path again.

        Needed after the file was replaced on disk, the old handle still
        refers to the replaced content. Only valid for path based sources.
        """

        assert self.filename is not None
        self.fileobj.close()
        fileobj = open(self.filename, "rb+" if writable else "rb")
        return self._replace(fileobj=fileobj)
