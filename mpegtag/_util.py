# Copyright (C) 2006  Joe Wreschnig
#               2026  mpegtag contributors
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Utility classes for mpegtag.

You should not rely on the interfaces here being stable. They are
intended for internal use in mpegtag only.
"""

from __future__ import annotations

import codecs
import logging
import os
import shutil
import struct
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
from io import BytesIO
from typing import TypeVar

from ._filething import FileThing

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MpegTagError(Exception):
    """Base class for all custom exceptions in mpegtag"""

    __module__ = "mpegtag"


class FormatError(MpegTagError, ValueError):
    """The data is not what it claims to be: no MPEG frame sync could be
    found or a tag structure is truncated or corrupt.
    """

    __module__ = "mpegtag"


class UnsupportedOperationError(MpegTagError, NotImplementedError):
    """The operation needs something the source can't provide, e.g. a
    file name for an in-memory buffer.
    """

    __module__ = "mpegtag"


def convert_error(
        exc_src: type[BaseException] | tuple[type[BaseException], ...],
        exc_dest: type[Exception]):
    """A decorator for reraising exceptions with a different type.
    Mostly useful for IOError.

    Args:
        exc_src (type): The source exception type
        exc_dest (type): The target exception type.
    """

    def wrap(func: Callable[..., T]) -> Callable[..., T]:

        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except exc_dest:
                raise
            except exc_src as err:
                raise exc_dest(err) from err

        return wrapper

    return wrap


def verify_fileobj(fileobj, writable: bool = False) -> None:
    """Verifies that the passed fileobj is a file like object which
    we can use.

    Args:
        writable (bool): verify that the file object is writable

    Raises:
        ValueError: In case the object is not a file object that is readable
            (or writable if required) or is not opened in bytes mode.
    """

    try:
        data = fileobj.read(0)
    except Exception:
        if not hasattr(fileobj, "read"):
            raise ValueError("%r not a valid file object" % fileobj)
        raise ValueError("Can't read from file object %r" % fileobj)

    if not isinstance(data, bytes):
        raise ValueError(
            "file object %r not opened in binary mode" % fileobj)

    if writable:
        try:
            fileobj.write(b"")
        except Exception:
            raise ValueError("Can't write to file object %r" % fileobj)


def open_filething(filething,
                   writable: bool = False) -> tuple[FileThing, bool]:
    """Turns a path, a file object or a FileThing into a FileThing.

    Returns the FileThing and whether the handle was opened here and has
    to be closed by the caller.

    Raises:
        ValueError: not a usable file object
        IOError: the path could not be opened
    """

    if isinstance(filething, FileThing):
        return filething, False

    if hasattr(filething, "read"):
        verify_fileobj(filething, writable=writable)
        name = getattr(filething, "name", None)
        if not isinstance(name, str):
            name = None
        return FileThing(filething, None, name), False

    filename = os.fspath(filething)
    if isinstance(filename, bytes):
        filename = os.fsdecode(filename)
    fileobj = open(filename, "rb+" if writable else "rb")
    return FileThing(fileobj, filename, filename), True


@contextmanager
def _openfile(filething, writable: bool = False) -> Iterator[FileThing]:
    """yields a FileThing and closes the handle afterwards in case it was
    opened here.
    """

    thing, owned = open_filething(filething, writable)
    try:
        yield thing
    finally:
        if owned:
            thing.fileobj.close()


def loadfile(method: bool = True, writable: bool = False):
    """A decorator for functions taking a `filething` as a first argument.

    Passes a FileThing instance as the first argument to the wrapped
    function. For methods, if no filething is given the filename of the
    instance (``self.filename``) is used.

    Args:
        method (bool): If the wrapped functions is a method
        writable (bool): If a filename is passed opens the file readwrite,
            if passed a file object verifies that it is writable.
    """

    def wrap(func):

        @wraps(func)
        def wrapper(self, filething=None, *args, **kwargs):
            if filething is None:
                filething = getattr(self, "filename", None)
                if filething is None:
                    raise TypeError("no filename or file object given")
            with _openfile(filething, writable) as h:
                return func(self, h, *args, **kwargs)

        @wraps(func)
        def wrapper_func(filething, *args, **kwargs):
            with _openfile(filething, writable) as h:
                return func(h, *args, **kwargs)

        return wrapper if method else wrapper_func

    return wrap


class cdata:
    """C character buffer to Python numeric type conversions.

    For each type there is a plain version taking exactly the size of
    the type and a ``_from`` version taking a buffer and an offset and
    returning the value and the offset after it.
    """

    error = struct.error

    uint16_be = staticmethod(lambda data: struct.unpack('>H', data)[0])
    uint32_be = staticmethod(lambda data: struct.unpack('>I', data)[0])

    @staticmethod
    def uint16_be_from(data: bytes, offset: int = 0) -> tuple[int, int]:
        return struct.unpack_from('>H', data, offset)[0], offset + 2

    @staticmethod
    def uint32_be_from(data: bytes, offset: int = 0) -> tuple[int, int]:
        return struct.unpack_from('>I', data, offset)[0], offset + 4


class DictMixin:
    """Implement the dict API using keys() and __*item__ methods.

    Similar to UserDict.DictMixin, this takes a class that defines
    __getitem__, __setitem__, __delitem__, and keys(), and turns it
    into a full dict-like object.

    This class is not optimized for very large dictionaries; many
    functions have linear memory requirements. I recommend you
    override some of these functions if speed is required.
    """

    def __iter__(self):
        return iter(self.keys())

    def __has_key(self, key):
        try:
            self[key]
        except KeyError:
            return False
        else:
            return True

    __contains__ = __has_key

    def values(self):
        return [self[k] for k in self.keys()]

    def items(self):
        return list(zip(self.keys(), self.values()))

    def clear(self):
        for key in list(self.keys()):
            self.__delitem__(key)

    def pop(self, key, *args):
        if len(args) > 1:
            raise TypeError("pop takes at most two arguments")
        try:
            value = self[key]
        except KeyError:
            if args:
                return args[0]
            else:
                raise
        del self[key]
        return value

    def update(self, other=None, **kwargs):
        if other is None:
            self.update(kwargs)
            other = {}

        try:
            for key, value in other.items():
                self.__setitem__(key, value)
        except AttributeError:
            for key, value in other:
                self[key] = value

    def setdefault(self, key, default=None):
        try:
            return self[key]
        except KeyError:
            self[key] = default
            return default

    def get(self, key, default=None):
        try:
            return self[key]
        except KeyError:
            return default

    def __repr__(self):
        return repr(dict(self.items()))

    def __eq__(self, other):
        return dict(self.items()) == other

    __hash__ = object.__hash__

    def __len__(self):
        return len(self.keys())


def get_size(fileobj: BytesIO) -> int:
    """Returns the size of the file.
    The position when passed in will be preserved if no error occurs.

    Args:
        fileobj (fileobj)
    Returns:
        int: The size of the file
    Raises:
        IOError
    """

    old_pos = fileobj.tell()
    try:
        fileobj.seek(0, 2)
        return fileobj.tell()
    finally:
        fileobj.seek(old_pos, 0)


def iter_chunks(fileobj: BytesIO, offset: int,
                BUFFER_SIZE: int = 2 ** 16) -> Iterator[bytes]:
    """Yields the content of fileobj from offset up to the end in chunks
    of at most BUFFER_SIZE bytes.
    """

    fileobj.seek(offset, 0)
    while True:
        buf = fileobj.read(BUFFER_SIZE)
        if not buf:
            break
        yield buf


def overwrite_bytes(fileobj: BytesIO, data: bytes, offset: int) -> None:
    """Write data over the existing content at offset.

    The file size and identity stay the same as long as the data
    doesn't reach past the end of the file.
    """

    fileobj.seek(offset, 0)
    fileobj.write(data)
    fileobj.flush()


def rewrite_file(filething: FileThing, head: bytes, offset: int) -> None:
    """Replace everything in front of `offset` with `head`, keeping all
    data from `offset` to the end of the file untouched.

    For files with a name the new content is staged in a temporary file
    next to the original which then atomically replaces it, so a failure
    half way leaves the original intact. The file gets a new identity
    and the file object in `filething` still points to the old content,
    the caller is expected to reopen it.

    File objects without a name are staged in memory and then rewritten
    from the start.
    """

    fileobj = filething.fileobj

    if filething.filename is None:
        data = b"".join([head] + list(iter_chunks(fileobj, offset)))
        fileobj.seek(0, 0)
        fileobj.write(data)
        fileobj.truncate()
        fileobj.flush()
        return

    filename = os.fspath(filething.filename)
    dirname = os.path.dirname(os.path.abspath(filename))
    fd, temp = tempfile.mkstemp(
        prefix=".%s." % os.path.basename(filename), dir=dirname)
    try:
        with os.fdopen(fd, "wb") as out:
            out.write(head)
            for buf in iter_chunks(fileobj, offset):
                out.write(buf)
            out.flush()
            os.fsync(out.fileno())
        shutil.copymode(filename, temp)
        os.replace(temp, filename)
    except BaseException:
        try:
            os.unlink(temp)
        except OSError:
            pass
        raise

    logger.debug("rebuilt %r: %d header bytes, tail from offset %d",
                 filename, len(head), offset)


def encode_endian(text: str, encoding: str, errors: str = "strict",
                  le: bool = True) -> bytes:
    """Like text.encode(encoding) but always returns little endian/big endian
    BOMs instead of the system one.

    Args:
        text (text)
        encoding (str)
        errors (str)
        le (boolean): if little endian
    Returns:
        bytes
    Raises:
        UnicodeEncodeError
        LookupError
    """

    encoding = codecs.lookup(encoding).name

    if encoding == "utf-16":
        if le:
            return codecs.BOM_UTF16_LE + text.encode("utf-16-le", errors)
        else:
            return codecs.BOM_UTF16_BE + text.encode("utf-16-be", errors)
    else:
        return text.encode(encoding, errors)


def find_terminator(data: bytes, term: bytes) -> int:
    """Returns the index of the first NULL terminator in data, only
    looking at offsets aligned to the terminator width, or -1.
    """

    width = len(term)
    index = data.find(term)
    while index != -1 and index % width:
        index = data.find(term, index + 1)
    return index
