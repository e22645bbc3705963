import contextlib
import os
import re
import struct
import sys
from io import StringIO
from tempfile import mkstemp
from unittest import TestCase as BaseTestCase

try:
    import pytest
except ImportError:
    raise SystemExit("pytest missing: pip install pytest")


def get_temp_empty(ext=""):
    """Returns an empty file with the extension"""

    fd, filename = mkstemp(suffix=ext)
    os.close(fd)
    return filename


def get_temp_file(data, ext=".mp3"):
    """Returns a new file with data as content"""

    filename = get_temp_empty(ext)
    with open(filename, "wb") as h:
        h.write(data)
    return filename


def read_file(filename):
    with open(filename, "rb") as h:
        return h.read()


@contextlib.contextmanager
def capture_output():
    """
    with capture_output() as (stdout, stderr):
        some_action()
    print stdout.getvalue(), stderr.getvalue()
    """

    err = StringIO()
    out = StringIO()
    old_err = sys.stderr
    old_out = sys.stdout
    sys.stderr = err
    sys.stdout = out

    try:
        yield (out, err)
    finally:
        sys.stderr = old_err
        sys.stdout = old_out


# MPEG-1 layer III, 128 kbps, 44100 Hz, joint stereo, no padding:
# 417 byte frames of 1152 samples
CBR_HEADER = b"\xff\xfb\x91\x64"
CBR_FRAME_SIZE = 417

# same, but 160 kbps: 522 byte frames
CBR160_HEADER = b"\xff\xfb\xa1\x64"
CBR160_FRAME_SIZE = 522


def mpeg_frame(header=CBR_HEADER, size=CBR_FRAME_SIZE, payload=b""):
    """A frame with a zeroed body, payload right after the header"""

    body = payload.ljust(size - len(header), b"\x00")
    return header + body


def cbr_stream(count=5):
    """count 128 kbps frames followed by 4 bytes of junk"""

    return mpeg_frame() * count + b"\x00" * 4


def xing_stream(frames=6669, size=None, tag=b"Xing", count=4):
    """A Xing header frame with frame and byte counts followed by plain
    frames.
    """

    flags = 0x3 if size is not None else 0x1
    payload = b"\x00" * 32 + tag + struct.pack(">I", flags)
    payload += struct.pack(">I", frames)
    if size is not None:
        payload += struct.pack(">I", size)
    return mpeg_frame(payload=payload) + mpeg_frame() * count


def vbri_stream(frames=1000, size=500000, count=4):
    payload = b"\x00" * 32 + b"VBRI" + struct.pack(
        ">HHHIIHHHH", 1, 0, 75, size, frames, 0, 0, 2, 0)
    return mpeg_frame(payload=payload) + mpeg_frame() * count


def vbr_stream():
    """128 and 160 kbps frames mixed, no summary header"""

    low = mpeg_frame()
    high = mpeg_frame(CBR160_HEADER, CBR160_FRAME_SIZE)
    return low * 3 + high * 2 + low + high


def id3v2_frame(frame_id, body, major=3, flags=0):
    """Frame header and body as found in a tag of the given version"""

    frame_id = frame_id.encode("ascii")
    if major == 2:
        return frame_id + struct.pack(">I", len(body))[1:] + body
    if major == 4:
        size = len(body)
        size = bytes([(size >> s) & 0x7f for s in (21, 14, 7, 0)])
    else:
        size = struct.pack(">I", len(body))
    return frame_id + size + struct.pack(">H", flags) + body


def id3v2_tag(frames=b"", major=3, flags=0, padding=0):
    """A complete ID3v2 tag around already serialized frames"""

    size = len(frames) + padding
    size = bytes([(size >> s) & 0x7f for s in (21, 14, 7, 0)])
    return (b"ID3" + bytes([major, 0, flags]) + size + frames +
            b"\x00" * padding)


def id3v1_tag(title=b"", artist=b"", album=b"", year=b"", comment=b"",
              track=None, genre=255):
    """A raw 128 byte ID3v1 tag, v1.1 if track is given"""

    if track is not None:
        comment = comment.ljust(28, b"\x00")[:28] + b"\x00" + bytes([track])
    return (b"TAG" + title.ljust(30, b"\x00") + artist.ljust(30, b"\x00") +
            album.ljust(30, b"\x00") + year.ljust(4, b"\x00") +
            comment.ljust(30, b"\x00") + bytes([genre]))


class TestCase(BaseTestCase):

    def failUnlessRaisesRegexp(self, exc, re_, fun, *args, **kwargs):
        def wrapped(*args, **kwargs):
            try:
                fun(*args, **kwargs)
            except Exception as e:
                self.failUnless(re.search(re_, str(e)))
                raise
        self.failUnlessRaises(exc, wrapped, *args, **kwargs)

    # silence deprec warnings about useless renames
    failUnless = BaseTestCase.assertTrue
    failIf = BaseTestCase.assertFalse
    failUnlessEqual = BaseTestCase.assertEqual
    failUnlessRaises = BaseTestCase.assertRaises
    failUnlessAlmostEqual = BaseTestCase.assertAlmostEqual
    failIfEqual = BaseTestCase.assertNotEqual

    def assertReallyEqual(self, a, b):
        self.assertEqual(a, b)
        self.assertEqual(b, a)
        self.assertTrue(a == b)
        self.assertTrue(b == a)
        self.assertFalse(a != b)
        self.assertFalse(b != a)

    def assertReallyNotEqual(self, a, b):
        self.assertNotEqual(a, b)
        self.assertNotEqual(b, a)
        self.assertFalse(a == b)
        self.assertFalse(b == a)
        self.assertTrue(a != b)
        self.assertTrue(b != a)


def unit(run=[], exitfirst=False):
    args = []

    if run:
        args.append("-k")
        args.append(" or ".join(run))

    if exitfirst:
        args.append("-x")

    args.append("tests")

    return pytest.main(args=args)
