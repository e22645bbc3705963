from hypothesis import given, strategies as st

from mpegtag.id3 import BitPaddedInt, unsynch, resync, ID3BadUnsynchData, \
    decode_syncsafe, encode_syncsafe, decode_be32, encode_be32
from mpegtag.id3._util import is_valid_frame_id, SYNCSAFE_MAX
from tests import TestCase


class BitPaddedIntTest(TestCase):

    def test_long(self):
        if BitPaddedInt(b"\x00\x00\x00\x01", 7) != 1:
            raise AssertionError
        self.assertEqual(BitPaddedInt(b"\x00\x00\x01\x7f"), 255)
        self.assertEqual(BitPaddedInt(b"\x7f\x7f\x7f\x7f"), SYNCSAFE_MAX)

    def test_zero(self):
        self.assertEqual(BitPaddedInt(b'\x00\x00\x00\x00'), 0)

    def test_s0(self):
        self.assertEqual(BitPaddedInt.to_str(0), b'\x00\x00\x00\x00')

    def test_s1(self):
        self.assertEqual(BitPaddedInt.to_str(1), b'\x00\x00\x00\x01')

    def test_s127(self):
        self.assertEqual(BitPaddedInt.to_str(127), b'\x00\x00\x00\x7f')

    def test_s128(self):
        self.assertEqual(BitPaddedInt.to_str(128), b'\x00\x00\x01\x00')

    def test_s_too_wide(self):
        self.assertRaises(
            ValueError, BitPaddedInt.to_str, SYNCSAFE_MAX + 1, width=4)

    def test_s_growing(self):
        self.assertEqual(
            BitPaddedInt.to_str(2 ** 35, width=-1), b"\x01" + b"\x00" * 5)

    def test_8bit(self):
        self.assertEqual(BitPaddedInt(b"\x00\x00\x01\x00", bits=8), 256)

    def test_negative(self):
        self.assertRaises(ValueError, BitPaddedInt, -1)

    def test_bad_type(self):
        self.assertRaises(TypeError, BitPaddedInt, 1.5)


class TSyncsafe(TestCase):

    def test_known(self):
        self.assertEqual(decode_syncsafe(b"\x00\x00\x02\x01"), 257)
        self.assertEqual(encode_syncsafe(257), b"\x00\x00\x02\x01")

    def test_high_bit_ignored(self):
        self.assertEqual(decode_syncsafe(b"\x80\x80\x80\x81"), 1)

    def test_range(self):
        self.assertEqual(encode_syncsafe(SYNCSAFE_MAX), b"\x7f" * 4)
        self.assertRaises(ValueError, encode_syncsafe, SYNCSAFE_MAX + 1)
        self.assertRaises(ValueError, encode_syncsafe, -1)

    @given(st.integers(min_value=0, max_value=SYNCSAFE_MAX))
    def test_encoded_bytes_are_syncsafe(self, value):
        data = encode_syncsafe(value)
        self.assertTrue(all(b < 0x80 for b in data))
        self.assertEqual(decode_syncsafe(data), value)

    def test_be32(self):
        self.assertEqual(decode_be32(b"\x00\x00\x01\x00"), 256)
        self.assertEqual(encode_be32(0xfffb9164), b"\xff\xfb\x91\x64")


class TestUnsynch(TestCase):

    def test_unsync_encode_decode(self):
        pairs = [
            (b'', b''),
            (b'\x00', b'\x00'),
            (b'\x44', b'\x44'),
            (b'\x44\xff', b'\x44\xff\x00'),
            (b'\xe0', b'\xe0'),
            (b'\xe0\xe0', b'\xe0\xe0'),
            (b'\xe0\xff', b'\xe0\xff\x00'),
            (b'\xff', b'\xff\x00'),
            (b'\xff\x00', b'\xff\x00\x00'),
            (b'\xff\x00\x00', b'\xff\x00\x00\x00'),
            (b'\xff\x01', b'\xff\x01'),
            (b'\xff\x44', b'\xff\x44'),
            (b'\xff\xe0', b'\xff\x00\xe0'),
            (b'\xff\xe0\xff', b'\xff\x00\xe0\xff\x00'),
            (b'\xff\xf0\x0f\x00', b'\xff\x00\xf0\x0f\x00'),
            (b'\xff\xff', b'\xff\x00\xff\x00'),
            (b'\xff\xff\x01', b'\xff\x00\xff\x01'),
            (b'\xff\xff\xff\xff', b'\xff\x00\xff\x00\xff\x00\xff\x00'),
        ]

        for d, e in pairs:
            self.assertEqual(unsynch.encode(d), e)
            self.assertEqual(unsynch.decode(e), d)
            self.assertEqual(unsynch.decode(unsynch.encode(e)), e)
            self.assertEqual(
                unsynch.decode(unsynch.encode(e + e)), e + e)

    def test_unsync_decode_invalid(self):
        self.assertRaises(ID3BadUnsynchData, unsynch.decode, b'\xff\xff\xff')
        self.assertRaises(ID3BadUnsynchData, unsynch.decode, b'\xff\xf0\x0f')
        self.assertRaises(ID3BadUnsynchData, unsynch.decode, b'\xff\xe0')
        self.assertRaises(ID3BadUnsynchData, unsynch.decode, b'\xff')

    @given(st.binary())
    def test_encode_has_no_false_sync(self, data):
        encoded = unsynch.encode(data)
        for i in range(len(encoded) - 1):
            if encoded[i] == 0xff:
                self.assertTrue(encoded[i + 1] < 0xe0)
        self.assertEqual(unsynch.decode(encoded), data)


class Tresync(TestCase):

    def test_resync(self):
        self.assertEqual(resync(b"\xff\x00\xfb"), b"\xff\xfb")
        self.assertEqual(resync(b"a\xff\x00\x00b"), b"a\xff\x00b")

    def test_lenient(self):
        # unsynch.decode would refuse these
        self.assertEqual(resync(b"\xff\xff\xff"), b"\xff\xff\xff")
        self.assertEqual(resync(b"\xff"), b"\xff")

    def test_single_pass(self):
        self.assertEqual(resync(b"\xff\x00\x00\x00"), b"\xff\x00\x00")


class Tis_valid_frame_id(TestCase):

    def test_valid(self):
        for frame_id in ["TIT2", "TT2", "APIC", "TYE", "RVA2", b"TIT2"]:
            self.assertTrue(is_valid_frame_id(frame_id), frame_id)

    def test_invalid(self):
        for frame_id in ["tit2", "TI", "TIT22", "", "TI T", b"\x00\x00\x00",
                         "TÄT2", b"TIT\x00"]:
            self.assertFalse(is_valid_frame_id(frame_id), frame_id)
