from mpegtag.id3 import Encoding, convert
from mpegtag.id3._specs import SpecError, EncodingSpec, StringSpec, \
    EncodedTextSpec, EncodedTrailingTextSpec, Latin1TextSpec, \
    BinaryDataSpec, decode_text, encode_text, pick_encoding, is_latin1
from tests import TestCase


class SpecSanityChecks(TestCase):

    def test_encodingspec(self):
        s = EncodingSpec('name')
        self.assertEqual((3, b'abcdefg'), s.read({}, b'\x03abcdefg'))
        self.assertRaises(SpecError, s.read, {}, b'\x04abcdefg')
        self.assertRaises(SpecError, s.read, {}, b'')
        self.assertEqual(b'\x00', s.write({}, Encoding.LATIN1))

    def test_stringspec(self):
        s = StringSpec('name', 3)
        self.assertEqual(('abc', b'defg'), s.read({}, b'abcdefg'))
        self.assertRaises(SpecError, s.read, {}, b'ab')
        self.assertEqual(b'ab\x00', s.write({}, 'ab'))
        self.assertEqual(b'abc', s.write({}, 'abcd'))
        self.assertEqual(s.default, '   ')

    def test_encodedtextspec(self):
        s = EncodedTextSpec('name')
        record = {"encoding": Encoding.LATIN1}
        self.assertEqual(('abcd', b'fg'), s.read(record, b'abcd\x00fg'))
        self.assertEqual(b'abcdefg\x00', s.write(record, 'abcdefg'))

        record = {"encoding": Encoding.UTF8}
        self.assertEqual(('\xe4', b''), s.read(record, b'\xc3\xa4\x00'))

    def test_encodedtextspec_missing_terminator(self):
        s = EncodedTextSpec('name')
        self.assertEqual(
            ('abc', b''), s.read({"encoding": Encoding.LATIN1}, b'abc'))

    def test_encodedtextspec_utf16_alignment(self):
        s = EncodedTextSpec('name')
        record = {"encoding": Encoding.UTF16}
        # "a" ends and "Ā" starts with a zero byte
        data = b"\xff\xfea\x00\x00\x01\x00\x00rest"
        self.assertEqual(("aĀ", b"rest"), s.read(record, data))

    def test_trailing(self):
        s = EncodedTrailingTextSpec('name')
        record = {"encoding": Encoding.LATIN1}
        self.assertEqual(('abc', b''), s.read(record, b'abc\x00\x00'))
        self.assertEqual(b'abc', s.write(record, 'abc'))

    def test_latin1(self):
        s = Latin1TextSpec('name')
        self.assertEqual(('http://a', b''), s.read({}, b'http://a\x00'))
        self.assertEqual(b'\xe4', s.write({}, '\xe4'))

    def test_binarydataspec(self):
        s = BinaryDataSpec('name')
        self.assertEqual((b'abc', b''), s.read({}, b'abc'))
        self.assertEqual(b'abc', s.write({}, b'abc'))
        self.assertEqual(b'\xc3\xa4', s.write({}, '\xe4'))
        self.assertEqual(b'\x01', s.write({}, [1]))

    def test_unhashable(self):
        self.assertRaises(TypeError, hash, BinaryDataSpec('name'))


class Ttext(TestCase):

    def test_decode_utf16(self):
        self.assertEqual(decode_text(b'\xff\xfea\x00', 'utf16'), 'a')
        self.assertEqual(decode_text(b'\xfe\xff\x00a', 'utf-16'), 'a')
        self.assertEqual(decode_text(b'a\x00', 'utf16'), 'a')

    def test_decode_never_fails(self):
        self.assertEqual(decode_text(b'a\xffb', 'utf-8'), 'ab')
        self.assertEqual(decode_text(b'a\x00b', 'utf-16'), 'a')

    def test_encode(self):
        self.assertEqual(encode_text('a', 'utf16'), b'\xff\xfea\x00')
        self.assertEqual(encode_text('aĀ', 'latin1'), b'a')

    def test_pick_encoding(self):
        self.assertEqual(pick_encoding('abc', '\xe4'), Encoding.LATIN1)
        self.assertEqual(pick_encoding('abc', 'Ā'), Encoding.UTF16)
        self.assertEqual(pick_encoding(), Encoding.LATIN1)
        self.assertTrue(is_latin1('\xff'))
        self.assertFalse(is_latin1('Ā'))


class Tconvert(TestCase):

    def test_latin1_to_utf8(self):
        self.assertEqual(convert(b'\xe4', 'latin1', 'utf-8'), b'\xc3\xa4')

    def test_utf8_to_latin1(self):
        self.assertEqual(convert(b'\xc3\xa4', 'utf-8', 'latin1'), b'\xe4')

    def test_lossy(self):
        self.assertEqual(
            convert('aĀ'.encode('utf-8'), 'utf-8', 'latin1'), b'a')

    def test_to_utf16(self):
        self.assertEqual(
            convert(b'a', 'latin1', 'utf-16'), b'\xff\xfea\x00')
