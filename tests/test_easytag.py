from io import BytesIO

from mpegtag.easytag import UniversalTag
from mpegtag.id3 import ID3, ID3Tags, ID3v1
from tests import TestCase, id3v2_frame, id3v2_tag


def _tag2(frames, major=3):
    return ID3(BytesIO(id3v2_tag(frames, major=major)))


class TUniversalTag(TestCase):

    def test_empty(self):
        tag = UniversalTag(ID3v1(), ID3Tags())
        self.assertEqual(tag.keys(), [])
        self.assertIsNone(tag.title)
        self.assertFalse(tag.changed)

    def test_v1_only(self):
        tag1 = ID3v1({"title": "a", "year": 2001, "tracknum": 2, "genre": 8})
        tag = UniversalTag(tag1, ID3Tags())
        self.assertEqual(tag["title"], "a")
        self.assertEqual(tag.year, 2001)
        self.assertEqual(tag.tracknum, 2)
        self.assertEqual(tag.genre, 8)
        self.assertEqual(tag.genre_s, "Jazz")

    def test_v2_wins(self):
        tag1 = ID3v1({"title": "old", "artist": "v1 artist"})
        tag2 = _tag2(id3v2_frame("TIT2", b"\x00new"))
        tag = UniversalTag(tag1, tag2)
        self.assertEqual(tag.title, "new")
        self.assertEqual(tag.artist, "v1 artist")

    def test_numbers(self):
        tag2 = _tag2(
            id3v2_frame("TRCK", b"\x001/17") +
            id3v2_frame("TYER", b"\x001999"))
        tag = UniversalTag(ID3v1(), tag2)
        self.assertEqual(tag.tracknum, 1)
        self.assertEqual(tag.year, 1999)

    def test_bad_number_ignored(self):
        tag1 = ID3v1({"tracknum": 4})
        tag2 = _tag2(id3v2_frame("TRCK", b"\x00x"))
        tag = UniversalTag(tag1, tag2)
        self.assertEqual(tag.tracknum, 4)

    def test_genre_reference(self):
        tag2 = _tag2(id3v2_frame("TCON", b"\x00(17)"))
        tag = UniversalTag(ID3v1(), tag2)
        self.assertEqual(tag.genre_s, "Rock")
        self.assertEqual(tag.genre, 17)

    def test_genre_number_and_refinement(self):
        tag = UniversalTag(ID3v1(), _tag2(id3v2_frame("TCON", b"\x0013")))
        self.assertEqual(tag.genre_s, "Pop")
        tag = UniversalTag(
            ID3v1(), _tag2(id3v2_frame("TCON", b"\x00(17)Nerdcore")))
        self.assertEqual(tag.genre_s, "Nerdcore")
        self.assertNotIn("genre", tag)

    def test_custom_genre_drops_v1_number(self):
        tag1 = ID3v1({"genre": 17})
        tag2 = _tag2(id3v2_frame("TCON", b"\x00Chiptune"))
        tag = UniversalTag(tag1, tag2)
        self.assertEqual(tag.genre_s, "Chiptune")
        self.assertNotIn("genre", tag)

    def test_zero_and_empty_omitted(self):
        tag1 = ID3v1({"title": "", "tracknum": 0, "year": 0})
        tag2 = _tag2(id3v2_frame("TALB", b"\x00"))
        tag = UniversalTag(tag1, tag2)
        self.assertEqual(tag.keys(), [])

    def test_v22_ids(self):
        frames = (id3v2_frame("TT2", b"\x00a", major=2) +
                  id3v2_frame("TYE", b"\x002002", major=2))
        tag2 = _tag2(frames, major=2)
        tag = UniversalTag(ID3v1(), tag2)
        self.assertEqual(tag.frame_ids()["title"], "TT2")
        self.assertEqual(tag.title, "a")
        self.assertEqual(tag.year, 2002)

    def test_v24_year(self):
        tag2 = _tag2(id3v2_frame("TDRC", b"\x002006-05-01", major=4),
                     major=4)
        tag = UniversalTag(ID3v1(), tag2)
        self.assertEqual(tag.frame_ids()["year"], "TDRC")
        self.assertEqual(tag.year, 2006)

    def test_comment(self):
        tag2 = _tag2(id3v2_frame("COMM", b"\x00eng\x00hello"))
        tag = UniversalTag(ID3v1(), tag2)
        self.assertEqual(tag.comments, "hello")

    def test_set_pending(self):
        tag1 = ID3v1({"title": "a"})
        tag = UniversalTag(tag1, ID3Tags())
        tag.title = "b"
        self.assertEqual(tag.title, "b")
        self.assertTrue(tag.changed)
        # nothing reaches the tags before apply()
        self.assertEqual(tag1["title"], "a")

    def test_apply(self):
        tag1 = ID3v1()
        tag2 = ID3Tags()
        tag = UniversalTag(tag1, tag2)
        tag.title = "t"
        tag.year = "2004"
        tag.tracknum = 3
        tag.genre = 17
        tag.apply()
        self.assertFalse(tag.changed)
        self.assertEqual(tag1["title"], "t")
        self.assertEqual(tag1["year"], 2004)
        self.assertEqual(tag1["genre_s"], "Rock")
        self.assertEqual(tag2["TIT2"], "t")
        self.assertEqual(tag2["TYER"], "2004")
        self.assertEqual(tag2["TRCK"], "3")
        self.assertEqual(tag2["TCON"], "Rock")

    def test_genre_links(self):
        tag = UniversalTag(ID3v1(), ID3Tags())
        tag.genre_s = "Jazz"
        self.assertEqual(tag.genre, 8)
        tag.genre = 13
        self.assertEqual(tag.genre_s, "Pop")
        tag.genre_s = "Chiptune"
        self.assertIsNone(tag.genre)

    def test_delete(self):
        tag1 = ID3v1({"title": "a"})
        tag2 = ID3Tags()
        tag2["TIT2"] = "a"
        tag = UniversalTag(tag1, tag2)
        del tag["title"]
        self.assertNotIn("title", tag)
        tag.apply()
        self.assertNotIn("title", tag1)
        self.assertNotIn("TIT2", tag2)
        self.assertRaises(KeyError, tag.__delitem__, "title")

    def test_unknown_key(self):
        tag = UniversalTag(ID3v1(), ID3Tags())
        self.assertRaises(KeyError, tag.__setitem__, "foo", "bar")
        self.assertRaises(AttributeError, setattr, tag, "foo", "bar")
        self.assertRaises(AttributeError, getattr, tag, "foo")

    def test_refresh_keeps_pending(self):
        tag1 = ID3v1({"title": "a", "artist": "b"})
        tag = UniversalTag(tag1, ID3Tags())
        tag.title = "c"
        tag1["artist"] = "d"
        tag.refresh()
        self.assertEqual(tag.title, "c")
        self.assertEqual(tag.artist, "d")

    def test_discarded_writes(self):
        tag1 = ID3v1()
        tag1._discard_writes = True
        tag = UniversalTag(tag1, ID3Tags())
        tag.title = "a"
        self.assertIsNone(tag.title)
        self.assertFalse(tag.changed)

    def test_pprint(self):
        tag = UniversalTag(ID3v1({"title": "a", "year": 1990}), ID3Tags())
        self.assertEqual(tag.pprint(), "title=a\nyear=1990")
