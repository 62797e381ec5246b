"""Tests for the document buffer: loading, saving, editing and search."""

import os
import tempfile
import unittest

import pytest

from tilde.buffer import Buffer, FileInfo, NoFileNameError, split_lines
from tilde.line import Line
from tilde.location import Location


FIXTURE = (
    "0_234567890\n"
    "foo345foo90\n"
    "2_234567890\n"
    "3_234567890\n"
    "4_2foo67890\n"
    "5_234567890\n"
    "6_234567foo\n"
    "7_234barfoo\n"
    "8_234567890\n"
    "9_234567890\n"
)


@pytest.fixture
def buffer():
    return Buffer.from_text(FIXTURE)


def texts(buffer):
    return [line.text for line in buffer.lines]


def test_split_lines():
    assert split_lines("") == []
    assert split_lines("a") == ["a"]
    assert split_lines("a\n") == ["a"]
    assert split_lines("a\r\nb\r\n") == ["a", "b"]
    assert split_lines("a\n\nb") == ["a", "", "b"]


def test_file_info_display_name():
    assert str(FileInfo()) == "[No Name]"
    assert str(FileInfo("/tmp/notes.txt")) == "notes.txt"
    assert not FileInfo().has_path()


def test_new_buffer_is_empty():
    buffer = Buffer()
    assert buffer.is_empty()
    assert buffer.height == 0
    assert not buffer.dirty
    assert not buffer.is_file_loaded()
    assert buffer.line(0) is None


def test_search_forward_within_line():
    buffer = Buffer.from_text("foo345foo90")
    assert buffer.search_forward("foo", Location(0, 1)) == Location(0, 6)


def test_search_from_beginning(buffer):
    assert buffer.search_forward("foo", Location(0, 0)) == Location(1, 0)


def test_search_for_next(buffer):
    assert buffer.search_forward("foo", Location(1, 1)) == Location(1, 6)


def test_search_for_next_at_end_of_line(buffer):
    assert buffer.search_forward("foo", Location(6, 11)) == Location(7, 8)


def test_search_from_middle(buffer):
    assert buffer.search_forward("foo", Location(3, 9)) == Location(4, 3)


def test_search_forward_does_not_wrap(buffer):
    assert buffer.search_forward("foo", Location(8, 0)) is None
    assert buffer.search_forward("", Location(0, 0)) is None


def test_search_backward(buffer):
    assert buffer.search_backward("foo", Location(7, 8)) == Location(6, 8)
    assert buffer.search_backward("foo", Location(4, 3)) == Location(1, 6)
    assert buffer.search_backward("foo", Location(1, 0)) is None
    assert buffer.search_backward("", Location(5, 0)) is None


def test_search_backward_from_below_last_line(buffer):
    assert buffer.search_backward("foo", Location(10, 0)) == Location(7, 8)


def test_backward_search_finds_forward_match_again(buffer):
    start = Location(2, 0)
    found = buffer.search_forward("foo", start)
    advanced = Location(found.line_idx, found.grapheme_idx + len("foo"))
    back = buffer.search_backward("foo", advanced)
    assert back is not None
    assert back == found


def test_insert_char():
    buffer = Buffer.from_text("ac")
    buffer.insert_char("b", Location(0, 1))
    assert texts(buffer) == ["abc"]
    assert buffer.dirty


def test_insert_char_below_last_line_adds_line():
    buffer = Buffer()
    buffer.insert_char("x", Location(0, 0))
    assert texts(buffer) == ["x"]
    assert buffer.dirty


def test_insert_newline_splits_line():
    buffer = Buffer.from_text("hello world")
    buffer.insert_newline(Location(0, 5))
    assert texts(buffer) == ["hello", " world"]
    assert buffer.dirty


def test_insert_newline_below_last_line_appends_empty_line():
    buffer = Buffer.from_text("a")
    buffer.insert_newline(Location(1, 0))
    assert texts(buffer) == ["a", ""]


def test_delete_grapheme():
    buffer = Buffer.from_text("a老b")
    buffer.delete(Location(0, 1))
    assert texts(buffer) == ["ab"]
    assert buffer.dirty


def test_delete_at_end_of_line_joins_next_line():
    buffer = Buffer.from_text("ab\ncd\nef")
    buffer.delete(Location(0, 2))
    assert texts(buffer) == ["abcd", "ef"]
    assert buffer.dirty


def test_delete_at_end_of_buffer_is_noop():
    buffer = Buffer.from_text("ab")
    buffer.delete(Location(0, 2))
    buffer.delete(Location(5, 0))
    assert texts(buffer) == ["ab"]
    assert not buffer.dirty


class TestBufferFiles(unittest.TestCase):
    """Loading and saving through the file system."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.dir = self.temp_dir.name

    def tearDown(self):
        self.temp_dir.cleanup()

    def path(self, name):
        return os.path.join(self.dir, name)

    def test_load_existing_file(self):
        path = self.path("doc.txt")
        with open(path, "w", encoding="utf-8") as f:
            f.write("first\nsecond 老虎\n")

        buffer = Buffer.load(path)
        self.assertEqual(texts(buffer), ["first", "second 老虎"])
        self.assertFalse(buffer.dirty)
        self.assertTrue(buffer.is_file_loaded())
        self.assertEqual(buffer.file_info.path, path)

    def test_load_crlf_file(self):
        path = self.path("dos.txt")
        with open(path, "wb") as f:
            f.write(b"a\r\nb\r\n")
        self.assertEqual(texts(Buffer.load(path)), ["a", "b"])

    def test_load_missing_file_starts_new_file(self):
        path = self.path("missing.txt")
        with self.assertLogs("tilde.buffer", level="WARNING"):
            buffer = Buffer.load(path)

        self.assertEqual(buffer.height, 1)
        self.assertEqual(buffer.lines[0], Line(""))
        self.assertTrue(buffer.dirty)
        self.assertTrue(buffer.is_file_loaded())
        self.assertEqual(buffer.file_info.path, path)

    def test_load_empty_path(self):
        buffer = Buffer.load("")
        self.assertEqual(texts(buffer), [""])
        self.assertTrue(buffer.dirty)
        self.assertTrue(buffer.is_file_loaded())

    def test_save_round_trip(self):
        path = self.path("round.txt")
        original = Buffer.from_text("alpha\n\tbeta\n老虎 tiger\n")
        original.save_as(path)
        self.assertFalse(original.dirty)

        loaded = Buffer.load(path)
        self.assertEqual(texts(loaded), texts(original))
        self.assertFalse(loaded.dirty)

    def test_save_terminates_every_line(self):
        path = self.path("out.txt")
        Buffer.from_text("a\nb").save_as(path)
        with open(path, "rb") as f:
            self.assertEqual(f.read(), b"a\nb\n")

    def test_save_writes_to_associated_file(self):
        path = self.path("assoc.txt")
        buffer = Buffer.load(path)
        buffer.insert_char("x", Location(0, 0))
        buffer.save()
        self.assertFalse(buffer.dirty)
        with open(path, encoding="utf-8") as f:
            self.assertEqual(f.read(), "x\n")

    def test_save_as_sets_association(self):
        path = self.path("named.txt")
        buffer = Buffer.from_text("text")
        buffer.dirty = True
        buffer.save_as(path)
        self.assertEqual(buffer.file_info.path, path)
        self.assertFalse(buffer.dirty)

    def test_save_without_name_raises(self):
        with self.assertRaises(NoFileNameError):
            Buffer.from_text("text").save()

    def test_failed_save_leaves_buffer_unchanged(self):
        path = os.path.join(self.dir, "no_such_dir", "doc.txt")
        buffer = Buffer.from_text("text")
        buffer.dirty = True

        with self.assertLogs("tilde.buffer", level="ERROR"):
            with self.assertRaises(OSError):
                buffer.save_as(path)

        self.assertTrue(buffer.dirty)
        self.assertIsNone(buffer.file_info.path)
        self.assertEqual(texts(buffer), ["text"])

    def test_save_leaves_no_temporary_files(self):
        path = self.path("clean.txt")
        Buffer.from_text("a").save_as(path)
        self.assertEqual(os.listdir(self.dir), ["clean.txt"])

    def test_save_keeps_file_mode(self):
        path = self.path("mode.txt")
        with open(path, "w", encoding="utf-8") as f:
            f.write("old\n")
        os.chmod(path, 0o640)

        Buffer.from_text("new").save_as(path)
        self.assertEqual(os.stat(path).st_mode & 0o777, 0o640)
