"""Tests for aquos_tv.protocol.reply: reply classification and framing."""
from aquos_tv import AquosReply, ReplyKind
from aquos_tv.protocol import ReplyFramer, classify_reply


class TestClassification:
    def test_ok_is_success(self):
        reply = AquosReply(b"OK\r")
        assert reply.kind == ReplyKind.SUCCESS
        assert reply.text == "OK"
        assert not reply.is_error

    def test_value_is_success(self):
        assert AquosReply(b"25\r").text == "25"
        assert classify_reply("25") == ReplyKind.SUCCESS

    def test_err_is_error(self):
        assert AquosReply(b"ERR\r").is_error
        assert classify_reply("xERRx") == ReplyKind.ERROR

    def test_undecodable_bytes_are_replaced(self):
        reply = AquosReply(b"\xff1\r")
        assert reply.text.endswith("1")
        assert reply.kind == ReplyKind.SUCCESS


class TestReplyFramer:
    def test_split_reply_is_reassembled(self):
        framer = ReplyFramer()
        assert framer.feed(b"2") == []
        assert framer.partial_data == b"2"
        assert framer.feed(b"5\r") == [b"25"]
        assert framer.partial_data == b""

    def test_several_replies_in_one_chunk(self):
        framer = ReplyFramer()
        assert framer.feed(b"OK\r25\rERR") == [b"OK", b"25"]
        assert framer.feed(b"\r") == [b"ERR"]

    def test_crlf_and_empty_lines_dropped(self):
        framer = ReplyFramer()
        assert framer.feed(b"\r\nOK\r\n\r") == [b"OK"]

    def test_clear(self):
        framer = ReplyFramer()
        framer.feed(b"partial")
        framer.clear()
        assert framer.feed(b"OK\r") == [b"OK"]
