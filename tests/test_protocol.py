from __future__ import annotations

import pytest

from myproto.protocol import (
    ErrorKind,
    Frame,
    NegotiationResponse,
    ProtocolError,
    encode_frame,
    encode_negotiation,
    encode_text_frame,
    encode_version_header,
    parse_frame_header,
    parse_negotiation_response,
    parse_version_header,
)


def test_version_header_parses_digits():
    header = parse_version_header(b"MYPROTO:VER:000042")
    assert header.version == 42


@pytest.mark.parametrize(
    "raw",
    [b"MYPROTO:VER:00000X", b"MYPROTX:VER:000001", b"myproto:ver:000001", b"MYPROTO:VER:-00001"],
)
def test_version_header_violations(raw):
    with pytest.raises(ProtocolError) as info:
        parse_version_header(raw)
    assert info.value.kind is ErrorKind.MALFORMED_HEADER


def test_negotiation_response_literals():
    assert parse_negotiation_response(b"ACCEPT") is NegotiationResponse.ACCEPT
    assert parse_negotiation_response(b"REJECT") is NegotiationResponse.REJECT
    with pytest.raises(ProtocolError):
        parse_negotiation_response(b"accept")


def test_frame_header_accepts_any_ascii_type():
    assert parse_frame_header(b"S:00005:") == ("S", 5)
    assert parse_frame_header(b"#:00000:") == ("#", 0)
    assert parse_frame_header(b"::12345:") == (":", 12345)


def test_frame_header_separator_errors():
    with pytest.raises(ProtocolError) as info:
        parse_frame_header(b"S-00005:")
    assert info.value.kind is ErrorKind.MALFORMED_HEADER
    with pytest.raises(ProtocolError) as info:
        parse_frame_header(b"S:000051")
    assert info.value.kind is ErrorKind.MALFORMED_HEADER


def test_frame_header_length_errors():
    with pytest.raises(ProtocolError) as info:
        parse_frame_header(b"S:0a005:")
    assert info.value.kind is ErrorKind.MALFORMED_LENGTH


def test_frame_header_rejects_non_ascii_type():
    with pytest.raises(ProtocolError):
        parse_frame_header(b"\xff:00001:")


def test_encoders_produce_wire_tokens():
    assert encode_version_header(1) == b"MYPROTO:VER:000001"
    assert encode_negotiation(True) == b"ACCEPT"
    assert encode_negotiation(False) == b"REJECT"
    assert encode_frame("I", b"\x00\x01\x02") == b"I:00003:\x00\x01\x02"
    assert encode_text_frame("hi") == b"S:00002:hi"


def test_encoders_validate_arguments():
    with pytest.raises(ProtocolError):
        encode_version_header(1_000_000)
    with pytest.raises(ProtocolError) as info:
        encode_frame("S", b"x" * 100_000)
    assert info.value.kind is ErrorKind.MALFORMED_LENGTH
    with pytest.raises(ProtocolError):
        encode_frame("SS", b"")
    with pytest.raises(ProtocolError):
        encode_text_frame("café")


def test_frame_model():
    frame = Frame(type="S", body=b"hello")
    assert frame.length == 5
    assert frame.text == "hello"
    assert frame == Frame(type="S", body=b"hello")
