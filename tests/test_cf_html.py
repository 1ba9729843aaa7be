from cliphistory.clipboard.cf_html import build_cf_html, parse_cf_html


def test_built_document_points_at_the_fragment():
    fragment = "<b>héllo</b>".encode("utf-8")
    raw = build_cf_html(fragment)

    assert raw.startswith(b"Version:0.9\r\nStartHTML:")
    assert parse_cf_html(raw) == fragment


def test_offsets_are_byte_offsets():
    raw = build_cf_html(b"<i>x</i>")
    header = dict(
        line.split(":", 1) for line in raw.split(b"<html>")[0].decode("ascii").splitlines())

    start, end = int(header["StartFragment"]), int(header["EndFragment"])
    assert raw[start:end] == b"<i>x</i>"
    assert int(header["EndHTML"]) == len(raw)


def test_trailing_nul_bytes_are_ignored():
    assert parse_cf_html(build_cf_html(b"<p>x</p>") + b"\x00\x00") == b"<p>x</p>"


def test_payload_without_header_is_returned_as_is():
    assert parse_cf_html(b"<p>no header</p>") == b"<p>no header</p>"


def test_bad_offsets_fall_back_to_whole_payload():
    raw = b"Version:0.9\r\nStartFragment:0000009999\r\nEndFragment:0000010000\r\n<p>x</p>"
    assert parse_cf_html(raw) == raw
