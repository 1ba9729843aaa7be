"""Windows "HTML Format" clipboard framing.

The registered format carries an ASCII header with byte offsets into the
UTF-8 document that follows it. Only the fragment between the
``StartFragment``/``EndFragment`` markers is what the user copied.
"""

import re
from typing import Dict

_HEADER = (
    "Version:0.9\r\n"
    "StartHTML:{start_html:010d}\r\n"
    "EndHTML:{end_html:010d}\r\n"
    "StartFragment:{start_fragment:010d}\r\n"
    "EndFragment:{end_fragment:010d}\r\n"
)
_PREFIX = b"<html><body>\r\n<!--StartFragment-->"
_SUFFIX = b"<!--EndFragment-->\r\n</body></html>"
_FIELD = re.compile(rb"^(Version|StartHTML|EndHTML|StartFragment|EndFragment):(-?[\d.]+)\s*$", re.M)


def build_cf_html(fragment: bytes) -> bytes:
    header_len = len(_HEADER.format(start_html=0, end_html=0, start_fragment=0, end_fragment=0))
    start_html = header_len
    start_fragment = start_html + len(_PREFIX)
    end_fragment = start_fragment + len(fragment)
    end_html = end_fragment + len(_SUFFIX)
    header = _HEADER.format(
        start_html=start_html,
        end_html=end_html,
        start_fragment=start_fragment,
        end_fragment=end_fragment,
    ).encode("ascii")
    return header + _PREFIX + fragment + _SUFFIX


def parse_cf_html(raw: bytes) -> bytes:
    """Return the copied fragment, or the whole payload if it has no usable header."""
    raw = raw.rstrip(b"\x00")
    fields: Dict[bytes, bytes] = dict(_FIELD.findall(raw[:512]))

    for start_key, end_key in ((b"StartFragment", b"EndFragment"), (b"StartHTML", b"EndHTML")):
        try:
            start = int(fields[start_key])
            end = int(fields[end_key])
        except (KeyError, ValueError):
            continue
        if 0 <= start < end <= len(raw):
            return raw[start:end]
    return raw
