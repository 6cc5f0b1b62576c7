"""Locate the start of the markup body in a raw OFX/QFX buffer."""

import logging
from typing import Union

from ..utils.error_handler import FormatError


logger = logging.getLogger(__name__)

ROOT_MARKER = b'<OFX>'


def locate_body(data: bytes, marker: Union[bytes, str] = ROOT_MARKER) -> bytes:
    """Return data from the root marker to the end.

    Anything before the marker (the OFXHEADER block, an XML declaration,
    stray bytes) is discarded.

    Raises:
        FormatError: If the marker does not occur in data
    """
    if isinstance(marker, str):
        marker = marker.encode('ascii')

    index = data.find(marker)
    if index == -1:
        raise FormatError(
            f"root marker not found: {marker.decode('ascii', errors='replace')}",
            error_type="ROOT_MARKER_NOT_FOUND"
        )

    logger.debug(f"Markup body starts at byte {index}, discarding {index} preamble bytes")
    return data[index:]
