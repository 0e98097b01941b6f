"""
=============================================================================
MARKER SUBSTITUTION
=============================================================================

Served pages may contain two reserved markers:

    <cs371date>     →  <h3>10/18/26</h3>
    <cs371server>   →  <h3>This page was served by WebWorker ...</h3>

=============================================================================
SINGLE FORWARD SCAN
=============================================================================

The payload is scanned once, left to right, copying into a fresh buffer:

    source:  ...text<cs371date>more text<cs371date>end
             ▲
             cursor

    1. find the next "<" at or after the cursor
    2. copy everything before it
    3. if a marker starts there: emit its replacement, skip the marker
       otherwise: emit "<", advance by one
    4. repeat until no "<" remains, then copy the tail

Offsets are always taken from the ORIGINAL payload, never from the output,
so one replacement cannot shift where the next marker is found. Replacement
text is never rescanned.

The scan works on bytes. Markers are ASCII, so a match can never land in
the middle of a multi-byte UTF-8 character.

=============================================================================
"""

from datetime import date
from typing import Callable, Dict, Optional


DATE_MARKER = b"<cs371date>"
SERVER_MARKER = b"<cs371server>"

DATE_FORMAT = "%m/%d/%y"

SERVER_DESCRIPTION = (
    "This page was served by WebWorker, a one-request-per-connection "
    "web server that fills in dates and greetings on the fly."
)

HEADING_OPEN = b"<h3>"
HEADING_CLOSE = b"</h3>"


def _heading(text: str) -> bytes:
    return HEADING_OPEN + text.encode("utf-8") + HEADING_CLOSE


class TemplateRenderer:
    """
    Replaces reserved markers in a payload.

    Usage:
        renderer = TemplateRenderer()
        page = renderer.render(b"<p>Today: <cs371date></p>")
        # b"<p>Today: <h3>10/18/26</h3></p>"
    """

    def __init__(
        self,
        server_description: str = SERVER_DESCRIPTION,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Args:
            server_description: Sentence substituted for <cs371server>.
            today: Returns the current local date; defaults to date.today.
        """
        self.server_description = server_description
        self.today = today or date.today

    def replacements(self) -> Dict[bytes, bytes]:
        """
        Compute the replacement for each marker.

        Called once per render, so every date marker in a page shows the
        same date even if the scan straddles midnight.
        """
        return {
            DATE_MARKER: _heading(self.today().strftime(DATE_FORMAT)),
            SERVER_MARKER: _heading(self.server_description),
        }

    def render(self, payload: bytes) -> bytes:
        """
        Substitute every marker occurrence in a single forward scan.

        Args:
            payload: Page content.

        Returns:
            Rendered content. Identical to payload when it has no markers.
        """
        # Fast path: nothing to do
        if DATE_MARKER not in payload and SERVER_MARKER not in payload:
            return payload

        replacements = self.replacements()
        out = bytearray()
        cursor = 0

        while True:
            start = payload.find(b"<", cursor)
            if start == -1:
                break

            out += payload[cursor:start]

            for marker, replacement in replacements.items():
                if payload.startswith(marker, start):
                    out += replacement
                    cursor = start + len(marker)
                    break
            else:
                out += b"<"
                cursor = start + 1

        out += payload[cursor:]
        return bytes(out)


def render(payload: bytes) -> bytes:
    """Render a payload with the default description and today's date."""
    return TemplateRenderer().render(payload)
