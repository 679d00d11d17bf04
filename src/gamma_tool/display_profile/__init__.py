"""Display gamma / color temperature adjustment through colord.

This package synthesizes a per-channel VCGT from gamma exponents and a black-body
white point, writes it into a copy of the display's current ICC profile, waits for
colord to index the new file and makes it the device default. Profiles it creates
are recognized by file name so they can be reported on, replaced or removed later.
"""

from __future__ import annotations
