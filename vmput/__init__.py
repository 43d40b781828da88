"""Place a single file into the disk image of a shut off libvirt VM."""

from __future__ import annotations

__version__ = '0.1.0'
