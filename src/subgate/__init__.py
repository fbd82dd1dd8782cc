"""
subgate - Subscriber-only visibility and download gating for video platforms.

Decides, for a video and an optional requesting identity, whether the video
may be listed, viewed in detail or downloaded, and shapes list and detail
responses so that restricted media locations never leak.
"""

from __future__ import annotations

__version__ = "0.3.0"
__author__ = "subgate"
__email__ = "noreply@subgate.dev"
__license__ = "AGPL-3.0-or-later"

__all__ = ["__version__", "__author__", "__email__", "__license__"]
