"""
QR Code History - Vercel serverless entry point.

Vercel's Python runtime serves the ASGI `app` exported by this module; every
request under /api/* is routed here (see vercel.json).
"""

import os
import sys

# The package lives in backend/ next to this folder
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "backend"))

from qrhistory.serverless import app  # noqa: E402,F401
