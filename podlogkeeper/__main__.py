"""Entry point for `python -m podlogkeeper`.

Usage:
    python -m podlogkeeper
    uv run python -m podlogkeeper

Configuration comes from PODLOGKEEPER_* environment variables; use the
``podlogkeeper run`` console script to override them with flags.
"""

from __future__ import annotations

import asyncio

from podlogkeeper.app import main

asyncio.run(main())
