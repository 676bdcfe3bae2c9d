#!/usr/bin/env python
"""API server entrypoint for GlowTrack."""

from glowtrack.app import create_app
from glowtrack.config import DevConfig

app = create_app(DevConfig(), start_scheduler=True)

if __name__ == "__main__":
    app.run(debug=False)
