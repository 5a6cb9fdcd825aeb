#!/usr/bin/env python3
"""Compatibility shim for the head tracker CLI entry point."""

import sys

from app.cli import TrackerDisplay, main

__all__ = ["TrackerDisplay", "main"]


if __name__ == "__main__":
    sys.exit(main())
