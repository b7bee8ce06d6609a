"""Feedbell daemon: polls RSS and YouTube feeds and posts new items to Discord."""

__version__ = "0.1.0"
