"""Rank a Flickr user's photos by views, favorites and their rates."""

__version__ = "0.1.0"
