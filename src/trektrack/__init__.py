"""TrekTrack: rebuild a trek from geotagged photos."""

__version__ = "0.1.0"
