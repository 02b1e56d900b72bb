"""Browser-driven Android screen mirroring and remote input."""

__version__ = "0.1.0"
