"""Storage helpers for incident recording media."""

from .ipfs import MediaStorage, PinataStorage, PinnedMedia

__all__ = ["MediaStorage", "PinataStorage", "PinnedMedia"]
