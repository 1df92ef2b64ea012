"""Shared device status constants."""

STATUS_AVAILABLE = "Available"
STATUS_CHECKED_OUT = "Checked Out"

STATUS_CHOICES = (
    STATUS_AVAILABLE,
    STATUS_CHECKED_OUT,
)


__all__ = [
    "STATUS_AVAILABLE",
    "STATUS_CHECKED_OUT",
    "STATUS_CHOICES",
]
