"""Text encodings for stored series."""
