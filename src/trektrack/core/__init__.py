"""Trek reconstruction core."""

from pillow_heif import register_heif_opener

# HEIC/HEIF decoding for every Image.open in the core
register_heif_opener()
