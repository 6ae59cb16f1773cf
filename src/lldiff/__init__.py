"""link-like-diff — master-data change detection and notification pipeline.

Detects changes in the generated master-data snapshot, renders each changed
file's diff as an image and delivers the images as one forwarded bundle.
"""

__version__ = "0.3.0"
