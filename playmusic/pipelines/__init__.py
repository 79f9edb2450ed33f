"""Composite download operations built on the client."""

from .download import TrackTags, download, open_stream, stream_to_file, tag_file

__all__ = ["TrackTags", "download", "open_stream", "stream_to_file", "tag_file"]
