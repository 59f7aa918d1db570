"""Locate or install ffmpeg, ffprobe and ffplay for an MCP host."""

__version__ = "0.1.0"
