"""mediabot — chat-bot plugin commands for AI image editing and YouTube MP4 downloads."""

__version__ = "0.1.0"
