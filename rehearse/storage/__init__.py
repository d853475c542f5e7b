"""Storage for recordings and session records."""

from .file_manager import FileManager, extension_for

__all__ = ["FileManager", "extension_for"]
