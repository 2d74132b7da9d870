"""Source image loading."""

from filtercache.services.data.loader import FileSystemLoader
from filtercache.services.data.manager import DataManager

__all__ = ["DataManager", "FileSystemLoader"]
