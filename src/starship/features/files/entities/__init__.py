from .files import DownloadTicket, FileObject, Files

__all__ = ["DownloadTicket", "FileObject", "Files"]
