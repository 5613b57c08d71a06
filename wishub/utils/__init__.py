from wishub.utils.file_manager import FileManager, format_file_size, parse_size

__all__ = ["FileManager", "format_file_size", "parse_size"]
