import os
import re

MIME_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".txt": "text/plain",
}


def sanitize_filename(name: str) -> str:
    """Keep letters, digits, dots and dashes; everything else becomes '_'"""
    cleaned = re.sub(r'[^a-zA-Z0-9.-]', '_', name)
    cleaned = re.sub(r'_{2,}', '_', cleaned)
    return cleaned[:100]


def sanitize_folder_name(name: str) -> str:
    """Make a value safe to use as a single storage path segment"""
    return name.strip().replace('/', '_').replace('\\', '_') or "unknown"


def get_mime_type(filename: str) -> str:
    return MIME_TYPES.get(os.path.splitext(filename)[1].lower(), "application/octet-stream")


def is_valid_file_type(filename: str, allowed_extensions: set) -> bool:
    """Check if file has an allowed extension"""
    return os.path.splitext(filename)[1].lower() in allowed_extensions


def format_file_size(size_bytes: int) -> str:
    """Get human-readable file size"""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def bytes_to_mb(size_bytes: int) -> float:
    return round(size_bytes / (1024 * 1024), 2)
