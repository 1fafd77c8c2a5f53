"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Cross-platform "move to trash" for Windows, macOS, and Linux.
Files are never permanently erased.
"""
from pathlib import Path
from send2trash import send2trash


class FileService:
    """
    Trash operations backed by send2trash.
    """

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file to the system trash."""
        path = Path(file_path)

        if not path.exists() and not path.is_symlink():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e
