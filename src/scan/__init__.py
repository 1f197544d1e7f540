"""File discovery for call-site refactoring."""

from scan.files import find_python_files

__all__ = ["find_python_files"]
