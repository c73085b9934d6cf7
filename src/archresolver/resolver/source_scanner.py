"""
Library source file discovery.

Arduino libraries come in two layouts:
- 1.5 format: sources live under src/ (scanned recursively)
- Legacy format: sources live in the root directory and utility/
"""

from pathlib import Path
from typing import List

SOURCE_PATTERNS = ("*.c", "*.cpp", "*.S")

# Directories never compiled as part of a library
EXCLUDED_DIRS = {"examples", "extras", "test", "tests", ".git", ".zap", ".pio", "build", "__pycache__"}


class LibrarySourceScanner:
    """
    Scans an Arduino library for compilable source files.

    Usage:
        scanner = LibrarySourceScanner(Path("libs/Servo"))
        sources = scanner.scan()
    """

    def __init__(self, library_root: Path):
        """
        Initialize source scanner.

        Args:
            library_root: Library's root directory
        """
        self.library_root = Path(library_root)

    @property
    def is_recursive_layout(self) -> bool:
        """True for 1.5-format libraries (sources under src/)."""
        return (self.library_root / "src").is_dir()

    def scan(self) -> List[Path]:
        """
        Scan the library for source files.

        Returns:
            Sorted list of source file paths
        """
        if not self.library_root.is_dir():
            return []

        if self.is_recursive_layout:
            sources = self._scan_recursive(self.library_root / "src")
        else:
            sources = self._scan_flat(self.library_root)
            utility_dir = self.library_root / "utility"
            if utility_dir.is_dir():
                sources.extend(self._scan_flat(utility_dir))

        return sorted(set(sources))

    def _scan_flat(self, directory: Path) -> List[Path]:
        sources = []
        for pattern in SOURCE_PATTERNS:
            sources.extend(p for p in directory.glob(pattern) if p.is_file())
        return sources

    def _scan_recursive(self, directory: Path) -> List[Path]:
        """
        Scan a directory tree, skipping excluded directories.

        Args:
            directory: Root of the tree

        Returns:
            List of source file paths
        """
        sources = self._scan_flat(directory)
        for subdir in directory.iterdir():
            if subdir.is_dir() and subdir.name not in EXCLUDED_DIRS:
                sources.extend(self._scan_recursive(subdir))
        return sources
