"""
ZIP bundling of compressed images.

Entry names are sanitized so an archive produced here can never write outside
the directory it is extracted into (zip-slip).
"""
import os
import re
import logging
import zipfile
from io import BytesIO
from typing import Dict, List, Mapping, Tuple

from image_compress.exceptions import ArchiveWriteError, EmptyInputError

# Set up logging
logger = logging.getLogger(__name__)

DEFAULT_ENTRY_NAME = "image"
PLACEHOLDER = "_"

# Characters that are illegal in file names on common filesystems, plus control characters
ILLEGAL_CHARS = re.compile(r'[/\\:*?"<>|\x00-\x1f]')


def sanitize_filename(filename: str) -> str:
    """
    Make a filename safe to use as an archive entry name.

    Directory components are stripped (both ``/`` and ``\\`` count as
    separators), ``..`` sequences are removed and illegal characters are
    replaced. An empty result becomes ``image``.
    """
    base_name = re.split(r"[/\\]", filename or "")[-1]
    base_name = base_name.replace("..", "")
    base_name = ILLEGAL_CHARS.sub(PLACEHOLDER, base_name).strip()

    if base_name in ("", "."):
        base_name = DEFAULT_ENTRY_NAME

    return base_name


def _deduplicate(name: str, used: Dict[str, int]) -> str:
    if name not in used:
        used[name] = 1
        return name

    root, ext = os.path.splitext(name)
    count = used[name]
    while True:
        count += 1
        candidate = f"{root}_{count}{ext}"
        if candidate not in used:
            used[name] = count
            used[candidate] = 1
            return candidate


class ZipBundler:
    """Builds a ZIP archive from an ordered mapping of filename to bytes"""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED):
        self.compression = compression

    def entry_names(self, filenames: List[str]) -> List[str]:
        """Sanitize and de-duplicate entry names, preserving order."""
        used: Dict[str, int] = {}
        return [_deduplicate(sanitize_filename(name), used) for name in filenames]

    def bundle(self, files: Mapping[str, bytes]) -> bytes:
        """
        Create a ZIP archive containing the given files.

        Entries are written in the iteration order of ``files``. Names that
        collide after sanitization get a numeric suffix.

        Args:
            files: Mapping of filename to file content

        Returns:
            The ZIP archive as bytes

        Raises:
            EmptyInputError: If there are no files to bundle
            ArchiveWriteError: If any entry cannot be written; no partial archive is returned
        """
        if not files:
            raise EmptyInputError("No files to add to the archive")

        return self.bundle_entries(list(files.items()))

    def bundle_entries(self, entries: List[Tuple[str, bytes]]) -> bytes:
        """Same as ``bundle`` for a list of (filename, content) pairs, which may repeat names."""
        if not entries:
            raise EmptyInputError("No files to add to the archive")

        names = self.entry_names([filename for filename, _ in entries])
        zip_buffer = BytesIO()
        try:
            with zipfile.ZipFile(zip_buffer, 'w', self.compression) as zip_file:
                for (filename, data), entry_name in zip(entries, names):
                    try:
                        zip_file.writestr(entry_name, data)
                    except (OSError, ValueError, TypeError, zipfile.LargeZipFile) as e:
                        logger.error(f"Failed to add {filename!r} to archive: {str(e)}")
                        raise ArchiveWriteError(f"Error writing archive entry for {filename}: {e}") from e
        except (OSError, ValueError) as e:
            raise ArchiveWriteError(f"Error closing archive: {e}") from e

        logger.debug(f"Created ZIP archive with {len(names)} entries")
        return zip_buffer.getvalue()
