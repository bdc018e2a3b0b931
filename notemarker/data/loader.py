"""Comment export file loading.

Exports arrive in whatever encoding the review service or the user's
text editor produced. The encoding is detected with chardet and the
file is decoded with errors replaced, so stray bytes reach the parser
as U+FFFD and are stripped there.
"""

from pathlib import Path

import chardet

from notemarker.utils.constants import ENCODING_SAMPLE_BYTES, MIN_ENCODING_CONFIDENCE
from notemarker.utils.exceptions import ExportFileError
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = {".txt", ".text", ".csv", ".md", ""}


def detect_encoding(raw_data: bytes) -> str:
    """Detect the encoding of a byte sample.

    Args:
        raw_data: Sample of the file contents

    Returns:
        Detected encoding name, or utf-8 when detection is not confident
    """
    if not raw_data:
        return "utf-8"

    result = chardet.detect(raw_data[:ENCODING_SAMPLE_BYTES])
    encoding = result["encoding"] or "utf-8"
    confidence = result["confidence"] or 0.0

    if confidence < MIN_ENCODING_CONFIDENCE:
        logger.debug(f"Low confidence ({confidence:.2f}) for encoding {encoding}, using utf-8")
        return "utf-8"

    logger.debug(f"Detected encoding {encoding} (confidence {confidence:.2f})")
    return encoding


def load_export_text(file_path: str | Path) -> str:
    """Read a comment export file as text.

    Args:
        file_path: Path to the export file

    Returns:
        Decoded file contents

    Raises:
        FileNotFoundError: If the file does not exist
        ExportFileError: If the file cannot be read or decoded
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Comment export not found: {path}")

    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        logger.warning(f"Unexpected export file extension '{path.suffix}', reading as text")

    logger.info(f"Loading comment export from {path}")

    try:
        raw_data = path.read_bytes()
    except (PermissionError, IsADirectoryError) as e:
        raise ExportFileError(f"Cannot read comment export: {e}", str(path)) from e
    except OSError as e:
        raise ExportFileError(f"Error reading comment export: {e}", str(path)) from e

    encoding = detect_encoding(raw_data)

    try:
        text = raw_data.decode(encoding, errors="replace")
    except LookupError as e:
        raise ExportFileError(f"Unknown encoding '{encoding}'", str(path)) from e

    # Drop a UTF-8 byte order mark left by some editors
    text = text.lstrip("\ufeff")

    logger.info(f"Loaded {len(raw_data)} bytes ({encoding}) from {path.name}")
    return text
