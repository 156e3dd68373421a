"""Read and write interchange text files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from ..errors import NotFoundError, ValidationError
from ..interchange.exporter import CypherExporter, ExportOptions, ExportResult
from ..interchange.importer import CypherImporter, ImportOptions, ImportResult

LOGGER = logging.getLogger(__name__)

CYPHER_SUFFIX = ".cypher"

PathLike = Union[str, Path]


def _check_suffix(path: Path) -> None:
    if path.suffix.lower() != CYPHER_SUFFIX:
        raise ValidationError(f"File must use the {CYPHER_SUFFIX} extension: {path}")


def export_to_file(
    exporter: CypherExporter,
    path: PathLike,
    options: Optional[ExportOptions] = None,
) -> ExportResult:
    """Write the export of ``exporter`` to ``path``.

    The parent directory must already exist.
    """

    target = Path(path)
    _check_suffix(target)
    result = exporter.export(options)
    target.write_text(result.text, encoding="utf-8")
    result.file_path = str(target)
    result.file_size = target.stat().st_size
    LOGGER.info("Wrote %d bytes to %s", result.file_size, target)
    return result


def import_from_file(
    importer: CypherImporter,
    path: PathLike,
    options: Optional[ImportOptions] = None,
) -> ImportResult:
    """Import the statements stored in ``path``."""

    source = Path(path)
    if not source.is_file():
        raise NotFoundError(f"Import source does not exist: {source}")
    _check_suffix(source)
    return importer.import_text(source.read_text(encoding="utf-8"), options)


__all__ = ["CYPHER_SUFFIX", "export_to_file", "import_from_file"]
