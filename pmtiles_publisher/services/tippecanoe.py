"""GeoJSON to PMTiles conversion through the tippecanoe command-line tool.

This module wraps tippecanoe as a subprocess. Every conversion runs with the
same fixed option set:

- ``-zg``: let tippecanoe guess a suitable maximum zoom,
- ``--drop-densest-as-needed``: thin overly dense tiles instead of failing,
- ``--force``: overwrite an existing output file.

The call blocks until the process exits and returns a ConversionResult that
is either the output path or the tool's diagnostics. The converter never
deletes anything; the caller owns both the input and the output file.

Example:
    Convert a staged GeoJSON file:
        >>> from pathlib import Path
        >>> from pmtiles_publisher.services.tippecanoe import (
        ...     TippecanoeConverter,
        ... )
        >>> converter = TippecanoeConverter()
        >>> result = converter.convert(
        ...     Path("/staging/1-ab-cities.geojson"),
        ...     Path("/staging/2-cd-cities.pmtiles"),
        ... )
        >>> if not result.ok:
        ...     print(result.diagnostics)

    The command executed:
        $ tippecanoe -o /staging/2-cd-cities.pmtiles -zg \\
        $    --drop-densest-as-needed --force /staging/1-ab-cities.geojson
"""

from __future__ import annotations

import logging
import pathlib
import signal
import subprocess

from pmtiles_publisher import models

logger = logging.getLogger(__name__)


def _describe_signal(returncode: int) -> str:
    try:
        return signal.Signals(-returncode).name
    except ValueError:
        return f"signal {-returncode}"


class TippecanoeConverter:
    """Runs tippecanoe for one input/output pair at a time.

    Attributes:
        executable: Name or path of the tippecanoe binary.
    """

    def __init__(self, executable: str = "tippecanoe") -> None:
        self.executable = executable

    def build_command(self, job: models.ConversionJob) -> list[str]:
        """Return the argument list for a conversion job."""
        return [
            self.executable,
            "-o",
            str(job.output_path),
            *job.options,
            str(job.input_path),
        ]

    def convert(
        self,
        input_path: pathlib.Path | None,
        output_path: pathlib.Path,
    ) -> models.ConversionResult:
        """Convert input_path into a PMTiles archive at output_path.

        The input content is not inspected; tippecanoe's own validation
        decides whether the data is usable.

        Args:
            input_path: Staged source file.
            output_path: Where tippecanoe writes the archive.

        Returns:
            A successful ConversionResult naming output_path, or a failed
            one carrying tippecanoe's stderr unmodified. Bytes that are
            not valid in the locale encoding are replaced, not fatal.

        Raises:
            ValueError: If no input path is given.
        """
        if input_path is None or pathlib.PurePath(input_path) == pathlib.PurePath():
            raise ValueError("An input path is required for conversion")

        job = models.ConversionJob(input_path=input_path,
                                   output_path=output_path)
        command = self.build_command(job)
        logger.info("Running %s", " ".join(command))

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as exc:
            logger.error("Could not start %s: %s", self.executable, exc)
            return models.ConversionResult.failure(
                f"Could not start {self.executable}: {exc}",
            )

        if result.returncode < 0:
            return models.ConversionResult.failure(
                result.stderr
                or f"tippecanoe terminated by "
                   f"{_describe_signal(result.returncode)}",
                returncode=result.returncode,
            )

        if result.returncode != 0:
            return models.ConversionResult.failure(
                result.stderr or "Unknown conversion failure",
                returncode=result.returncode,
            )

        if not output_path.is_file() or output_path.stat().st_size == 0:
            return models.ConversionResult.failure(
                f"tippecanoe exited successfully but wrote no output "
                f"to {output_path.name}",
                returncode=result.returncode,
            )

        return models.ConversionResult.success(output_path)
