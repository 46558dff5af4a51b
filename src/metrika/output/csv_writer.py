"""CSV output writer."""

import csv
import io
from pathlib import Path
from typing import Union

from ..exceptions import FileWriteError
from ..models.summary import HealthReport


class CSVWriter:
    """Writes report series to CSV format, one row per day."""

    # Standard column order for CSV output
    COLUMNS = [
        "date",
        "weight_kg",
        "water_liters",
    ]

    @classmethod
    def _write_rows(cls, f, report: HealthReport, include_header: bool) -> None:
        writer = csv.DictWriter(f, fieldnames=cls.COLUMNS, extrasaction="ignore")
        if include_header:
            writer.writeheader()
        writer.writerows(report.to_flat_rows())

    @classmethod
    def write(
        cls,
        report: HealthReport,
        filepath: Union[str, Path],
        include_header: bool = True,
    ) -> None:
        """
        Write a report's weight and water series to a CSV file.

        Days without a weight reading leave ``weight_kg`` empty.

        Raises:
            FileWriteError: If the file cannot be written.
        """
        filepath = Path(filepath)
        try:
            with open(filepath, "w", newline="", encoding="utf-8-sig") as f:
                cls._write_rows(f, report, include_header)
        except OSError as e:
            raise FileWriteError(str(filepath), str(e))

    @classmethod
    def to_csv_string(cls, report: HealthReport, include_header: bool = True) -> str:
        output = io.StringIO()
        cls._write_rows(output, report, include_header)
        return output.getvalue()
