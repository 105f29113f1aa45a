"""
Record Exporter - Turns scraped records into tables and CSV files.

Typical use is running one compiled matcher over the output of many
command invocations and collecting the results for analysis:
- scrape() unmarshals every text into a fresh record
- to_dataframe() flattens records into a pandas DataFrame
- export_csv() writes that DataFrame into the output folder
"""

import dataclasses
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd
from pydantic import BaseModel

import config
from matchers.errors import MatchError
from matchers.pattern_compiler import CompiledMatcher

logger = logging.getLogger(__name__)


def record_to_dict(record: Any) -> Dict[str, Any]:
    """Flatten one record into a column -> value dictionary."""
    if isinstance(record, BaseModel):
        return record.model_dump()
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return dataclasses.asdict(record)
    if isinstance(record, dict):
        return dict(record)
    return {k: v for k, v in vars(record).items() if not k.startswith("_")}


class RecordTableExporter:
    """
    Exports scraped records to pandas DataFrames and CSV files.

    The output folder and filename prefix come from config (and so from
    the OUTPUT_FOLDER / CSV_FILENAME_PREFIX environment variables).
    """

    def __init__(self, output_folder: Optional[str] = None, csv_prefix: Optional[str] = None):
        self.output_folder = output_folder or config.OUTPUT_FOLDER
        self.csv_prefix = csv_prefix or config.CSV_FILENAME_PREFIX

    def scrape(
        self,
        matcher: CompiledMatcher,
        texts: Iterable[str],
        factory: Optional[Callable[[], Any]] = None,
    ) -> Tuple[List[Any], List[Tuple[int, MatchError]]]:
        """
        Unmarshal every text into a new record.

        Args:
            matcher: Compiled matcher to run
            texts: Inputs, one record per text
            factory: Builds an empty record; defaults to the matcher's
                source model, or a plain dict

        Returns:
            (records, errors) where errors holds (index, error) pairs for
            the inputs that could not be matched
        """
        if factory is None:
            factory = matcher.shape.source_model or dict

        records = []
        errors = []

        for index, text in enumerate(texts):
            record = factory()
            try:
                matcher.unmarshal(text, record)
            except MatchError as e:
                logger.warning("Input %d skipped: %s", index, e)
                errors.append((index, e))
                continue
            records.append(record)

        logger.info("Scraped %d records, %d failures", len(records), len(errors))
        return records, errors

    def to_dataframe(self, records: Iterable[Any]) -> pd.DataFrame:
        """Convert records to a DataFrame, columns in first-seen order."""
        rows = [record_to_dict(record) for record in records]

        columns: List[str] = []
        for row in rows:
            for key in row:
                if key not in columns:
                    columns.append(key)

        return pd.DataFrame(rows, columns=columns)

    def export_csv(self, records: Iterable[Any], filename: Optional[str] = None) -> str:
        """
        Write records to a CSV file in the output folder.

        Returns:
            Path to the created CSV file
        """
        if not filename:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"{self.csv_prefix}_{timestamp}.csv"

        output_dir = Path(self.output_folder)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / filename

        df = self.to_dataframe(records)
        df.to_csv(output_path, index=False, encoding="utf-8")

        logger.info("Wrote %d rows to %s", len(df), output_path)
        return str(output_path)
