import os
from datetime import datetime
from typing import Dict, Optional

import polars as pl

from .models import LinkVerdict
from .urls import clean_url

REPORT_SCHEMA = {
    'url': pl.Utf8,
    'clean_url': pl.Utf8,
    'checked_url': pl.Utf8,
    'dead': pl.Boolean,
    'status': pl.Utf8,
    'status_code': pl.Int64,
    'error': pl.Utf8,
    'final_url': pl.Utf8,
    'redirects': pl.Int64,
    'method': pl.Utf8,
    'timestamp': pl.Utf8,
}


def verdicts_to_dataframe(verdicts: Dict[str, LinkVerdict],
                          timestamp: Optional[str] = None) -> pl.DataFrame:
    """
    Build a DataFrame with one row per checked link, in input order.

    Args:
        verdicts: Mapping of URL to LinkVerdict
        timestamp: Timestamp for the records; defaults to now

    Returns:
        DataFrame following REPORT_SCHEMA
    """
    timestamp = timestamp or datetime.now().isoformat(timespec='seconds')

    records = []
    for url, verdict in verdicts.items():
        record = verdict.to_dict()
        record['url'] = url
        record['clean_url'] = clean_url(url)
        record['timestamp'] = timestamp
        records.append(record)

    return pl.DataFrame(records, schema=REPORT_SCHEMA)


def create_csv_report(verdicts: Dict[str, LinkVerdict], csv_filepath: str,
                      verbose: bool = False) -> str:
    """
    Write link verdicts to a CSV file.

    Args:
        verdicts: Mapping of URL to LinkVerdict
        csv_filepath: Path of the CSV file to write
        verbose: Enable verbose output

    Returns:
        Path to the generated CSV file
    """
    directory = os.path.dirname(csv_filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    df = verdicts_to_dataframe(verdicts)
    df.write_csv(csv_filepath)

    if verbose:
        dead = df.filter(pl.col('dead')).height
        print(f"📝 Wrote {df.height} records ({dead} dead) to {csv_filepath}")

    return csv_filepath
