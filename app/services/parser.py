"""Energy reading source parser.

Reads the hourly readings spreadsheet (Excel via openpyxl, or CSV) and returns a
clean DataFrame. The header row must contain the ``Time (UTC)`` and
``Quantity kWh`` columns; any other columns are ignored.

Rows are parsed best-effort: a row with an unparsable timestamp, or a quantity
that is not a finite number within NUMERIC(12, 4), is dropped and counted; the
rest of the file still loads.
"""

import io
import logging
from decimal import Decimal
from typing import cast

import pandas as pd

from app.exceptions import ParseError

logger = logging.getLogger(__name__)

TIME_COLUMN = "Time (UTC)"
QUANTITY_COLUMN = "Quantity kWh"
REQUIRED_COLUMNS = (TIME_COLUMN, QUANTITY_COLUMN)

_EXCEL_EXTENSIONS = ("xlsx", "xls")
_QUANTITY_PLACES = Decimal("0.0001")  # NUMERIC(12, 4)
_QUANTITY_LIMIT = 1e8  # exclusive; 8 integer digits


def _read_excel(data: bytes, sheet_name: str) -> pd.DataFrame:
    try:
        return pd.read_excel(io.BytesIO(data), sheet_name=sheet_name, engine="openpyxl")
    except ValueError as exc:
        # Raised for a missing worksheet as well as for a non-workbook payload
        raise ParseError(f"Cannot read worksheet '{sheet_name}': {exc}") from exc
    except Exception as exc:
        raise ParseError(f"Cannot read workbook: {exc}") from exc


def _read_csv(data: bytes) -> pd.DataFrame:
    import pandas.errors as pd_errors

    try:
        return pd.read_csv(io.BytesIO(data), encoding="utf-8-sig")
    except pd_errors.EmptyDataError:
        raise ParseError("File is empty")
    except pd_errors.ParserError as exc:
        raise ParseError(f"Cannot parse CSV: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ParseError(f"CSV is not valid UTF-8: {exc}") from exc


def _to_decimal(value: float) -> Decimal:
    return Decimal(f"{value:.4f}").quantize(_QUANTITY_PLACES)


def parse_energy_readings(
    data: bytes,
    filename: str,
    sheet_name: str = "Sheet1",
) -> pd.DataFrame:
    """Parse raw source bytes into a DataFrame with columns [reading_time, quantity_kwh].

    Args:
        data: Raw file bytes.
        filename: Original filename; the extension selects Excel or CSV parsing.
        sheet_name: Worksheet to read for Excel sources.

    Returns:
        DataFrame sorted by reading_time, with tz-aware UTC timestamps and
        ``Decimal`` quantities quantized to 4 places. Duplicate timestamps keep
        their first occurrence.

    Raises:
        ParseError: If the file is empty or unreadable, a required column is
            missing, or no valid rows remain.
    """
    if not data:
        raise ParseError(f"Source '{filename}' is empty")

    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "csv"
    df = _read_excel(data, sheet_name) if ext in _EXCEL_EXTENSIONS else _read_csv(data)

    if df.empty:
        raise ParseError(f"Source '{filename}' has no data rows")

    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ParseError(
            f"Source '{filename}' is missing required column(s) {missing}; "
            f"found {list(df.columns)!r}"
        )

    # ── Timestamps: naive values are UTC by definition of the column ──────────
    ts = pd.to_datetime(df[TIME_COLUMN], utc=True, errors="coerce", format="mixed")

    # ── Quantities ────────────────────────────────────────────────────────────
    values = pd.to_numeric(df[QUANTITY_COLUMN], errors="coerce")

    result = pd.DataFrame({"reading_time": ts, "quantity_kwh": values})
    # NaN and +/-inf both fail the bound check
    in_range = result["quantity_kwh"].round(4).abs() < _QUANTITY_LIMIT
    valid = result["reading_time"].notna() & in_range
    dropped = int((~valid).sum())
    if dropped:
        bad_rows = [int(i) + 2 for i in result.index[~valid][:10]]  # 1-based, after header
        logger.warning(
            "Dropped %d unparsable or out-of-range row(s) from '%s' (first sheet rows: %s)",
            dropped,
            filename,
            bad_rows,
        )

    result = result[valid]
    if result.empty:
        raise ParseError(f"No valid rows remain after parsing '{filename}'")

    duplicates = int(result["reading_time"].duplicated().sum())
    if duplicates:
        logger.warning("Ignoring %d duplicate timestamp(s) in '%s'", duplicates, filename)
        result = result.drop_duplicates(subset="reading_time", keep="first")

    result = result.sort_values("reading_time").reset_index(drop=True)
    result["quantity_kwh"] = result["quantity_kwh"].map(_to_decimal)

    logger.info("Parsed '%s': %d readings", filename, len(result))
    return cast(pd.DataFrame, result)
