"""
Rule tables - load tier rules from CSV files.

A rule table has one row per threshold with ``sku``, ``price`` and an
optional ``quantity`` column (blank cells mean a unit price). Rows come back
as plain records ready for RuleParser, which does all the validation.
"""
from pathlib import Path
from typing import Union

import pandas as pd

REQUIRED_COLUMNS = ("sku", "price")


def read_rule_table(path: Union[str, Path], sep: str = ",") -> list[dict]:
    """
    Read a rule table into a list of ``{"sku", "price", "quantity"}`` records.

    Raises:
        FileNotFoundError: the file does not exist
        ValueError: the file lacks a required column
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rule table not found at {path}.")

    df = pd.read_csv(path, sep=sep, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip().lower() for c in df.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Rule table {path.name} is missing column(s): {', '.join(missing)}")

    if "quantity" not in df.columns:
        df["quantity"] = ""

    # Normalize text cells
    for col in ("sku", "price", "quantity"):
        df[col] = df[col].astype(str).str.strip()

    # Fully blank rows carry no rule
    df = df[(df["sku"] != "") | (df["price"] != "")]

    return df[["sku", "price", "quantity"]].to_dict(orient="records")
