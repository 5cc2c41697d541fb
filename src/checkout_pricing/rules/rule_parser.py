"""
Rule Parser - Validates and normalizes raw checkout rules.

Accepts rules as a single delimited string (``"A|10;A|20|3"``), a sequence of
delimited strings and/or structured records (``{"sku": "A", "price": 20,
"quantity": 3}``), or a pandas DataFrame of such records, and feeds the
valid ones into a RuleStore as tier thresholds.
"""
import logging
import os
from collections.abc import Mapping
from typing import Any, Iterable, Optional, Union

import pandas as pd
from pydantic import BaseModel, ValidationError, field_validator

from ..engine.rule_store import RuleStore, normalize_sku
from ..exceptions import InvalidConfigError, InvalidRuleError

logger = logging.getLogger(__name__)

DEFAULT_RULE_DELIMITER = ";"
DEFAULT_FIELD_DELIMITER = "|"

LINE_SEPARATORS = {"\n", "\r\n", os.linesep}

RawRules = Union[None, str, pd.DataFrame, Iterable[Any]]


class RuleEntry(BaseModel):
    """A single parsed tier rule: ``quantity`` units of ``sku`` cost ``price``."""
    sku: str
    price: int
    quantity: int = 1

    @field_validator("sku", mode="before")
    @classmethod
    def clean_sku(cls, value: Any) -> str:
        sku = normalize_sku(value) if value is not None else ""
        if not sku:
            raise ValueError("sku is required")
        return sku

    @field_validator("price", mode="before")
    @classmethod
    def strip_price(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("price")
    @classmethod
    def positive_price(cls, value: int) -> int:
        # Zero usually means the price column was left blank
        if value < 1:
            raise ValueError("price must be at least 1")
        return value

    @field_validator("quantity", mode="before")
    @classmethod
    def default_quantity(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "" or (isinstance(value, float) and pd.isna(value)):
            return 1
        return value

    @field_validator("quantity")
    @classmethod
    def floor_quantity(cls, value: int) -> int:
        return max(value, 1)


def _describe(entry: Any) -> str:
    if isinstance(entry, BaseModel):
        return entry.model_dump_json()
    return str(dict(entry)) if isinstance(entry, Mapping) else str(entry)


class RuleParser:
    """
    Turns raw rule descriptions into RuleEntry objects.

    In strict mode the first malformed entry aborts the whole parse with
    InvalidRuleError; in lenient mode malformed entries are dropped.
    """

    def __init__(
        self,
        rule_delimiter: str = DEFAULT_RULE_DELIMITER,
        field_delimiter: str = DEFAULT_FIELD_DELIMITER,
        strict: bool = False,
    ):
        rule_delimiter = rule_delimiter or ""
        if rule_delimiter not in LINE_SEPARATORS:
            rule_delimiter = rule_delimiter.strip()
        if not rule_delimiter:
            raise InvalidConfigError("Rule delimiter string cannot be empty")

        field_delimiter = (field_delimiter or "").strip()
        if not field_delimiter:
            raise InvalidConfigError("Field delimiter string cannot be empty")

        self.rule_delimiter = rule_delimiter
        self.field_delimiter = field_delimiter
        self.strict = strict

    def split(self, rules: RawRules) -> list[Any]:
        """Break raw rules into a list of individual entries."""
        if rules is None:
            return []
        if isinstance(rules, str):
            return rules.split(self.rule_delimiter)
        if isinstance(rules, pd.DataFrame):
            return rules.to_dict(orient="records")
        if isinstance(rules, (Mapping, RuleEntry)):
            return [rules]
        return list(rules)

    def parse_entry(self, entry: Any) -> tuple[Optional[RuleEntry], list[str]]:
        """
        Validate and parse a single rule entry.

        Returns (rule, errors) - rule is None if the entry is blank or invalid;
        errors is empty for blank entries, which are skipped silently.
        """
        if isinstance(entry, RuleEntry):
            return entry, []

        if isinstance(entry, Mapping):
            if "sku" not in entry or "price" not in entry:
                return None, [f"Invalid rule: '{_describe(entry)}' (sku and price are required)"]
            fields = {k: entry[k] for k in ("sku", "price", "quantity") if k in entry}
        elif isinstance(entry, str):
            text = entry.strip()
            if not text:
                return None, []
            parts = text.split(self.field_delimiter)
            if len(parts) < 2:
                return None, [f"Invalid rule: '{text}'"]
            fields = {"sku": parts[0], "price": parts[1]}
            if len(parts) > 2:
                fields["quantity"] = parts[2]
        else:
            return None, [f"Invalid rule: '{entry!r}' (expected a string or a record)"]

        try:
            return RuleEntry(**fields), []
        except ValidationError as e:
            reasons = "; ".join(err["msg"] for err in e.errors())
            return None, [f"Invalid rule: '{_describe(entry).strip()}' ({reasons})"]

    def parse(self, rules: RawRules) -> list[RuleEntry]:
        """Parse every entry, applying the strict/lenient policy."""
        parsed = []
        for entry in self.split(rules):
            rule, errors = self.parse_entry(entry)
            if errors:
                if self.strict:
                    raise InvalidRuleError(errors[0], rule=_describe(entry))
                logger.warning("Discarding %s", errors[0])
                continue
            if rule is not None:
                parsed.append(rule)
        return parsed

    def load(self, rules: RawRules, store: RuleStore) -> int:
        """
        Parse ``rules`` and register them into ``store``.

        Nothing is registered if a strict parse fails. Returns the number of
        rules forwarded to the store.
        """
        entries = self.parse(rules)
        for entry in entries:
            store.add_tier_rule(entry.sku, entry.quantity, entry.price)
        logger.debug("Loaded %d rule(s) covering %d SKU(s)", len(entries), len(store))
        return len(entries)
