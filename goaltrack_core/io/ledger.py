from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pandas as pd

from goaltrack_core.domain.models import Contribution


CONTRIBUTION_COLUMNS = ("date", "amount", "kind")


def load_contributions(csv_path: str | Path, envelope_id: Optional[str] = None) -> List[Contribution]:
    """
    Envelope contributions exported from the ledger, oldest first.

    The export may hold several envelopes in an `envelope_id` column; pass
    `envelope_id` to keep only one of them. Rows whose date or amount do
    not parse are reported by line number instead of being dropped.
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(path)

    df = pd.read_csv(path)
    missing = set(CONTRIBUTION_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns in contributions CSV: {missing}")

    if envelope_id is not None:
        if "envelope_id" not in df.columns:
            raise ValueError("Contributions CSV has no envelope_id column to filter on")
        df = df[df["envelope_id"].astype(str) == str(envelope_id)]

    dates = pd.to_datetime(df["date"], errors="coerce")
    amounts = pd.to_numeric(df["amount"], errors="coerce")
    bad = df.index[dates.isna() | amounts.isna()]
    if len(bad):
        # +2: header line and 1-based numbering
        raise ValueError(f"Unparseable date or amount on CSV lines: {[int(i) + 2 for i in bad]}")

    frame = pd.DataFrame(
        {
            "date": dates.dt.date,
            "amount": amounts.astype(float),
            "kind": df["kind"].astype(str).str.strip().str.lower(),
        }
    ).sort_values("date", kind="stable")
    return [Contribution(date=d, amount=a, kind=k) for d, a, k in frame.itertuples(index=False)]
