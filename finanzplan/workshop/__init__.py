# Workshop Module
# Accumulated plan inputs, turn-by-turn merge and the full recomputation
#
# Components:
# - snapshot.py: FinanzplanSnapshot (inputs plus founder context)
# - merge.py: pure merge of a partial update into a snapshot
# - pipeline.py: run_finanzplan over all computable stages

from .snapshot import FinanzierungInput, FinanzplanSnapshot
from .merge import UNION_KEYS, normalize_keys, merge_snapshot
from .pipeline import FinanzplanResult, run_finanzplan

__all__ = [
    # Snapshot
    "FinanzierungInput",
    "FinanzplanSnapshot",
    # Merge
    "UNION_KEYS",
    "normalize_keys",
    "merge_snapshot",
    # Pipeline
    "FinanzplanResult",
    "run_finanzplan",
]
