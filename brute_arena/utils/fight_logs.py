"""Fight archive and replay helper.

Appends encoded fight outcomes to data/fight_logs.jsonl and can load them
back. Each line keeps a few searchable fields next to the base64 binary
record produced by `fight_codec.encode_outcome`.
"""
from __future__ import annotations

import base64
import json
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from brute_arena.config import Settings
from brute_arena.utils.fight_codec import decode_outcome, encode_outcome
from brute_arena.utils.models import FightOutcome

DATA_DIR = Path.cwd() / Settings.FIGHT_LOG_DIR
LOG_FILE = DATA_DIR / "fight_logs.jsonl"


def append_fight_log(outcome: FightOutcome, fight_id: Optional[str] = None) -> str:
    fid = fight_id or str(uuid.uuid4())
    entry = {
        "fight_id": fid,
        "seed": outcome.seed,
        "winner": outcome.winner_id,
        "loser": outcome.loser_id,
        "turns": outcome.turns,
        "record": base64.b64encode(encode_outcome(outcome)).decode("ascii"),
    }
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with LOG_FILE.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(entry) + "\n")
    return fid


def read_all_logs(limit: Optional[int] = 100) -> List[Dict[str, Any]]:
    if not LOG_FILE.exists():
        return []
    out: List[Dict[str, Any]] = []
    with LOG_FILE.open("r", encoding="utf-8") as fh:
        for line in fh:
            if not line.strip():
                continue
            try:
                out.append(json.loads(line))
            except json.JSONDecodeError:
                continue
    if limit is not None:
        return out[-limit:]
    return out


def get_log_by_id(fight_id: str) -> Optional[FightOutcome]:
    for entry in read_all_logs(limit=None):
        if str(entry.get("fight_id")) == str(fight_id):
            return decode_outcome(base64.b64decode(entry["record"]))
    return None
