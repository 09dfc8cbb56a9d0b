import csv
import json
import traceback
from pathlib import Path
from typing import Any, Dict, Iterable, List

from techprobe.core.logging import log


def safe_read_json(path: Path, default: Any = None) -> Any:
    """
    Safely read a JSON file. Missing, empty or corrupt files yield ``default``.
    """
    if default is None:
        default = {}

    try:
        if path.exists():
            content = path.read_text(encoding="utf-8")
            if not content.strip():
                return default
            return json.loads(content)
    except json.JSONDecodeError as e:
        log(f"Corrupted JSON in {path.name}: {e}", level="error")
    except PermissionError as e:
        log(f"Permission denied reading {path.name}: {e}", level="error")
    except OSError as e:
        log(f"IO error reading {path.name}: {e}", level="warning")

    return default


def safe_write_json(path: Path, data: Any) -> bool:
    """
    Write data as JSON, creating parent directories. Returns False on IO failure.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        return True
    except PermissionError as e:
        log(f"Permission denied writing to {path.name}: {e}", level="error")
    except OSError as e:
        log(f"IO error writing to {path.name}: {e}", level="error")
    except Exception:
        log(f"Unexpected error writing to {path.name}: {traceback.format_exc()}", level="error")
        raise

    return False


def safe_write_csv(path: Path, rows: Iterable[Dict[str, Any]], fieldnames: List[str]) -> bool:
    """Write dict rows as CSV with a header line. Returns False on IO failure."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
            writer.writeheader()
            for row in rows:
                writer.writerow(row)
        return True
    except PermissionError as e:
        log(f"Permission denied writing to {path.name}: {e}", level="error")
    except OSError as e:
        log(f"IO error writing to {path.name}: {e}", level="error")
    return False
