from typeguard import typechecked
import hashlib
import json
import time
import os
from typing import Any, Dict, List, Optional, Tuple
from pathlib import Path

import cbor2

from arena.core.console import *
from arena.core.errors import FileFormatError, LoggerError, ValidationError

FORMAT_BY_SUFFIX = {".json": "json", ".cbor": "cbor"}


@typechecked
class MatchLogger:
    """
    Round-by-round record of a match, written as JSON or CBOR.

    Every record carries a ``round`` key. The keys of the first round record
    become the expected schema; later rounds that drift from it are reported
    but still kept.
    """

    def __init__(self, name: str, metadata: Optional[Dict[str, Any]] = None, path: str = "", validate_schema: bool = True, filename_pattern: str = "{name}_{hash}_{timestamp}"):
        """
        Args:
            name (str): Prefix of generated file names.
            metadata (Dict[str, Any], optional): Match-wide parameters (teams, seed, arena).
            path (str, optional): Directory files are written to and read from.
            validate_schema (bool): Check every round record against the first one.
            filename_pattern (str): ``str.format`` pattern with ``name``, ``hash``,
                ``timestamp`` and ``metadata_hash`` fields.
        """
        self.name = name
        self.metadata: Dict[str, Any] = dict(metadata or {})
        self.path = path
        self.validate_schema = validate_schema
        self.filename_pattern = filename_pattern

        self._records: List[Dict[str, Any]] = []
        self._expected_keys: Optional[frozenset] = None
        self._round_range: Optional[Tuple[int, int]] = None

    # ------------------------------ Recording -------------------------------

    def _check_schema(self, record: Dict[str, Any]) -> None:
        if not isinstance(record.get("round"), int):
            raise ValidationError(f"Round field must be an integer, got {type(record.get('round')).__name__}")
        keys = frozenset(record)
        if self._expected_keys is None:
            self._expected_keys = keys
        elif keys != self._expected_keys:
            warning(f"Round {record['round']} drifts from the match schema: missing={sorted(self._expected_keys - keys)} extra={sorted(keys - self._expected_keys)}")

    def log_round(self, data: Dict[str, Any], round_num: int) -> None:
        """
        Append the state of one round.

        Args:
            data (dict): Round data (robots, shared arrays, faults...).
            round_num (int): The round the data belongs to.
        """
        record = {"round": round_num, **data}
        if self.validate_schema:
            try:
                self._check_schema(record)
            except ValidationError as e:
                error(f"Rejected round record: {e}")
                raise
        self._records.append(record)
        low, high = self._round_range or (round_num, round_num)
        self._round_range = (min(low, round_num), max(high, round_num))

    def finalize(self, round_num: int, **summary_data: Any) -> None:
        """Append the closing summary record; it is exempt from the round schema."""
        self._records.append({"summary": True, "round": round_num, **summary_data})

    # ------------------------------ Queries -------------------------------

    def get_records(self) -> List[Dict[str, Any]]:
        return list(self._records)

    def get_record_count(self) -> int:
        return len(self._records)

    def get_round_range(self) -> Optional[Tuple[int, int]]:
        return self._round_range

    def get_metadata(self) -> Dict[str, Any]:
        return dict(self.metadata)

    def extract_by_round(self, round_min: int, round_max: int) -> List[Dict[str, Any]]:
        """Round records with round in [round_min, round_max]."""
        return [r for r in self._records if not r.get("summary") and round_min <= r["round"] <= round_max]

    def extract_shared_history(self, team: str) -> List[Tuple[int, List[int]]]:
        """(round, logged shared array cells) for every round that logged the team's array."""
        history = []
        for record in self._records:
            shared = record.get("shared_arrays") or {}
            if team in shared:
                history.append((record["round"], list(shared[team])))
        return history

    def extract_summary(self) -> List[Dict[str, Any]]:
        return [r for r in self._records if r.get("summary")]

    # ------------------------------ Files -------------------------------

    @staticmethod
    def _format_of(filename: str) -> str:
        suffix = Path(filename).suffix.lower()
        try:
            return FORMAT_BY_SUFFIX[suffix]
        except KeyError:
            raise FileFormatError(f"Unsupported file format '{suffix}', expected one of {sorted(FORMAT_BY_SUFFIX)}") from None

    def _auto_filename(self, suffix: str) -> str:
        meta = json.dumps(self.metadata, sort_keys=True, default=str)
        now = time.time()
        return (
            self.filename_pattern.format(
                name=self.name,
                hash=hashlib.sha256(f"{meta}{now}".encode("utf-8")).hexdigest()[:16],
                timestamp=str(int(now)),
                metadata_hash=hashlib.sha256(meta.encode("utf-8")).hexdigest()[:8],
            )
            + suffix
        )

    @staticmethod
    def _dump(payload: Dict[str, Any], filepath: str, file_format: str) -> None:
        try:
            if file_format == "cbor":
                with open(filepath, "wb") as f:
                    cbor2.dump(payload, f)
            else:
                with open(filepath, "w") as f:
                    json.dump(payload, f, indent=2)
        except OSError as e:
            raise LoggerError(f"Cannot write match log {filepath}: {e}") from e

    @staticmethod
    def _load(filepath: str, file_format: str) -> Any:
        try:
            if file_format == "cbor":
                with open(filepath, "rb") as f:
                    return cbor2.load(f)
            with open(filepath, "r") as f:
                return json.load(f)
        except OSError as e:
            raise LoggerError(f"Cannot read match log {filepath}: {e}") from e
        except (json.JSONDecodeError, cbor2.CBORDecodeError) as e:
            raise FileFormatError(f"Corrupted {file_format} match log {filepath}: {e}") from e

    def write_to_file(self, filename: Optional[str] = None, force: bool = False, format: str = "auto") -> str:
        """
        Write metadata, records and round statistics under ``path``.

        Args:
            filename (str, optional): File name; generated from the pattern when None.
            force (bool): Overwrite an existing file.
            format (str): 'json', 'cbor', or 'auto' to follow the file extension.

        Returns:
            str: The file name used.
        """
        if format not in ("json", "cbor", "auto"):
            raise FileFormatError(f"Invalid format '{format}', use 'json', 'cbor' or 'auto'")
        if filename is None:
            filename = self._auto_filename(".cbor" if format == "cbor" else ".json")
        file_format = self._format_of(filename) if format == "auto" else format

        if self.path:
            os.makedirs(self.path, exist_ok=True)
        full_path = os.path.join(self.path, filename)
        if os.path.exists(full_path) and not force:
            raise FileExistsError(f"Match log {full_path} already exists, pass force=True to overwrite")

        payload = {
            "metadata": self.metadata,
            "records": self._records,
            "stats": {
                "record_count": len(self._records),
                "round_range": list(self._round_range) if self._round_range else None,
            },
        }
        self._dump(payload, full_path, file_format)
        info(f"Wrote {len(self._records)} records to {full_path} ({file_format})")
        return filename

    def read_from_file(self, filename: str) -> None:
        """Replace the current metadata and records with those of a saved match log."""
        full_path = os.path.join(self.path, filename)
        if not os.path.exists(full_path):
            raise FileNotFoundError(f"Match log not found: {full_path}")

        payload = self._load(full_path, self._format_of(filename))
        if not isinstance(payload, dict) or "metadata" not in payload or "records" not in payload:
            raise FileFormatError(f"{full_path} is not a match log: missing 'metadata' or 'records'")

        self.metadata = payload["metadata"]
        self._records = list(payload["records"])
        round_range = (payload.get("stats") or {}).get("round_range")
        self._round_range = (int(round_range[0]), int(round_range[1])) if round_range else None
        self._expected_keys = None
        info(f"Loaded {len(self._records)} records from {full_path}")
