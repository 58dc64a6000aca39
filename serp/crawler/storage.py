"""Filesystem-backed storage for the result dataset and run manifests.

Storage owns the on-disk layout. Other modules should use this API instead of
building paths manually.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Iterator, Mapping

from .config import CrawlConfig
from .types import CrawlStats, JSONDict, ResultRecord


DEFAULT_DATASET_NAME = "default"


class Storage:
    """Persist crawl outputs under a single `output_dir` root.

    The dataset is an append-only JSONL file; appends are serialized so
    concurrent workers never interleave partial lines.
    """

    def __init__(self, output_dir: str | Path, *, dataset_name: str = DEFAULT_DATASET_NAME) -> None:
        self.output_dir = Path(output_dir)
        self.dataset_name = dataset_name

        self.datasets_dir = self.output_dir / "datasets"
        self.manifests_dir = self.output_dir / "manifests"
        self.logs_dir = self.output_dir / "logs"

        self.dataset_path = self.datasets_dir / f"{dataset_name}.jsonl"
        self.crawl_config_path = self.manifests_dir / "crawl_config.json"
        self.crawl_stats_path = self.manifests_dir / "crawl_stats.json"

        self._jsonl_lock = threading.Lock()

        self._ensure_layout()

    @property
    def dataset_id(self) -> str:
        return self.dataset_name

    @property
    def paths(self) -> JSONDict:
        """Return important output paths for logging/CLI status messages."""

        return {
            "output_dir": str(self.output_dir),
            "dataset": str(self.dataset_path),
            "crawl_config": str(self.crawl_config_path),
            "crawl_stats": str(self.crawl_stats_path),
            "log_dir": str(self.logs_dir),
        }

    def _ensure_layout(self) -> None:
        self.datasets_dir.mkdir(parents=True, exist_ok=True)
        self.manifests_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def append_result(self, record: ResultRecord | Mapping[str, Any]) -> None:
        """Append one dataset row."""

        payload = record.to_json() if isinstance(record, ResultRecord) else dict(record)
        self._append_jsonl(self.dataset_path, payload)

    def iter_results(self) -> Iterator[dict[str, Any]]:
        """Yield dataset rows in append order, skipping unreadable lines."""

        if not self.dataset_path.exists():
            return

        with self.dataset_path.open("r", encoding="utf-8") as handle:
            for line in handle:
                line = line.strip()
                if not line:
                    continue
                try:
                    payload = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(payload, dict):
                    yield payload

    def count_results(self) -> dict[str, int]:
        """Count success and error rows, for auditing run completeness."""

        counts = {"ok": 0, "error": 0}
        for payload in self.iter_results():
            counts["error" if payload.get("#error") else "ok"] += 1
        return counts

    def save_crawl_config(self, config: CrawlConfig | Mapping[str, Any]) -> None:
        """Write crawl config manifest atomically as JSON."""

        payload: Mapping[str, Any]
        if isinstance(config, CrawlConfig):
            payload = config.to_dict()
        else:
            payload = config
        self._atomic_write_json(self.crawl_config_path, dict(payload))

    def save_crawl_stats(self, stats: CrawlStats | Mapping[str, Any]) -> None:
        """Write crawl stats manifest atomically as JSON."""

        payload: Mapping[str, Any]
        if isinstance(stats, CrawlStats):
            payload = stats.to_json()
        else:
            payload = stats
        self._atomic_write_json(self.crawl_stats_path, dict(payload))

    def _append_jsonl(self, path: Path, payload: Mapping[str, Any]) -> None:
        line = json.dumps(payload, ensure_ascii=False)
        with self._jsonl_lock:
            with path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")

    @staticmethod
    def _atomic_write_json(path: Path, payload: Mapping[str, Any]) -> None:
        content = json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"
        tmp_fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=path.name + ".",
            suffix=".tmp",
        )
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise


__all__ = ["DEFAULT_DATASET_NAME", "Storage"]
