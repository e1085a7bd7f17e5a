# === FILE: site_rank/config.py ===
"""
Loading and validation of a SiteRank run configuration.
Pydantic describes the schema and checks the data.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

FileType = Literal["bin", "txt"]


class RunConfig(BaseModel):
    """Settings for one crawl and/or ranking run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    same_host_only: bool = Field(True, description="Only follow links on the host of the page they were found on.")
    max_visits: int = Field(0, ge=0, description="Maximum distinct pages to visit (0 = unbounded).")
    damping: float = Field(0.85, ge=0.0, le=1.0, description="Probability of following a link instead of jumping.")
    tolerance: float = Field(0.0001, gt=0, description="L1 convergence tolerance of the power iteration.")
    parallel: bool = Field(False, description="Compute PageRank inflow terms on a thread pool.")
    max_workers: Optional[int] = Field(None, ge=1, description="Thread pool size for parallel mode.")
    max_iterations: Optional[int] = Field(None, ge=1, description="Optional cap on power iterations.")
    file_type: FileType = Field("bin", description="Persistence format: bin (snapshot) or txt (edge list).")
    timeout: float = Field(10.0, gt=0, description="Per-request timeout (seconds).")
    user_agent: str = Field("SiteRankBot/1.0", min_length=1, description="User-Agent header.")
    retry_times: int = Field(0, ge=0, description="Retries on 5xx/429 inside the fetcher.")

    @field_validator("file_type", mode="before")
    def _lower_file_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def with_overrides(self, **overrides: Any) -> RunConfig:
        """Return a copy with every non-None override applied and re-validated."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return RunConfig(**{**self.model_dump(), **changes})


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> RunConfig:
    """
    Read YAML or JSON and return a validated RunConfig.
    Raises FileNotFoundError when the config file does not exist.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return RunConfig(**data)
