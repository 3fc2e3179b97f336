"""Report configuration file management.

Reads and writes the JSON config file that controls report output:
format, whether captured output is embedded, and how test failures map
to the exit code.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

VALID_FORMATS = frozenset({"json", "yaml"})

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "format": "json",
    "include_output": True,
    "fail_on_test_failure": True,
}


class ReportConfig:
    """Manages the JSON report configuration file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            text = self.path.read_text()
            data = json.loads(text)
            if isinstance(data, dict):
                self._data = {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, OSError):
            self._data = dict(DEFAULT_CONFIG)

    def save(self) -> None:
        """Write config to the file."""
        if self.path is None:
            raise ValueError("No config file path specified")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._data, f, indent=2)
            f.write("\n")

    @property
    def config(self) -> dict[str, Any]:
        """Get the full configuration dict."""
        return dict(self._data)

    @property
    def format(self) -> str:
        """Get the report format, falling back to the default if invalid."""
        fmt = str(self._data.get("format", DEFAULT_CONFIG["format"]))
        return fmt if fmt in VALID_FORMATS else DEFAULT_CONFIG["format"]

    @property
    def include_output(self) -> bool:
        """Whether captured test output is embedded in the report."""
        return bool(
            self._data.get("include_output", DEFAULT_CONFIG["include_output"])
        )

    @property
    def fail_on_test_failure(self) -> bool:
        """Whether a run with failing tests exits non-zero."""
        return bool(
            self._data.get(
                "fail_on_test_failure",
                DEFAULT_CONFIG["fail_on_test_failure"],
            )
        )

    def set_config(
        self,
        format: str | None = None,
        include_output: bool | None = None,
        fail_on_test_failure: bool | None = None,
    ) -> None:
        """Update configuration values."""
        if format is not None:
            if format not in VALID_FORMATS:
                raise ValueError(f"Invalid format: {format}")
            self._data["format"] = format
        if include_output is not None:
            self._data["include_output"] = include_output
        if fail_on_test_failure is not None:
            self._data["fail_on_test_failure"] = fail_on_test_failure
