"""
Configuration handling for patch_porter.

Holds the saved operator preferences (last used repositories root) as JSON,
and the optional tool settings (scratch directory, preference file location)
as YAML.
"""

import json
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field


# Default home for the preference file and the scratch patch directory
DEFAULT_HOME = Path.home() / ".patch_porter"


@dataclass
class SaveResult:
    """Outcome of writing the preference file."""

    success: bool
    path: Path
    error: str | None = None


class Preferences(BaseModel):
    """Values remembered between runs."""

    model_config = ConfigDict(populate_by_name=True)

    repos_root: Path = Field(
        ...,
        alias="reposRoot",
        description="Directory holding the repositories to choose from",
    )
    # Written by nothing in the pipeline today; kept so older files still load
    repos: list[str] | None = Field(
        default=None,
        description="Repository paths offered on the last run",
    )

    @classmethod
    def load(cls, path: Path) -> "Preferences":
        """
        Load preferences from a JSON file.

        A missing file raises FileNotFoundError and malformed content raises
        json.JSONDecodeError or pydantic.ValidationError. There is no fallback
        to empty defaults.
        """
        with open(path) as f:
            data = json.load(f)
        return cls.model_validate(data)

    def save(self, path: Path) -> SaveResult:
        """Overwrite the preference file with this record."""
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(
                    self.model_dump(mode="json", by_alias=True, exclude_none=True),
                    f,
                    indent=2,
                )
        except OSError as e:
            return SaveResult(success=False, path=path, error=str(e))
        return SaveResult(success=True, path=path)


class PorterSettings(BaseModel):
    """Tool settings, optionally loaded from a YAML file."""

    preferences_path: Path = Field(
        default=DEFAULT_HOME / "defaults.json",
        description="JSON file holding the saved preferences",
    )
    patches_dir: Path = Field(
        default=DEFAULT_HOME / "patches",
        description="Scratch directory for exported patches (wiped on every run)",
    )
    three_way: bool = Field(
        default=True,
        description="Apply patches with git am --3way",
    )

    @classmethod
    def from_yaml(cls, path: Path) -> "PorterSettings":
        """Load settings from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    def to_yaml(self, path: Path) -> None:
        """Save settings to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )
