"""
Configuration for git-helper.

Two kinds of configuration live here:

  - RunOptions, built by the CLI for a single invocation and passed down
    into the operations; and
  - the persisted settings (API key and model) stored as flat JSON
    documents in a project-scoped file and a user-global file.

Persisted settings are resolved through an explicit ConfigResolver
instead of module-level state, so callers and tests decide which files
and which environment are consulted.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigWriteError
from .git_adapter import find_repository_root

LOG = logging.getLogger(__name__)

API_KEY_ENV = "OPENAI_API_KEY"
CONFIG_FILENAME = ".git-helper.json"
DEFAULT_MODEL = "gpt-4o-mini"

KNOWN_MODELS: List[str] = [
    "gpt-4o-mini",
    "gpt-4o",
    "gpt-4.1-mini",
    "gpt-4.1",
    "gpt-4.1-nano",
]

Scope = Literal["project", "global"]


@dataclass
class RunOptions:
    """
    Options for a single git-helper invocation.
    """

    message: Optional[str] = None
    branch: str = "main"
    remote: str = "origin"
    use_ai: bool = False
    dry_run: bool = False
    verbosity: int = 0


class ConfigRecord(BaseModel):
    """
    Contents of one configuration file.

    Keys this version does not know about are kept so that rewriting a
    file never drops them.
    """

    model_config = ConfigDict(extra="allow")

    api_key: Optional[str] = None
    model: Optional[str] = None


@dataclass
class ConfigPaths:
    project: Path
    user: Path

    @classmethod
    def discover(cls, cwd: Optional[str] = None) -> "ConfigPaths":
        """
        Project file sits at the repository top level, or in cwd when
        there is no repository; the user file sits in the home directory.
        """

        base = find_repository_root(cwd) or cwd or os.getcwd()
        return cls(
            project=Path(base) / CONFIG_FILENAME,
            user=Path.home() / CONFIG_FILENAME,
        )

    def for_scope(self, scope: Scope) -> Path:
        return self.project if scope == "project" else self.user


@dataclass
class EffectiveConfig:
    api_key: Optional[str]
    model: str
    api_key_source: Optional[str]
    model_source: str


def load_record(path: Path) -> ConfigRecord:
    """
    Read a configuration file.

    A missing, unreadable or corrupt file is treated as an empty record.
    A known key holding the wrong type is dropped on its own, so the
    other keys in the file survive the next write.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ConfigRecord()
    except (OSError, UnicodeDecodeError) as exc:
        LOG.debug("Ignoring unreadable config file %s: %s", path, exc)
        return ConfigRecord()

    try:
        data = json.loads(text)
    except ValueError as exc:
        LOG.debug("Ignoring corrupt config file %s: %s", path, exc)
        return ConfigRecord()
    if not isinstance(data, dict):
        LOG.debug("Ignoring config file %s: top level is not an object", path)
        return ConfigRecord()

    for key in ("api_key", "model"):
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            LOG.debug("Ignoring invalid %s in config file %s", key, path)
            del data[key]

    try:
        return ConfigRecord.model_validate(data)
    except ValidationError as exc:
        LOG.debug("Ignoring corrupt config file %s: %s", path, exc)
        return ConfigRecord()


def write_record(path: Path, record: ConfigRecord) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            record.model_dump_json(indent=2, exclude_none=True) + "\n",
            encoding="utf-8",
        )
    except OSError as exc:
        raise ConfigWriteError(f"could not write config file {path}: {exc}") from exc
    LOG.info("Wrote config file %s", path)


def mask_secret(value: str) -> str:
    """Keep only the first and last four characters of a secret."""

    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


class ConfigResolver:
    """
    Resolution context for persisted settings.

    The credential is looked up in the environment, then the project
    file, then the user file. The model is looked up in the project file,
    then the user file, then falls back to DEFAULT_MODEL.
    """

    def __init__(
        self,
        paths: ConfigPaths,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.paths = paths
        self.environ = os.environ if environ is None else environ

    def read(self, scope: Scope) -> ConfigRecord:
        return load_record(self.paths.for_scope(scope))

    def resolve(self) -> EffectiveConfig:
        project = self.read("project")
        user = self.read("global")

        api_key: Optional[str] = None
        api_key_source: Optional[str] = None
        env_key = (self.environ.get(API_KEY_ENV) or "").strip()
        if env_key:
            api_key, api_key_source = env_key, "env"
        elif project.api_key:
            api_key, api_key_source = project.api_key, "project"
        elif user.api_key:
            api_key, api_key_source = user.api_key, "global"

        if project.model:
            model, model_source = project.model, "project"
        elif user.model:
            model, model_source = user.model, "global"
        else:
            model, model_source = DEFAULT_MODEL, "default"

        return EffectiveConfig(
            api_key=api_key,
            model=model,
            api_key_source=api_key_source,
            model_source=model_source,
        )

    def set_value(self, key: Literal["api_key", "model"], value: str, scope: Scope) -> Path:
        """
        Merge one key into the file for scope, creating the file if needed.
        """

        path = self.paths.for_scope(scope)
        record = load_record(path).model_copy(update={key: value})
        write_record(path, record)
        return path

    def reset(self, scope: Scope) -> Path:
        path = self.paths.for_scope(scope)
        write_record(path, ConfigRecord())
        return path
