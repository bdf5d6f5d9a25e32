#
# config.py
# Duplicacy Backup Runner
#
# Defines dataclasses for global settings, per-job storage definitions and the immutable run request, plus the TOML loaders that build them.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Configuration objects for the duplicacy runner.

A GlobalConfig bundles the host-wide paths (engine binary, lock and log
directories) and the optional mail settings. A JobConfig describes one named
backup job: the repository directory and the ordered storage operations for
each phase. Both are loaded from TOML files; every global key has a default
so the global file is optional.
"""
from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .errors import ConfigError, GlobalConfigError
from .operations import Backup, Check, Copy, Phase, Prune, StorageOperation

DEFAULT_HOME = Path("~/.duplicacy-runner")
DEFAULT_LOG_FILE_COUNT = 5


@dataclass
class MailSettings:
    from_address: str
    to_addresses: Tuple[str, ...]
    server_hostname: str
    server_port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True


@dataclass
class GlobalConfig:
    duplicacy_path: str = "duplicacy"
    lock_dir: Optional[Path] = None
    log_dir: Optional[Path] = None
    config_dir: Optional[Path] = None
    log_file_count: int = DEFAULT_LOG_FILE_COUNT
    mail: Optional[MailSettings] = None

    def __post_init__(self):
        # The engine is launched without a shell, so "~" must be expanded here.
        self.duplicacy_path = os.path.expanduser(self.duplicacy_path)
        # Normalize inputs to Path objects even when callers pass strings.
        self.config_dir = Path(self.config_dir or DEFAULT_HOME).expanduser()
        self.lock_dir = Path(self.lock_dir or self.config_dir / "locks").expanduser()
        self.log_dir = Path(self.log_dir or self.config_dir / "logs").expanduser()

    def lock_path(self, config_name: str) -> Path:
        return self.lock_dir / f"{config_name}.lock"

    def log_path(self, config_name: str) -> Path:
        return self.log_dir / f"{config_name}.log"


@dataclass(frozen=True)
class JobConfig:
    name: str
    repository: Path
    backups: Tuple[Backup, ...] = ()
    copies: Tuple[Copy, ...] = ()
    prunes: Tuple[Prune, ...] = ()
    checks: Tuple[Check, ...] = ()

    def operations_for(self, phase: Phase) -> Tuple[StorageOperation, ...]:
        return {
            Phase.BACKUP: self.backups,
            Phase.COPY: self.copies,
            Phase.PRUNE: self.prunes,
            Phase.CHECK: self.checks,
        }[phase]


@dataclass(frozen=True)
class RunRequest:
    """Everything the command line decided, built once at startup."""

    config_name: str
    phases: FrozenSet[Phase] = frozenset()
    send_mail: bool = False
    debug: bool = False


def selected_phases(backup: bool, prune: bool, check: bool) -> FrozenSet[Phase]:
    # Copies ride along with backups, as duplicacy users expect from -b.
    phases = set()
    if backup:
        phases.update((Phase.BACKUP, Phase.COPY))
    if prune:
        phases.add(Phase.PRUNE)
    if check:
        phases.add(Phase.CHECK)
    return frozenset(phases)


def _load_toml(path: Path, error_cls) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        raise error_cls(f"Configuration file does not exist: {path}")
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise error_cls(f"Invalid configuration file {path}: {e}")


def _required_str(entry: Dict[str, Any], key: str, where: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{where}: missing or empty '{key}'")
    return value.strip()


def _threads(entry: Dict[str, Any], where: str) -> int:
    value = entry.get("threads", 1)
    # bool is an int subclass; "threads = true" is a typo, not one thread.
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{where}: 'threads' must be a positive integer, got {value!r}")
    return value


def _tables(raw: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = raw.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ConfigError(f"'{key}' must be an array of tables ([[{key}]])")
    return value


def find_job_config(name: str, config_dir: Path) -> Tuple[str, Path]:
    """Resolve ``-f`` to ``(config_name, path)``.

    A ``.toml`` path is used as-is and a path without the suffix gets it
    appended; both are named after the file stem so the lock and log files
    stay inside their directories. A bare name is looked up as
    ``<config_dir>/<name>.toml``.
    """
    candidate = Path(name).expanduser()
    path_like = candidate.is_absolute() or len(candidate.parts) > 1
    if candidate.suffix == ".toml":
        if path_like or candidate.is_file():
            return candidate.stem, candidate
        return candidate.stem, Path(config_dir) / candidate.name
    if path_like:
        return candidate.name, candidate.parent / f"{candidate.name}.toml"
    return name, Path(config_dir) / f"{name}.toml"


def parse_job_config(name: str, raw: Dict[str, Any]) -> JobConfig:
    repository = _required_str(raw, "repository", name)

    backups = []
    for i, entry in enumerate(_tables(raw, "storage"), start=1):
        where = f"{name}: storage #{i}"
        backups.append(Backup(storage=_required_str(entry, "name", where), threads=_threads(entry, where)))
    if not backups:
        raise ConfigError(f"{name}: at least one [[storage]] entry is required")

    copies = []
    for i, entry in enumerate(_tables(raw, "copy"), start=1):
        where = f"{name}: copy #{i}"
        copies.append(
            Copy(
                source=_required_str(entry, "from", where),
                destination=_required_str(entry, "to", where),
                threads=_threads(entry, where),
            )
        )

    prunes = []
    for i, entry in enumerate(_tables(raw, "prune"), start=1):
        where = f"{name}: prune #{i}"
        prunes.append(Prune(storage=_required_str(entry, "storage", where), keep=_required_str(entry, "keep", where)))

    checks = []
    for i, entry in enumerate(_tables(raw, "check"), start=1):
        where = f"{name}: check #{i}"
        check_all = entry.get("all", False)
        if not isinstance(check_all, bool):
            raise ConfigError(f"{where}: 'all' must be true or false")
        checks.append(Check(storage=_required_str(entry, "storage", where), check_all=check_all))

    return JobConfig(
        name=name,
        repository=Path(repository).expanduser(),
        backups=tuple(backups),
        copies=tuple(copies),
        prunes=tuple(prunes),
        checks=tuple(checks),
    )


def load_job_config(name: str, config_dir: Path) -> JobConfig:
    config_name, path = find_job_config(name, config_dir)
    return parse_job_config(config_name, _load_toml(path, ConfigError))


def _parse_mail(raw: Dict[str, Any]) -> MailSettings:
    to_value = raw.get("to_address")
    if isinstance(to_value, str):
        to_addresses = tuple(a.strip() for a in to_value.split(",") if a.strip())
    elif isinstance(to_value, list):
        to_addresses = tuple(str(a).strip() for a in to_value if str(a).strip())
    else:
        to_addresses = ()

    from_address = raw.get("from_address")
    hostname = raw.get("server_hostname")
    if not from_address or not to_addresses or not hostname:
        raise GlobalConfigError("[email] requires from_address, to_address and server_hostname")

    port = raw.get("server_port", 587)
    if isinstance(port, bool) or not isinstance(port, int):
        raise GlobalConfigError(f"[email] server_port must be an integer, got {port!r}")

    return MailSettings(
        from_address=str(from_address),
        to_addresses=to_addresses,
        server_hostname=str(hostname),
        server_port=port,
        username=raw.get("username"),
        password=raw.get("password"),
        use_tls=bool(raw.get("use_tls", True)),
    )


def parse_global_config(raw: Dict[str, Any]) -> GlobalConfig:
    count = raw.get("log_file_count", DEFAULT_LOG_FILE_COUNT)
    if isinstance(count, bool) or not isinstance(count, int) or count < 2:
        raise GlobalConfigError(f"log_file_count must be an integer >= 2, got {count!r}")

    mail_raw = raw.get("email")
    if mail_raw is not None and not isinstance(mail_raw, dict):
        raise GlobalConfigError("[email] must be a table")

    return GlobalConfig(
        duplicacy_path=str(raw.get("duplicacy_path", "duplicacy")),
        lock_dir=raw.get("lock_directory"),
        log_dir=raw.get("log_directory"),
        config_dir=raw.get("config_directory"),
        log_file_count=count,
        mail=_parse_mail(mail_raw) if mail_raw else None,
    )


def load_global_config(path: Optional[Path]) -> GlobalConfig:
    """Load the optional global settings file; defaults apply without one."""
    if path is None:
        return GlobalConfig()
    return parse_global_config(_load_toml(Path(path).expanduser(), GlobalConfigError))


__all__ = [
    "DEFAULT_HOME",
    "DEFAULT_LOG_FILE_COUNT",
    "MailSettings",
    "GlobalConfig",
    "JobConfig",
    "RunRequest",
    "selected_phases",
    "find_job_config",
    "parse_job_config",
    "load_job_config",
    "parse_global_config",
    "load_global_config",
]
