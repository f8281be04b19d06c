"""Typed configuration loading and access.

The release policy (branch names, version matrix) is fixed in code; the
environment it runs against is described by a `relcut.toml` file:

    [repo]
    url = "https://github.com/example/product.git"
    slug = "example/product"

    [storage]
    bucket = "product-release"

Every section is optional and falls back to the defaults below.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_str_list, get_table

__all__ = [
    "BuildConfig",
    "CiConfig",
    "Config",
    "ConfigError",
    "DocsConfig",
    "LogConfig",
    "MailConfig",
    "RegistryConfig",
    "RepoConfig",
    "StampConfig",
    "StorageConfig",
    "WorkspaceConfig",
    "DEFAULT_CONFIG_NAME",
    "load_config",
]

DEFAULT_CONFIG_NAME = "relcut.toml"

DEFAULT_STAMP_PATTERN = r'gitVersion\s+string\s*=\s*"(?P<version>[^"]*)"'


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RepoConfig:
    """Source repository and its hosting location."""

    url: str = "https://github.com/example/product.git"
    slug: str = "example/product"
    remote: str = "origin"


@dataclass(frozen=True, slots=True)
class WorkspaceConfig:
    """Where per-branch session workspaces live."""

    base_dir: str = "~/relcut"
    tree_dir: str = "src"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    command: tuple[str, ...] = ("make", "release")
    output_dir: str = "_output"
    version_env: str = "RELCUT_GIT_VERSION"
    tarball_glob: str = "release-tars/*.tar.gz"


@dataclass(frozen=True, slots=True)
class StampConfig:
    """Source file carrying the embedded version identifier."""

    path: str = "pkg/version/base.go"
    pattern: str = DEFAULT_STAMP_PATTERN


@dataclass(frozen=True, slots=True)
class DocsConfig:
    version_command: tuple[str, ...] | None = ("hack/versionize-docs.sh",)
    refresh_command: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class StorageConfig:
    bucket: str = "product-release"
    prefix: str = "release"


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    registry: str = "gcr.io/example"
    image_glob: str = "images/*.tar"


@dataclass(frozen=True, slots=True)
class CiConfig:
    """Build-status source: the CI workflow whose green runs are release candidates."""

    workflow: str = "ci.yml"
    limit: int = 50


@dataclass(frozen=True, slots=True)
class MailConfig:
    operator: str | None = None
    sender: str | None = None
    to: tuple[str, ...] = ()
    cc: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Rotated transcript log settings."""

    dir: str = "~/relcut/logs"
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    repo: RepoConfig = field(default_factory=RepoConfig)
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    stamp: StampConfig = field(default_factory=StampConfig)
    docs: DocsConfig = field(default_factory=DocsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    ci: CiConfig = field(default_factory=CiConfig)
    mail: MailConfig = field(default_factory=MailConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        repo: StrDict = get_table(data, "repo") or {}
        workspace: StrDict = get_table(data, "workspace") or {}
        build: StrDict = get_table(data, "build") or {}
        stamp: StrDict = get_table(data, "stamp") or {}
        docs: StrDict = get_table(data, "docs") or {}
        storage: StrDict = get_table(data, "storage") or {}
        registry: StrDict = get_table(data, "registry") or {}
        ci: StrDict = get_table(data, "ci") or {}
        mail: StrDict = get_table(data, "mail") or {}
        log: StrDict = get_table(data, "log") or {}

        d_repo = RepoConfig()
        d_ws = WorkspaceConfig()
        d_build = BuildConfig()
        d_stamp = StampConfig()
        d_docs = DocsConfig()
        d_storage = StorageConfig()
        d_registry = RegistryConfig()
        d_ci = CiConfig()
        d_log = LogConfig()

        return cls(
            repo=RepoConfig(
                url=get_str(repo, "url") or d_repo.url,
                slug=get_str(repo, "slug") or d_repo.slug,
                remote=get_str(repo, "remote") or d_repo.remote,
            ),
            workspace=WorkspaceConfig(
                base_dir=get_str(workspace, "base_dir") or d_ws.base_dir,
                tree_dir=get_str(workspace, "tree_dir") or d_ws.tree_dir,
            ),
            build=BuildConfig(
                command=get_str_list(build, "command") or d_build.command,
                output_dir=get_str(build, "output_dir") or d_build.output_dir,
                version_env=get_str(build, "version_env") or d_build.version_env,
                tarball_glob=get_str(build, "tarball_glob") or d_build.tarball_glob,
            ),
            stamp=StampConfig(
                path=get_str(stamp, "path") or d_stamp.path,
                pattern=get_str(stamp, "pattern") or d_stamp.pattern,
            ),
            docs=DocsConfig(
                version_command=_optional_command(docs, "version_command", d_docs.version_command),
                refresh_command=_optional_command(docs, "refresh_command", d_docs.refresh_command),
            ),
            storage=StorageConfig(
                bucket=get_str(storage, "bucket") or d_storage.bucket,
                prefix=get_str(storage, "prefix") or d_storage.prefix,
            ),
            registry=RegistryConfig(
                registry=get_str(registry, "registry") or d_registry.registry,
                image_glob=get_str(registry, "image_glob") or d_registry.image_glob,
            ),
            ci=CiConfig(
                workflow=get_str(ci, "workflow") or d_ci.workflow,
                limit=get_int(ci, "limit") or d_ci.limit,
            ),
            mail=MailConfig(
                operator=get_str(mail, "operator"),
                sender=get_str(mail, "sender"),
                to=get_str_list(mail, "to") or (),
                cc=get_str_list(mail, "cc") or (),
            ),
            log=LogConfig(
                dir=get_str(log, "dir") or d_log.dir,
                max_bytes=get_int(log, "max_bytes") or d_log.max_bytes,
                backup_count=get_int(log, "backup_count") or d_log.backup_count,
            ),
        )


def _optional_command(
    table: Mapping[str, object], key: str, default: tuple[str, ...] | None
) -> tuple[str, ...] | None:
    # An explicit empty list disables the step.
    if key not in table:
        return default
    cmd = get_str_list(table, key)
    if not cmd:
        return None
    return cmd


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relcut.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))

