"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from mcp_hub.core.config_fetcher import DEFAULT_CONFIG_URLS, DEFAULT_FETCH_TIMEOUT_SECONDS
from mcp_hub.core.install_coordinator import DEFAULT_LOCAL_SOURCE_PREFIXES
from mcp_hub.core.reconciliation import DEFAULT_EXTENSION_PREFIX
from mcp_hub.core.settings import HubSettings, SettingsStore, default_settings_path
from mcp_hub.integrations.downloader.abc import Downloader
from mcp_hub.integrations.filesystem.abc import PackageFilesystem
from mcp_hub.integrations.git.abc import Git
from mcp_hub.integrations.package_manager.abc import PackageManager
from mcp_hub.integrations.time.abc import Time
from mcp_hub.version import __version__

USER_AGENT = f"MCP-Hub-Launcher/{__version__}"


@dataclass(frozen=True)
class HubContext:
    """Immutable context holding all dependencies for hub operations.

    Created at CLI entry point and threaded through the application via
    click's context object. Use for_test() in tests.
    """

    package_manager: PackageManager
    git: Git
    filesystem: PackageFilesystem
    downloader: Downloader
    time: Time
    settings: SettingsStore
    project_root: Path
    config_urls: tuple[str, ...]
    local_source_prefixes: tuple[str, ...]
    extension_prefix: str | None
    fetch_timeout_seconds: float
    debug: bool

    @staticmethod
    def for_test(
        *,
        package_manager: PackageManager | None = None,
        git: Git | None = None,
        filesystem: PackageFilesystem | None = None,
        downloader: Downloader | None = None,
        time: Time | None = None,
        settings: HubSettings | None = None,
        project_root: Path | None = None,
        config_urls: tuple[str, ...] = DEFAULT_CONFIG_URLS,
        local_source_prefixes: tuple[str, ...] = DEFAULT_LOCAL_SOURCE_PREFIXES,
        extension_prefix: str | None = DEFAULT_EXTENSION_PREFIX,
        debug: bool = False,
    ) -> "HubContext":
        """Create test context with optional pre-configured integration classes.

        Any integration left as None is replaced by an empty fake. When no git
        is given, the FakeGit writes successful clones into the fake
        filesystem so a later reconciliation pass sees them. Settings are kept
        in memory only.

        Example:
            >>> filesystem = FakePackageFilesystem(directories={"mcp-core": "com.miao.mcp"})
            >>> ctx = HubContext.for_test(filesystem=filesystem, project_root=tmp_path)
        """
        from mcp_hub.integrations.downloader.fake import FakeDownloader
        from mcp_hub.integrations.filesystem.fake import FakePackageFilesystem
        from mcp_hub.integrations.git.fake import FakeGit
        from mcp_hub.integrations.package_manager.fake import FakePackageManager
        from mcp_hub.integrations.time.fake import FakeTime

        if filesystem is None:
            filesystem = FakePackageFilesystem()

        if git is None:
            git = FakeGit(
                filesystem=filesystem if isinstance(filesystem, FakePackageFilesystem) else None
            )

        if package_manager is None:
            package_manager = FakePackageManager()

        if downloader is None:
            downloader = FakeDownloader()

        if time is None:
            time = FakeTime()

        if settings is None:
            settings = HubSettings()

        if project_root is None:
            project_root = Path("/test/project")

        return HubContext(
            package_manager=package_manager,
            git=git,
            filesystem=filesystem,
            downloader=downloader,
            time=time,
            settings=SettingsStore(settings, None),
            project_root=project_root,
            config_urls=config_urls,
            local_source_prefixes=local_source_prefixes,
            extension_prefix=extension_prefix,
            fetch_timeout_seconds=DEFAULT_FETCH_TIMEOUT_SECONDS,
            debug=debug,
        )


def create_context(
    *,
    project_root: Path,
    settings_path: Path | None = None,
    debug: bool = False,
) -> HubContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Raises:
        ValueError: If the settings file exists but is malformed
    """
    from mcp_hub.integrations.downloader.real import RealDownloader
    from mcp_hub.integrations.filesystem.real import RealPackageFilesystem
    from mcp_hub.integrations.git.real import RealGit
    from mcp_hub.integrations.package_manager.real import UnityManifestPackageManager
    from mcp_hub.integrations.time.real import RealTime

    project_root = project_root.resolve()
    settings = SettingsStore.load(settings_path or default_settings_path())

    return HubContext(
        package_manager=UnityManifestPackageManager(project_root),
        git=RealGit(),
        filesystem=RealPackageFilesystem(project_root / "Packages"),
        downloader=RealDownloader(user_agent=USER_AGENT),
        time=RealTime(),
        settings=settings,
        project_root=project_root,
        config_urls=DEFAULT_CONFIG_URLS,
        local_source_prefixes=DEFAULT_LOCAL_SOURCE_PREFIXES,
        extension_prefix=DEFAULT_EXTENSION_PREFIX,
        fetch_timeout_seconds=DEFAULT_FETCH_TIMEOUT_SECONDS,
        debug=debug,
    )
