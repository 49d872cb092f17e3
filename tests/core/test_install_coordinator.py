"""Tests for InstallCoordinator routing, cloning and removal."""

from dataclasses import dataclass

import pytest

from mcp_hub.core.errors import (
    DirectoryRemovalError,
    DirectoryRenameError,
    DirectoryResolutionError,
    ExtensionNotFoundError,
    GitOperationError,
    PackageManagerError,
)
from mcp_hub.core.events import EventBus, ExtensionsChanged, HubEvent, OperationCompleted
from mcp_hub.core.install_coordinator import InstallCoordinator
from mcp_hub.core.reconciliation import ReconciliationEngine
from mcp_hub.core.registry_store import RegistryStore, SeedRegistry
from mcp_hub.integrations.filesystem.fake import FakePackageFilesystem
from mcp_hub.integrations.git.abc import GitResult
from mcp_hub.integrations.git.fake import FakeGit
from mcp_hub.integrations.package_manager.fake import FakePackageManager
from mcp_hub.models.extension import ExtensionState, InstallKind
from mcp_hub.models.package import InstalledPackage
from mcp_hub.models.registry import ExtensionCategory, RegistryEntry

CORE_ID = "com.miao.mcp"
CORE_URL = "https://github.com/MiAO-AI-Lab/MiAO-MCP-for-Unity.git"
REGISTRY_ID = "com.vendor.vision"
REGISTRY_URL = "com.vendor.vision@2.0.0"
FAILED = GitResult(exit_code=128, stdout="", stderr="fatal: Remote branch not found")
STAGING = f".{CORE_ID}"


@dataclass
class _Setup:
    coordinator: InstallCoordinator
    engine: ReconciliationEngine
    filesystem: FakePackageFilesystem
    git: FakeGit
    package_manager: FakePackageManager
    events: list[HubEvent]

    async def state(self, extension_id: str) -> ExtensionState:
        state = await self.engine.get_extension(extension_id)
        assert state is not None
        return state


def _setup(
    seed: SeedRegistry,
    *,
    filesystem: FakePackageFilesystem | None = None,
    git_results: dict[str | None, GitResult] | None = None,
    leave_partial_on_failure: bool = False,
    package_manager: FakePackageManager | None = None,
) -> _Setup:
    fs = filesystem or FakePackageFilesystem()
    git = FakeGit(
        results=git_results, filesystem=fs, leave_partial_on_failure=leave_partial_on_failure
    )
    pm = package_manager or FakePackageManager()
    registry = RegistryStore(seed)
    registry.register(
        RegistryEntry(
            id=REGISTRY_ID,
            display_name="Vendor Vision",
            description="",
            author="Vendor",
            category=ExtensionCategory.VISION,
            package_url=REGISTRY_URL,
            latest_version="2.0.0",
        )
    )
    engine = ReconciliationEngine(registry=registry, package_manager=pm, filesystem=fs)
    bus = EventBus()
    events: list[HubEvent] = []
    bus.subscribe(events.append)
    coordinator = InstallCoordinator(
        registry=registry,
        reconciliation=engine,
        package_manager=pm,
        git=git,
        filesystem=fs,
        events=bus,
    )
    return _Setup(coordinator, engine, fs, git, pm, events)


class TestRouting:
    def test_local_prefix_is_case_insensitive(self, seed: SeedRegistry) -> None:
        s = _setup(seed)
        entry = RegistryEntry(
            id="x",
            display_name="x",
            description="",
            author="",
            category=ExtensionCategory.COMMUNITY,
            package_url="https://GITHUB.com/miao-ai-lab/x.git",
        )

        assert s.coordinator.is_local_source(entry)

    def test_other_urls_use_package_manager(self, seed: SeedRegistry) -> None:
        s = _setup(seed)
        entry = RegistryEntry(
            id="x",
            display_name="x",
            description="",
            author="",
            category=ExtensionCategory.COMMUNITY,
            package_url="https://github.com/someone-else/x.git",
        )

        assert not s.coordinator.is_local_source(entry)


class TestLocalInstall:
    async def test_clones_release_tag_into_canonical_directory(self, seed: SeedRegistry) -> None:
        s = _setup(seed)

        state = await s.coordinator.install(await s.state(CORE_ID))

        assert state.is_installed
        assert state.install_kind == InstallKind.LOCAL_CLONE
        assert state.installed_version == "local"
        assert s.git.clone_calls == [(CORE_URL, s.filesystem.packages_root, CORE_ID, "v1.0.0")]
        assert s.filesystem.root_ensured
        assert await s.engine.is_installed(CORE_ID)

    async def test_existing_directory_is_idempotent(self, seed: SeedRegistry) -> None:
        s = _setup(seed, filesystem=FakePackageFilesystem(directories={CORE_ID: CORE_ID}))

        first = await s.coordinator.install(await s.state(CORE_ID))
        second = await s.coordinator.install(await s.state(CORE_ID))

        assert first.install_kind == InstallKind.LOCAL_CLONE
        assert second.install_kind == InstallKind.LOCAL_CLONE
        assert s.git.clone_calls == []

    async def test_existing_legacy_directory_skips_clone(self, seed: SeedRegistry) -> None:
        s = _setup(seed, filesystem=FakePackageFilesystem(directories={"mcp-core": None}))

        await s.coordinator.install(await s.state(CORE_ID))

        assert s.git.clone_calls == []

    async def test_falls_back_to_default_branch(self, seed: SeedRegistry) -> None:
        s = _setup(seed, git_results={"v1.0.0": FAILED}, leave_partial_on_failure=True)

        state = await s.coordinator.install(await s.state(CORE_ID))

        assert state.install_kind == InstallKind.LOCAL_CLONE
        assert state.installed_version == "local"
        assert [call[3] for call in s.git.clone_calls] == ["v1.0.0", None]
        assert s.filesystem.deleted_directories == [CORE_ID]
        assert s.filesystem.directory_exists(CORE_ID)

    async def test_both_clones_failing_raises_and_cleans_up(self, seed: SeedRegistry) -> None:
        s = _setup(
            seed,
            git_results={"v1.0.0": FAILED, None: FAILED},
            leave_partial_on_failure=True,
        )
        state = await s.state(CORE_ID)

        with pytest.raises(GitOperationError, match="Remote branch not found"):
            await s.coordinator.install(state)

        assert not s.filesystem.directory_exists(CORE_ID)
        assert not state.is_installed
        assert s.events == [
            OperationCompleted(
                extension_id=CORE_ID,
                operation="install",
                success=False,
                error=str(GitOperationError(CORE_URL, FAILED.stderr)),
            )
        ]

    async def test_undeletable_partial_clone_is_reported(self, seed: SeedRegistry) -> None:
        fs = FakePackageFilesystem(undeletable_directories={CORE_ID})
        s = _setup(
            seed,
            filesystem=fs,
            git_results={"v1.0.0": FAILED, None: FAILED},
            leave_partial_on_failure=True,
        )

        with pytest.raises(GitOperationError, match="partial clone was left behind") as exc_info:
            await s.coordinator.install(await s.state(CORE_ID))

        assert "Access denied" in str(exc_info.value)
        assert exc_info.value.cleanup_error is not None
        assert fs.directory_exists(CORE_ID)


class TestPackageManagerInstall:
    async def test_adds_package_url(self, seed: SeedRegistry) -> None:
        s = _setup(seed, package_manager=FakePackageManager(add_versions={REGISTRY_ID: "2.0.0"}))

        state = await s.coordinator.install(await s.state(REGISTRY_ID))

        assert s.package_manager.added == [(REGISTRY_ID, REGISTRY_URL)]
        assert state.install_kind == InstallKind.PACKAGE_MANAGER
        assert state.installed_version == "2.0.0"
        assert s.events == [
            OperationCompleted(extension_id=REGISTRY_ID, operation="install", success=True),
            ExtensionsChanged(),
        ]

    async def test_package_manager_error_surfaces(self, seed: SeedRegistry) -> None:
        s = _setup(
            seed,
            package_manager=FakePackageManager(add_failures={REGISTRY_ID: "Cannot resolve"}),
        )

        with pytest.raises(PackageManagerError, match="Cannot resolve"):
            await s.coordinator.install(await s.state(REGISTRY_ID))

    async def test_unknown_extension_is_rejected(self, seed: SeedRegistry) -> None:
        s = _setup(seed)
        orphan = ExtensionState.from_installed_package(
            InstalledPackage(name="com.miao.mcp.orphan", version="1.0.0")
        )

        with pytest.raises(ExtensionNotFoundError):
            await s.coordinator.install(orphan)


class TestUninstall:
    async def test_removes_legacy_alias_only(self, seed: SeedRegistry) -> None:
        fs = FakePackageFilesystem(directories={"mcp-core": None, "unrelated": None})
        s = _setup(seed, filesystem=fs)

        state = await s.coordinator.uninstall(await s.state(CORE_ID))

        assert fs.deleted_directories == ["mcp-core"]
        assert fs.deleted_meta_files == ["mcp-core"]
        assert fs.directory_exists("unrelated")
        assert not state.is_installed
        assert state.install_kind == InstallKind.NOT_INSTALLED

    async def test_git_checkout_is_made_writable_first(self, seed: SeedRegistry) -> None:
        fs = FakePackageFilesystem(
            directories={CORE_ID: CORE_ID},
            git_checkouts={CORE_ID},
            read_only_directories={CORE_ID},
        )
        s = _setup(seed, filesystem=fs)

        await s.coordinator.uninstall(await s.state(CORE_ID))

        assert fs.cleared_read_only == [CORE_ID]
        assert fs.deleted_directories == [CORE_ID]

    async def test_retries_after_clearing_read_only(self, seed: SeedRegistry) -> None:
        fs = FakePackageFilesystem(
            directories={CORE_ID: CORE_ID}, read_only_directories={CORE_ID}
        )
        s = _setup(seed, filesystem=fs)

        await s.coordinator.uninstall(await s.state(CORE_ID))

        assert fs.cleared_read_only == [CORE_ID]
        assert not fs.directory_exists(CORE_ID)

    async def test_removal_failure_reports_both_attempts(self, seed: SeedRegistry) -> None:
        fs = FakePackageFilesystem(
            directories={CORE_ID: CORE_ID}, undeletable_directories={CORE_ID}
        )
        s = _setup(seed, filesystem=fs)

        with pytest.raises(DirectoryRemovalError) as exc_info:
            await s.coordinator.uninstall(await s.state(CORE_ID))

        assert "Access denied" in exc_info.value.first_error
        assert "Access denied" in exc_info.value.second_error
        assert fs.deleted_meta_files == []

    async def test_lock_file_only_install_cannot_be_resolved(self, seed: SeedRegistry) -> None:
        fs = FakePackageFilesystem(
            lock_file={"dependencies": {CORE_ID: {"version": "file:x", "source": "embedded"}}}
        )
        s = _setup(seed, filesystem=fs)

        with pytest.raises(DirectoryResolutionError):
            await s.coordinator.uninstall(await s.state(CORE_ID))

    async def test_package_manager_install_is_removed_by_id(self, seed: SeedRegistry) -> None:
        pm = FakePackageManager(packages=[InstalledPackage(name=REGISTRY_ID, version="1.0.0")])
        s = _setup(seed, package_manager=pm)

        state = await s.coordinator.uninstall(await s.state(REGISTRY_ID))

        assert pm.removed == [REGISTRY_ID]
        assert not state.is_installed

    async def test_package_manager_wins_over_local_directory(self, seed: SeedRegistry) -> None:
        fs = FakePackageFilesystem(directories={CORE_ID: CORE_ID})
        pm = FakePackageManager(packages=[InstalledPackage(name=CORE_ID, version="1.0.0")])
        s = _setup(seed, filesystem=fs, package_manager=pm)

        await s.coordinator.uninstall(await s.state(CORE_ID))

        assert pm.removed == [CORE_ID]
        assert fs.directory_exists(CORE_ID)


class TestUpdate:
    async def test_local_update_replaces_directory(self, seed: SeedRegistry) -> None:
        fs = FakePackageFilesystem(directories={"mcp-core": None})
        s = _setup(seed, filesystem=fs)

        state = await s.coordinator.update(await s.state(CORE_ID))

        assert [call[2] for call in s.git.clone_calls] == [STAGING]
        assert fs.deleted_directories == ["mcp-core"]
        assert fs.deleted_meta_files == ["mcp-core"]
        assert fs.renamed_directories == [(STAGING, CORE_ID)]
        assert fs.directory_exists(CORE_ID)
        assert not fs.directory_exists(STAGING)
        assert state.install_kind == InstallKind.LOCAL_CLONE

    async def test_local_update_without_existing_directory_clones_in_place(
        self, seed: SeedRegistry
    ) -> None:
        s = _setup(seed)
        state = await s.state(CORE_ID)

        await s.coordinator.update(state)

        assert [call[2] for call in s.git.clone_calls] == [CORE_ID]
        assert s.filesystem.renamed_directories == []
        assert state.is_installed

    async def test_failed_local_update_keeps_existing_directory(self, seed: SeedRegistry) -> None:
        fs = FakePackageFilesystem(directories={"mcp-core": None})
        s = _setup(
            seed,
            filesystem=fs,
            git_results={"v1.0.0": FAILED, None: FAILED},
            leave_partial_on_failure=True,
        )
        state = await s.state(CORE_ID)

        with pytest.raises(GitOperationError):
            await s.coordinator.update(state)

        assert fs.directory_exists("mcp-core")
        assert not fs.directory_exists(STAGING)
        assert "mcp-core" not in fs.deleted_directories
        assert state.is_installed
        assert state.install_kind == InstallKind.LOCAL_CLONE
        assert (await s.state(CORE_ID)).is_installed

    async def test_stale_staging_directory_is_replaced(self, seed: SeedRegistry) -> None:
        fs = FakePackageFilesystem(directories={"mcp-core": None, STAGING: None})
        s = _setup(seed, filesystem=fs)

        await s.coordinator.update(await s.state(CORE_ID))

        assert fs.deleted_directories == [STAGING, "mcp-core"]
        assert fs.directory_exists(CORE_ID)

    async def test_failed_swap_marks_state_uninstalled(self, seed: SeedRegistry) -> None:
        fs = FakePackageFilesystem(
            directories={"mcp-core": None}, unrenamable_directories={STAGING}
        )
        s = _setup(seed, filesystem=fs)
        state = await s.state(CORE_ID)

        with pytest.raises(DirectoryRenameError, match="Access denied"):
            await s.coordinator.update(state)

        assert not fs.directory_exists("mcp-core")
        assert not state.is_installed
        assert s.events[-1] == OperationCompleted(
            extension_id=CORE_ID,
            operation="update",
            success=False,
            error=str(DirectoryRenameError(STAGING, CORE_ID, f"Access denied: {STAGING}")),
        )

    async def test_package_manager_update_reports_new_version(self, seed: SeedRegistry) -> None:
        pm = FakePackageManager(
            packages=[InstalledPackage(name=REGISTRY_ID, version="1.0.0")],
            add_versions={REGISTRY_ID: "2.0.0"},
        )
        s = _setup(seed, package_manager=pm)
        state = await s.state(REGISTRY_ID)
        assert state.has_update

        await s.coordinator.update(state)

        assert state.installed_version == "2.0.0"
        assert not state.has_update
        assert (await s.state(REGISTRY_ID)).installed_version == "2.0.0"
