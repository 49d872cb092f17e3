"""Tests for ReconciliationEngine."""

from mcp_hub.core.reconciliation import ReconciliationEngine
from mcp_hub.core.registry_store import RegistryStore, SeedRegistry
from mcp_hub.integrations.filesystem.fake import FakePackageFilesystem
from mcp_hub.integrations.package_manager.fake import FakePackageManager
from mcp_hub.models.extension import InstallKind
from mcp_hub.models.package import InstalledPackage
from mcp_hub.models.registry import ExtensionCategory, RegistryEntry

SEED_IDS = ["com.miao.mcp", "com.miao.mcp.essential", "com.miao.mcp.behavior-designer-tools"]


def _engine(
    seed: SeedRegistry,
    *,
    packages: list[InstalledPackage] | None = None,
    filesystem: FakePackageFilesystem | None = None,
    list_failure: str | None = None,
    extension_prefix: str | None = "com.miao.mcp",
) -> ReconciliationEngine:
    return ReconciliationEngine(
        registry=RegistryStore(seed),
        package_manager=FakePackageManager(packages=packages, list_failure=list_failure),
        filesystem=filesystem or FakePackageFilesystem(),
        extension_prefix=extension_prefix,
    )


async def test_empty_live_state_returns_exactly_the_seed(seed: SeedRegistry) -> None:
    extensions = await _engine(seed).get_extensions()

    assert [state.id for state in extensions] == SEED_IDS
    assert not any(state.is_installed for state in extensions)


async def test_listing_failure_is_treated_as_empty(seed: SeedRegistry) -> None:
    extensions = await _engine(seed, list_failure="editor busy").get_extensions()

    assert [state.id for state in extensions] == SEED_IDS


async def test_package_manager_install_reports_version(seed: SeedRegistry) -> None:
    engine = _engine(seed, packages=[InstalledPackage(name="com.miao.mcp", version="0.9.0")])

    state = await engine.get_extension("com.miao.mcp")

    assert state is not None
    assert state.install_kind == InstallKind.PACKAGE_MANAGER
    assert state.installed_version == "0.9.0"
    assert state.has_update


async def test_canonical_directory_is_local_clone(seed: SeedRegistry) -> None:
    fs = FakePackageFilesystem(directories={"com.miao.mcp.essential": None})

    state = await _engine(seed, filesystem=fs).get_extension("com.miao.mcp.essential")

    assert state is not None
    assert state.install_kind == InstallKind.LOCAL_CLONE
    assert state.installed_version == "local"
    assert not state.has_update


async def test_legacy_directory_is_detected(seed: SeedRegistry) -> None:
    fs = FakePackageFilesystem(directories={"mcp-core": None})
    engine = _engine(seed, filesystem=fs)

    assert await engine.is_installed("com.miao.mcp")
    assert engine.find_package_directory("com.miao.mcp") == "mcp-core"


async def test_legacy_aliases_are_probed_in_order(seed: SeedRegistry) -> None:
    fs = FakePackageFilesystem(directories={"mcp-core": None, "miao-mcp-core": None})

    engine = _engine(seed, filesystem=fs)

    assert engine.find_package_directory("com.miao.mcp") == "miao-mcp-core"


async def test_manifest_scan_finds_renamed_directory(seed: SeedRegistry) -> None:
    fs = FakePackageFilesystem(directories={"my-fork": "com.miao.mcp.behavior-designer-tools"})
    engine = _engine(seed, filesystem=fs)

    state = await engine.get_extension("com.miao.mcp.behavior-designer-tools")

    assert state is not None
    assert state.install_kind == InstallKind.LOCAL_CLONE
    assert engine.find_package_directory("com.miao.mcp.behavior-designer-tools") == "my-fork"


async def test_manifest_scan_ambiguity_picks_first_sorted(seed: SeedRegistry) -> None:
    fs = FakePackageFilesystem(
        directories={"zeta": "com.miao.mcp.essential", "alpha": "com.miao.mcp.essential"}
    )

    assert _engine(seed, filesystem=fs).find_package_directory("com.miao.mcp.essential") == "alpha"


async def test_unreadable_manifest_is_skipped(seed: SeedRegistry) -> None:
    fs = FakePackageFilesystem(
        directories={"broken": "com.miao.mcp.essential", "good": "com.miao.mcp.essential"},
        unreadable_manifests={"broken"},
    )

    assert _engine(seed, filesystem=fs).find_package_directory("com.miao.mcp.essential") == "good"


async def test_embedded_lock_file_entry_is_local(seed: SeedRegistry) -> None:
    fs = FakePackageFilesystem(
        lock_file={"dependencies": {"com.miao.mcp": {"version": "file:x", "source": "embedded"}}}
    )
    engine = _engine(seed, filesystem=fs)

    state = await engine.get_extension("com.miao.mcp")

    assert state is not None
    assert state.install_kind == InstallKind.LOCAL_CLONE
    assert engine.is_local_package("com.miao.mcp")
    assert engine.find_package_directory("com.miao.mcp") is None


async def test_non_embedded_lock_file_entry_is_ignored(seed: SeedRegistry) -> None:
    fs = FakePackageFilesystem(
        lock_file={"dependencies": {"com.miao.mcp": {"version": "1.0.0", "source": "registry"}}}
    )

    assert not await _engine(seed, filesystem=fs).is_installed("com.miao.mcp")


async def test_package_manager_wins_over_local_directory(seed: SeedRegistry) -> None:
    fs = FakePackageFilesystem(directories={"com.miao.mcp": "com.miao.mcp"})
    engine = _engine(
        seed,
        packages=[InstalledPackage(name="com.miao.mcp", version="1.0.0")],
        filesystem=fs,
    )

    state = await engine.get_extension("com.miao.mcp")

    assert state is not None
    assert state.install_kind == InstallKind.PACKAGE_MANAGER


async def test_unregistered_prefixed_packages_are_community(seed: SeedRegistry) -> None:
    engine = _engine(
        seed,
        packages=[
            InstalledPackage(
                name="com.miao.mcp.animation",
                version="0.2.0",
                display_name="Animation Tools",
                author="Someone",
            ),
            InstalledPackage(name="com.unity.textmeshpro", version="3.0.6"),
        ],
    )

    extensions = await engine.get_extensions()

    assert [state.id for state in extensions] == [*SEED_IDS, "com.miao.mcp.animation"]
    extra = extensions[-1]
    assert extra.category == ExtensionCategory.COMMUNITY
    assert extra.display_name == "Animation Tools"
    assert extra.description == "MCP Extension Package"
    assert extra.is_installed


async def test_prefix_none_lists_no_unregistered_packages(seed: SeedRegistry) -> None:
    engine = _engine(
        seed,
        packages=[InstalledPackage(name="com.miao.mcp.animation", version="0.2.0")],
        extension_prefix=None,
    )

    assert [state.id for state in await engine.get_extensions()] == SEED_IDS


async def test_filtered_views(seed: SeedRegistry) -> None:
    registry = RegistryStore(seed)
    registry.register(
        RegistryEntry(
            id="com.x.vision",
            display_name="Vision",
            description="",
            author="",
            category=ExtensionCategory.VISION,
            package_url="https://registry.example.com/com.x.vision",
            latest_version="2.0.0",
        )
    )
    engine = ReconciliationEngine(
        registry=registry,
        package_manager=FakePackageManager(
            packages=[
                InstalledPackage(name="com.x.vision", version="1.0.0"),
                InstalledPackage(name="com.miao.mcp", version="1.0.0"),
            ]
        ),
        filesystem=FakePackageFilesystem(),
    )

    installed = [s.id for s in await engine.installed_extensions()]
    updates = [s.id for s in await engine.extensions_with_updates()]
    vision = [s.id for s in await engine.extensions_by_category(ExtensionCategory.VISION)]

    assert installed == ["com.miao.mcp", "com.x.vision"]
    assert updates == ["com.x.vision"]
    assert vision == ["com.x.vision"]


async def test_each_pass_rebuilds_from_live_state(seed: SeedRegistry) -> None:
    fs = FakePackageFilesystem(directories={"com.miao.mcp": None})
    engine = _engine(seed, filesystem=fs)
    assert await engine.is_installed("com.miao.mcp")

    fs.delete_directory("com.miao.mcp")

    assert not await engine.is_installed("com.miao.mcp")


async def test_invalidate_clears_snapshot(seed: SeedRegistry) -> None:
    engine = _engine(seed)
    await engine.get_extensions()
    assert engine.snapshot is not None

    engine.invalidate()

    assert engine.snapshot is None
