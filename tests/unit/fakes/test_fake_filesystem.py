"""Tests for FakePackageFilesystem and FakeGit."""

from pathlib import Path

import pytest

from mcp_hub.integrations.filesystem.fake import FakePackageFilesystem
from mcp_hub.integrations.git.abc import GitResult
from mcp_hub.integrations.git.fake import FakeGit


def test_read_only_directory_deletes_after_clearing() -> None:
    fs = FakePackageFilesystem(directories={"pkg": "com.x.y"}, read_only_directories={"pkg"})

    with pytest.raises(PermissionError):
        fs.delete_directory("pkg")
    fs.clear_read_only("pkg")
    fs.delete_directory("pkg")

    assert not fs.directory_exists("pkg")
    assert fs.deleted_directories == ["pkg"]


def test_undeletable_directory_always_fails() -> None:
    fs = FakePackageFilesystem(directories={"pkg": None}, undeletable_directories={"pkg"})
    fs.clear_read_only("pkg")

    with pytest.raises(PermissionError):
        fs.delete_directory("pkg")
    assert fs.directory_exists("pkg")


def test_unreadable_manifest_raises_value_error() -> None:
    fs = FakePackageFilesystem(directories={"pkg": "com.x.y"}, unreadable_manifests={"pkg"})

    with pytest.raises(ValueError):
        fs.read_manifest_name("pkg")


def test_list_directories_is_sorted() -> None:
    fs = FakePackageFilesystem(directories={"b": None, "a": None, "c": None})

    assert fs.list_directories() == ["a", "b", "c"]


async def test_fake_git_materializes_successful_clone() -> None:
    fs = FakePackageFilesystem()
    git = FakeGit(filesystem=fs)

    result = await git.clone("https://example.com/r.git", cwd=Path("/p"), directory="com.x.y")

    assert result.succeeded
    assert fs.directory_exists("com.x.y")
    assert fs.read_manifest_name("com.x.y") == "com.x.y"
    assert fs.is_git_checkout("com.x.y")


async def test_fake_git_failure_can_leave_partial_directory() -> None:
    fs = FakePackageFilesystem()
    git = FakeGit(
        results={"v1.0.0": GitResult(exit_code=128, stdout="", stderr="not found")},
        filesystem=fs,
        leave_partial_on_failure=True,
    )

    result = await git.clone(
        "https://example.com/r.git", cwd=Path("/p"), directory="com.x.y", branch="v1.0.0"
    )

    assert not result.succeeded
    assert fs.directory_exists("com.x.y")
    assert git.clone_calls == [("https://example.com/r.git", Path("/p"), "com.x.y", "v1.0.0")]


def test_list_directories_skips_hidden() -> None:
    fs = FakePackageFilesystem(directories={".staging": "com.x.y", "pkg": None})

    assert fs.list_directories() == ["pkg"]
    assert fs.directory_exists(".staging")


def test_rename_moves_manifest_and_checkout() -> None:
    fs = FakePackageFilesystem(directories={".pkg": "com.x.y"}, git_checkouts={".pkg"})

    fs.rename_directory(".pkg", "pkg")

    assert not fs.directory_exists(".pkg")
    assert fs.read_manifest_name("pkg") == "com.x.y"
    assert fs.is_git_checkout("pkg")
    assert fs.renamed_directories == [(".pkg", "pkg")]


def test_rename_onto_existing_directory_fails() -> None:
    fs = FakePackageFilesystem(directories={".pkg": None, "pkg": None})

    with pytest.raises(FileExistsError):
        fs.rename_directory(".pkg", "pkg")
