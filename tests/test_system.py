import subprocess
from unittest import mock

import pytest

from txrelay import system
from txrelay.system import format_bytes, get_memory_usage


def test_format_bytes_below_kilobyte_is_plain():
    assert format_bytes(512) == "512 B"
    assert format_bytes(1023) == "1023 B"


def test_format_bytes_one_kilobyte():
    assert format_bytes(1024) == "1.00 KB"


@pytest.mark.parametrize(
    "size, unit",
    [
        (2048, " KB"),
        (5 * 1024 * 1024, " MB"),
        (3 * 1024 * 1024 * 1024, " GB"),
    ],
)
def test_format_bytes_picks_unit(size, unit):
    assert format_bytes(size).endswith(unit)


def test_linux_memory_usage_reads_status(tmp_path):
    status = tmp_path / "status"
    status.write_text("Name:\tpython\nVmSize:\t  200 kB\nVmRSS:\t  100 kB\n")
    with mock.patch.object(system, "_PROC_STATUS", status), mock.patch.object(
        system.sys, "platform", "linux"
    ):
        result = get_memory_usage()
    assert result == (100 * 1024, 200 * 1024)


def test_linux_memory_usage_missing_field(tmp_path):
    status = tmp_path / "status"
    status.write_text("VmRSS:\t  100 kB\n")
    with mock.patch.object(system, "_PROC_STATUS", status), mock.patch.object(
        system.sys, "platform", "linux"
    ):
        assert get_memory_usage() is None


def test_linux_memory_usage_unreadable(tmp_path):
    with mock.patch.object(system, "_PROC_STATUS", tmp_path / "absent"), mock.patch.object(
        system.sys, "platform", "linux"
    ):
        assert get_memory_usage() is None


def test_macos_memory_usage_parses_ps():
    completed = subprocess.CompletedProcess(
        args=["ps"], returncode=0, stdout="  RSS    VSZ\n   10     20\n"
    )
    with mock.patch.object(system.sys, "platform", "darwin"), mock.patch.object(
        system.subprocess, "run", return_value=completed
    ):
        assert get_memory_usage() == (10 * 1024, 20 * 1024)


def test_macos_memory_usage_short_output():
    completed = subprocess.CompletedProcess(args=["ps"], returncode=1, stdout="  RSS    VSZ\n")
    with mock.patch.object(system.sys, "platform", "darwin"), mock.patch.object(
        system.subprocess, "run", return_value=completed
    ):
        assert get_memory_usage() is None


def test_other_platform_has_no_memory_usage():
    with mock.patch.object(system.sys, "platform", "win32"):
        assert get_memory_usage() is None