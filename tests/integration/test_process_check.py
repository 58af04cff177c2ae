"""
End-to-end check cycles against a stand-in compiler script.
The script behaves like the real compiler: it runs in the source directory
and leaves <basename>.lst behind.
"""
import asyncio
import os
import stat
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from gamscheck.engine import CheckEngine
from gamscheck.session import SessionState
from gamscheck.utils.config import ConfigManager

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")

FAKE_COMPILER = """#!/bin/sh
if [ -f slow ]; then
    exec sleep 5
fi
if [ -f nolisting ]; then
    exit 3
fi
base="${1%.*}"
cat > "$base.lst" <<'LST'
GAMS Compilation
   2  x = y + z;
****        $140  $141
****  LINE 2 INPUT
140  Unknown symbol
141  Symbol declared but no values have been assigned
**** 2 ERROR(S)   0 WARNING(S)
LST
exit 2
"""

SOURCE = "set i /1*3/;\nx = y + z;\ndisplay x;\n"


@pytest.fixture
def workdir(tmp_path):
    script = tmp_path / "fakegams"
    script.write_text(FAKE_COMPILER)
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    source = tmp_path / "model.gms"
    source.write_text(SOURCE)
    return tmp_path


@pytest.fixture
def engine(workdir):
    config = ConfigManager(config_dir=workdir / ".gamscheck")
    config.config["compiler"] = str(workdir / "fakegams")
    return CheckEngine(config)


def test_check_file_reads_listing(engine, workdir):
    result = engine.check_file(workdir / "model.gms")

    assert [d.error_code for d in result] == ["140", "141"]
    assert all(d.line_number == 2 for d in result)
    assert result[0].message == "140: Unknown symbol"
    assert not (workdir / "model.lst").exists()


def test_no_listing_reports_empty(engine, workdir):
    (workdir / "nolisting").touch()
    report = MagicMock()

    session = asyncio.run(engine.check(workdir / "model.gms", report))

    report.assert_called_once_with([])
    assert session.state == SessionState.REPORTED_EMPTY


def test_missing_compiler_reports_empty(workdir):
    config = ConfigManager(config_dir=workdir / ".gamscheck")
    config.config["compiler"] = "no-such-gams-binary"
    report = MagicMock()

    session = asyncio.run(CheckEngine(config).check(workdir / "model.gms", report))

    report.assert_called_once_with([])
    assert session.failed


def test_newer_check_stops_running_compiler(engine, workdir):
    slow = workdir / "slow"
    slow.touch()

    async def scenario():
        first_report, second_report = MagicMock(), MagicMock()
        first = asyncio.create_task(engine.check(workdir / "model.gms", first_report))
        await asyncio.sleep(0.3)
        slow.unlink()
        second = await engine.check(workdir / "model.gms", second_report)
        return await first, second, first_report, second_report

    first, second, first_report, second_report = asyncio.run(asyncio.wait_for(scenario(), timeout=4))

    assert first.state == SessionState.SUPERSEDED
    first_report.assert_not_called()
    assert second.state == SessionState.REPORTED
    assert len(second_report.call_args[0][0]) == 2
