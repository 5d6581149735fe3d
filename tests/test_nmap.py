"""Tests for the nmap wrapper (unit tests, no nmap binary required)."""

import asyncio
import sys

import pytest

from autosecscan.analyzers import PortAnalyzer
from autosecscan.errors import ToolUnavailable
from autosecscan.tools.nmap import NmapScanner, parse_nmap_xml
from autosecscan.tools.nmap import scanner as scanner_module
from autosecscan.tools.runtime import CommandResult, run_command

NMAP_XML = """<?xml version="1.0"?>
<nmaprun>
  <host>
    <address addr="93.184.216.34" addrtype="ipv4"/>
    <ports>
      <port protocol="tcp" portid="22">
        <state state="closed"/>
        <service name="ssh"/>
      </port>
      <port protocol="tcp" portid="80">
        <state state="open"/>
        <service name="http" product="nginx" version="1.25.3"/>
      </port>
      <port protocol="tcp" portid="443">
        <state state="open"/>
        <service name="https" product="nginx"/>
      </port>
      <port protocol="tcp" portid="8080">
        <state state="filtered"/>
      </port>
    </ports>
  </host>
</nmaprun>
"""


@pytest.fixture
def no_path_lookup(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail if a scan looks nmap up on PATH again."""

    def fail(name):
        raise AssertionError(f"unexpected PATH lookup for {name}")

    monkeypatch.setattr(scanner_module, "resolve_binary", fail)


class TestParseNmapXML:
    """XML parsing keeps open ports only."""

    def test_open_ports_only(self):
        ports = parse_nmap_xml(NMAP_XML)
        assert [port.number for port in ports] == [80, 443]
        assert ports[0].version == "nginx 1.25.3"
        assert ports[1].version == "nginx"
        assert ports[1].service == "https"

    def test_invalid_xml(self):
        with pytest.raises(ValueError, match="failed to parse nmap output"):
            parse_nmap_xml("<nmaprun><host>")

    def test_host_without_ports(self):
        assert parse_nmap_xml("<nmaprun><host/></nmaprun>") == []


class TestNmapScanner:
    """Command construction and runner injection."""

    def test_build_command(self):
        assert NmapScanner().build_command("example.com") == [
            "nmap",
            "-Pn",
            "-sV",
            "-T4",
            "--top-ports",
            "1000",
            "-oX",
            "-",
            "example.com",
        ]

    @pytest.mark.asyncio
    async def test_scan_ports_uses_runner(self, no_path_lookup):
        seen: dict = {}

        async def fake_runner(command, timeout=None):
            seen["command"] = command
            seen["timeout"] = timeout
            return CommandResult(command=command, returncode=0, stdout=NMAP_XML, stderr="")

        scan = await NmapScanner(command_runner=fake_runner).scan_ports("example.com", timeout=30)

        assert seen["command"][-1] == "example.com"
        assert seen["timeout"] == 30
        assert len(scan.open_ports) == 2
        assert scan.duration >= 0

    @pytest.mark.asyncio
    async def test_missing_binary(self, no_path_lookup):
        async def fake_runner(command, timeout=None):
            raise FileNotFoundError(2, "No such file or directory", command[0])

        with pytest.raises(ToolUnavailable, match="nmap is not installed"):
            await NmapScanner(command_runner=fake_runner).scan_ports("example.com")

    @pytest.mark.asyncio
    async def test_port_analyzer_passes_sub_timeout(self, no_path_lookup, https_target):
        seen: dict = {}

        async def fake_runner(command, timeout=None):
            seen["timeout"] = timeout
            return CommandResult(command=command, returncode=0, stdout=NMAP_XML, stderr="")

        analyzer = PortAnalyzer(timeout=150, scanner=NmapScanner(command_runner=fake_runner))
        scan = await analyzer.run(https_target)

        assert seen["timeout"] == 150
        assert [port.number for port in scan.open_ports] == [80, 443]


class TestRunCommand:
    """Subprocess runner behavior."""

    @pytest.mark.asyncio
    async def test_captures_output(self):
        result = await run_command([sys.executable, "-c", "print('hello')"])
        assert result.returncode == 0
        assert result.stdout.strip() == "hello"

    @pytest.mark.asyncio
    async def test_rejects_unexpected_exit_code(self):
        with pytest.raises(RuntimeError, match="exit code 3"):
            await run_command([sys.executable, "-c", "import sys; sys.exit(3)"])

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        with pytest.raises(TimeoutError):
            await run_command(
                [sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.2
            )

    @pytest.mark.asyncio
    async def test_cancellation_stops_process(self):
        task = asyncio.create_task(
            run_command([sys.executable, "-c", "import time; time.sleep(30)"])
        )
        await asyncio.sleep(0.2)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
