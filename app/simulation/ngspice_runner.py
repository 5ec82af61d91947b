"""
simulation/ngspice_runner.py

Handles execution of ngspice in batch mode
"""

import logging
import os
import platform
import shutil
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import anyio

from simulation.settings import ENGINE_OFFLINE, EngineSettings

logger = logging.getLogger(__name__)

NETLIST_FILE = "circuit.cir"
CONTROL_FILE = "control.cir"
COMMAND_FILE = "command.cir"


class EngineError(RuntimeError):
    """Base class for failures of the external simulator."""


class EngineTimeout(EngineError):
    """The simulator did not finish within its time budget."""


class EngineAbort(EngineError):
    """The simulator could not be started or died before finishing."""


class EngineNonZeroExit(EngineError):
    """The simulator exited with a non-zero status."""

    def __init__(self, returncode, stderr=""):
        self.returncode = returncode
        self.stderr = stderr
        message = f"ngspice exited with code {returncode}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


@dataclass
class EngineOutput:
    """What one engine invocation produced."""

    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    files: dict[str, bytes] = field(default_factory=dict)

    @property
    def stdout_lines(self):
        return [line for line in self.stdout.splitlines() if line.strip()]


class NgspiceRunner:
    """Runs ngspice simulations and collects their output files"""

    def __init__(self, output_dir="simulation_output", ngspice_cmd=None):
        self.output_dir = output_dir
        os.makedirs(self.output_dir, exist_ok=True)
        self.ngspice_cmd = ngspice_cmd

    def find_ngspice(self):
        """Find ngspice executable on the system"""
        which_result = shutil.which("ngspice")
        if which_result:
            self.ngspice_cmd = which_result
            return which_result

        system = platform.system()

        if system == "Windows":
            possible_paths = [
                r"C:\Program Files (x86)\ngspice\bin\ngspice.exe",
                r"C:\ngspice\bin\ngspice.exe",
                r"C:\Program Files\Spice64\bin\ngspice.exe",
                r"C:\Program Files\ngspice\bin\ngspice.exe",
            ]
        elif system == "Linux":
            possible_paths = [
                "/usr/bin/ngspice",
                "/usr/local/bin/ngspice",
            ]
        elif system == "Darwin":
            possible_paths = [
                "/usr/local/bin/ngspice",
                "/opt/homebrew/bin/ngspice",
            ]
        else:
            possible_paths = []

        for cmd in possible_paths:
            if os.path.exists(cmd):
                self.ngspice_cmd = cmd
                return cmd

        return None

    def _make_run_dir(self, prefix):
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        run_dir = Path(self.output_dir) / f"{prefix}_{timestamp}"
        run_dir.mkdir(parents=True, exist_ok=True)
        return run_dir

    async def _execute(self, run_dir, script_name):
        if self.ngspice_cmd is None and self.find_ngspice() is None:
            raise EngineAbort("ngspice executable not found")

        logger.info("Running %s -b %s in %s", self.ngspice_cmd, script_name, run_dir)
        try:
            result = await anyio.run_process(
                [self.ngspice_cmd, "-b", script_name],
                cwd=str(run_dir),
                check=False,
                stdin=subprocess.DEVNULL,
            )
        except OSError as e:
            raise EngineAbort(f"ngspice aborted: {e}") from e

        stdout = result.stdout.decode("utf-8", errors="replace")
        stderr = result.stderr.decode("utf-8", errors="replace")
        if result.returncode != 0:
            raise EngineNonZeroExit(result.returncode, stderr)
        return EngineOutput(returncode=result.returncode, stdout=stdout, stderr=stderr)

    async def run_simulation(self, control_deck, netlist, output_files=()):
        """
        Write the netlist and control deck into a fresh run directory and run
        the deck in batch mode.

        Returns:
            EngineOutput with the bytes of every file in *output_files* that
            ngspice created. Missing files are not an error.
        """
        try:
            run_dir = self._make_run_dir("run")
            (run_dir / NETLIST_FILE).write_text(netlist)
            (run_dir / CONTROL_FILE).write_text(control_deck)
        except OSError as e:
            raise EngineAbort(f"Failed to write simulation files: {e}") from e

        output = await self._execute(run_dir, CONTROL_FILE)

        for name in output_files:
            path = run_dir / name
            if not path.exists():
                logger.debug("Output file not created: %s", name)
                continue
            try:
                output.files[name] = path.read_bytes()
            except OSError as e:
                logger.warning("Could not read output file %s: %s", name, e)
                continue
            logger.info("Found output file: %s", name)
        return output

    async def run_command(self, command):
        """Run a single interactive command through a throwaway batch script."""
        try:
            run_dir = self._make_run_dir("cmd")
            (run_dir / COMMAND_FILE).write_text(command + "\n")
        except OSError as e:
            raise EngineAbort(f"Error writing command: {e}") from e
        return await self._execute(run_dir, COMMAND_FILE)


class OfflineRunner:
    """Engine stand-in that never produces output files.

    Every run therefore falls through to variables derived from the netlist
    and synthetic traces.
    """

    async def run_simulation(self, control_deck, netlist, output_files=()):
        await anyio.sleep(0)
        return EngineOutput(stdout="offline engine: no simulation performed")

    async def run_command(self, command):
        await anyio.sleep(0)
        return EngineOutput(stdout=f"offline engine: '{command}' not executed")


def create_runner(settings: EngineSettings):
    """Build the runner selected by *settings*."""
    if settings.engine == ENGINE_OFFLINE:
        return OfflineRunner()
    return NgspiceRunner(output_dir=settings.output_dir, ngspice_cmd=settings.ngspice_path)
