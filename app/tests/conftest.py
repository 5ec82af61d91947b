"""
Shared test fixtures for the ngspicex test suite.

Fixtures provide sample netlists and engine stand-ins; nothing here starts
ngspice.
"""

import sys
from pathlib import Path

# Ensure app/ is on sys.path so bare imports (models, simulation, controllers)
# work when running individual test files (e.g., python -m pytest app/tests/unit/test_foo.py).
_app_dir = str(Path(__file__).resolve().parent.parent)
if _app_dir not in sys.path:
    sys.path.insert(0, _app_dir)

import anyio
import pytest
from simulation.ngspice_runner import EngineOutput

RC_LOWPASS = """RC Low-pass Filter
* first-order filter driven by a 1 kHz sine
V1 in 0 SIN(0 1 1k)
R1 in out 1k
C1 out 0 1u
.tran 0.01m 5m
.end
"""

VOLTAGE_DIVIDER = """Voltage Divider
V1 in 0 dc 10
R1 in mid 1k
R2 mid 0 1k
.op
.end
"""


class FakeRunner:
    """Engine stand-in returning canned output, optionally after a delay."""

    def __init__(self, files=None, stdout="", delay=0.0, error=None):
        self.files = dict(files or {})
        self.stdout = stdout
        self.delay = delay
        self.error = error
        self.simulations = []
        self.commands = []

    async def run_simulation(self, control_deck, netlist, output_files=()):
        self.simulations.append((control_deck, netlist, tuple(output_files)))
        if self.delay:
            await anyio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return EngineOutput(stdout=self.stdout, files=dict(self.files))

    async def run_command(self, command):
        self.commands.append(command)
        if self.delay:
            await anyio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return EngineOutput(stdout=self.stdout)


@pytest.fixture
def rc_lowpass():
    return RC_LOWPASS


@pytest.fixture
def voltage_divider():
    return VOLTAGE_DIVIDER


@pytest.fixture
def fake_runner():
    return FakeRunner()
