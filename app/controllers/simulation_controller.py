"""
SimulationController - Orchestrates the simulation pipeline.

Coordinates netlist parsing, analysis detection, control deck generation,
engine execution and output interpretation. At most one simulation and one
interactive command may be outstanding at a time; a second request fails
immediately instead of queueing.
"""

import logging
from typing import Any, Callable, Optional

import anyio

from models.analysis import AnalysisKind
from models.circuit import CircuitModel
from models.result import SimulationResult
from simulation.analysis_detector import detect_analysis
from simulation.control_deck import generate_control_deck
from simulation.netlist_parser import parse_netlist
from simulation.ngspice_runner import EngineError, EngineOutput, EngineTimeout, create_runner
from simulation.output_interpreter import interpret_output
from simulation.settings import EngineSettings

logger = logging.getLogger(__name__)


class SimulationError(RuntimeError):
    """Base class for requests the controller refuses to start."""


class AlreadyRunningError(SimulationError):
    def __init__(self):
        super().__init__("A simulation is already running")


class CommandPendingError(SimulationError):
    def __init__(self):
        super().__init__("An engine command is already pending")


class NetlistHasErrors(SimulationError):
    """The netlist has parse errors; nothing was sent to the engine."""

    def __init__(self, errors):
        self.errors = tuple(errors)
        first = self.errors[0]
        super().__init__(
            f"Netlist has {len(self.errors)} parse error(s); "
            f"line {first.line}: {first.message}"
        )


class SimulationController:
    """
    Controller for the simulation pipeline.

    Observer events:
        netlist_updated (CircuitModel) - The netlist was reparsed
        simulation_started (AnalysisKind) - A run began
        simulation_completed (SimulationResult) - A run produced a result
        simulation_failed (Exception) - A run was abandoned
        variables_changed (list[str]) - The selected variables changed
        output (str) - A line was added to the output log
    """

    def __init__(self, runner=None, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        self.runner = runner if runner is not None else create_runner(self.settings)
        self.netlist_text = ""
        self.circuit = CircuitModel()
        self.result: Optional[SimulationResult] = None
        self.available_variables: list[str] = []
        self.selected_variables: list[str] = []
        self.output_log: list[str] = []
        self.preferred_analysis: Optional[str] = None
        self._running = False
        self._command_pending = False
        self._observers: list[Callable[[str, Any], None]] = []

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def command_pending(self) -> bool:
        return self._command_pending

    def add_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Register a callback for controller events."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Callable[[str, Any], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self, event: str, data: Any) -> None:
        for observer in self._observers:
            try:
                observer(event, data)
            except (TypeError, AttributeError, RuntimeError) as e:
                logger.error("Error notifying observer: %s", e)

    def log(self, message: str) -> None:
        """Append a line to the output log."""
        self.output_log.append(message)
        self._notify("output", message)

    def clear_log(self) -> None:
        self.output_log.clear()

    # --- Netlist ---

    def update_netlist(self, text: str) -> CircuitModel:
        """Replace the netlist text and reparse it."""
        circuit = parse_netlist(text)
        self.netlist_text = text
        self.circuit = circuit
        logger.info(
            "Parsed netlist: %d components, %d directives, %d errors",
            len(circuit.components),
            len(circuit.directives),
            len(circuit.errors),
        )
        self._notify("netlist_updated", circuit)
        return circuit

    def set_preferred_analysis(self, name: Optional[str]) -> None:
        """Record the analysis chosen in the UI. Display only; detection ignores it."""
        self.preferred_analysis = name

    # --- Simulation ---

    async def run_simulation(self, netlist: Optional[str] = None) -> SimulationResult:
        """
        Run one simulation of the current (or given) netlist.

        Raises:
            AlreadyRunningError: another run is outstanding.
            NetlistHasErrors: the netlist did not parse cleanly.
            EngineError: the engine timed out, aborted or exited non-zero.
        """
        if self._running:
            raise AlreadyRunningError()

        if netlist is not None:
            self.update_netlist(netlist)
        circuit = self.circuit
        if circuit.has_errors:
            raise NetlistHasErrors(circuit.errors)

        self._running = True
        self.result = None
        self.available_variables = []
        self.selected_variables = []
        self._notify("variables_changed", [])
        try:
            kind = detect_analysis(circuit.directives)
            self.log("> Starting ngspice simulation...")
            self.log(f"> Analysis type: {kind.label}")
            self._notify("simulation_started", kind)

            netlist_text = self.netlist_text
            deck = generate_control_deck(netlist_text, kind)
            output = await self._run_engine(deck, netlist_text, kind)

            if output.files:
                for name in output.files:
                    self.log(f"> Found output file: {name}")
            else:
                self.log("> No output files found, generating mock data")

            outputs = dict(output.files)
            if output.stdout.strip():
                outputs["stdout"] = output.stdout
            result = interpret_output(kind, outputs, circuit)
            self.available_variables = list(result.variables)
            self.selected_variables = self.available_variables[: self.settings.selected_variable_count]
            result = result.with_visible(self.selected_variables)

            self.result = result
            self.log(f"> {kind.label} analysis completed - {len(result.variables)} variables")
            self._notify("variables_changed", list(self.selected_variables))
            self._notify("simulation_completed", result)
            return result
        except EngineError as e:
            logger.error("Simulation failed: %s", e)
            self.log(f"> Error: {e}")
            self._notify("simulation_failed", e)
            raise
        finally:
            self._running = False

    async def _run_engine(self, deck: str, netlist_text: str, kind: AnalysisKind) -> EngineOutput:
        timeout = self.settings.simulation_timeout
        try:
            with anyio.fail_after(timeout):
                return await self.runner.run_simulation(deck, netlist_text, kind.output_files)
        except TimeoutError as e:
            raise EngineTimeout(f"Simulation timed out after {timeout:g} seconds") from e

    # --- Interactive commands ---

    async def execute_command(self, command: str) -> EngineOutput:
        """
        Send one command line to the engine.

        Raises:
            CommandPendingError: another command is outstanding.
            EngineError: the engine timed out, aborted or exited non-zero.
        """
        if self._command_pending:
            raise CommandPendingError()

        self._command_pending = True
        timeout = self.settings.command_timeout
        try:
            with anyio.fail_after(timeout):
                output = await self.runner.run_command(command)
        except TimeoutError as e:
            raise EngineTimeout(f"Command timed out after {timeout:g} seconds") from e
        finally:
            self._command_pending = False

        for line in output.stdout_lines:
            self.log(line)
        return output

    # --- Variable selection ---

    def toggle_variable(self, name: str) -> list[str]:
        """Flip whether *name* is plotted; returns the new selection."""
        if name in self.selected_variables:
            self.selected_variables.remove(name)
        elif name in self.available_variables:
            self.selected_variables.append(name)
        else:
            logger.warning("Ignoring toggle of unknown variable %s", name)
            return list(self.selected_variables)

        if self.result is not None:
            self.result = self.result.with_visible(self.selected_variables)
        self._notify("variables_changed", list(self.selected_variables))
        return list(self.selected_variables)
