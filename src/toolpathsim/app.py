"""Application state: program text, compiled program and playback.

``ViewerApp`` is the composition root a front end drives.  It owns the
current :class:`CompiledProgram`, the playback transport and the persisted
settings; the interpreter and kinematic queries stay free of any state.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config.machine_profiles import MachineProfile, get_profile
from .config.settings import KeyValueStore, MemoryStore, ViewerSettings
from .core.interpreter import compile_program
from .core.kinematics import (
    ToolpathStatistics,
    adaptive_pointer_scale,
    aggregate_statistics,
    segment_duration,
)
from .core.playback import SPEED_OPTIONS, PlaybackState, advance, current_position
from .core.toolpath.base import Command, CompiledProgram, Position
from .gcode.templates import get_template
from .gcode.validate import ValidationResult, check_envelope, validate_gcode

log = logging.getLogger(__name__)


class ViewerApp:
    """Owns the program being viewed and its playback."""

    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store = store if store is not None else MemoryStore()
        self.settings = ViewerSettings.load(self._store)
        if not self.settings.gcode_text:
            self.settings.gcode_text = get_template("sample").gcode

        self.profile = self._resolve_profile(self.settings.machine_profile)
        self.playback = PlaybackState(speed=self.settings.playback_speed)
        self.program: CompiledProgram = compile_program(self.settings.gcode_text)
        self._statistics: Optional[ToolpathStatistics] = None

    @staticmethod
    def _resolve_profile(name: str) -> MachineProfile:
        try:
            return get_profile(name)
        except KeyError:
            log.warning("Unknown machine profile %r, using generic", name)
            return get_profile("generic")

    # -- program --------------------------------------------------------

    @property
    def gcode_text(self) -> str:
        return self.settings.gcode_text

    def set_program_text(self, text: str) -> None:
        """Recompile *text* and publish it, resetting playback."""
        program = compile_program(text)
        self.program = program
        self._statistics = None
        self.settings.gcode_text = text
        self.playback.reset()
        self.settings.save(self._store, "gcode_text")

    def load_template(self, template_id: str) -> None:
        template = get_template(template_id)
        self.set_program_text(template.gcode)
        self.set_file_name(template.file_name)

    def load_file(self, path: Path) -> None:
        """Read a program from *path*.

        Raises FileNotFoundError if *path* does not exist.
        """
        path = Path(path)
        text = path.read_text(errors="replace")
        log.info("Loaded %s (%d bytes)", path.name, len(text))
        self.set_program_text(text)
        self.set_file_name(path.name)

    def set_file_name(self, name: str) -> None:
        self.settings.current_file_name = name
        self.settings.save(self._store, "current_file_name")

    def set_machine_profile(self, name: str) -> None:
        self.profile = get_profile(name)
        self._statistics = None
        self.settings.machine_profile = name
        self.settings.save(self._store, "machine_profile")

    # -- playback -------------------------------------------------------

    def play(self) -> None:
        self.playback.play()

    def pause(self) -> None:
        self.playback.pause()

    def stop(self) -> None:
        self.playback.stop()

    def step_forward(self) -> None:
        self.playback.step_forward(self.program)

    def step_backward(self) -> None:
        self.playback.step_backward(self.program)

    def seek(self, index: int) -> None:
        self.playback.seek(self.program, index)

    def set_playback_speed(self, speed: float) -> None:
        if speed not in SPEED_OPTIONS:
            raise ValueError(f"speed must be one of {SPEED_OPTIONS}, got {speed}")
        self.playback.speed = speed
        self.settings.playback_speed = speed
        self.settings.save(self._store, "playback_speed")

    def tick(self, elapsed: float) -> None:
        """Advance playback by *elapsed* seconds of wall time."""
        advance(
            self.playback, self.program, elapsed,
            self.profile.rapid_feed, self.profile.default_feed,
        )

    @property
    def tool_position(self) -> Position:
        return current_position(self.playback, self.program)

    @property
    def current_command(self) -> Optional[Command]:
        return self.program.command_for_point(self.playback.current_index)

    # -- derived data ---------------------------------------------------

    @property
    def statistics(self) -> ToolpathStatistics:
        if self._statistics is None:
            self._statistics = aggregate_statistics(
                self.program, self.profile.rapid_feed, self.profile.default_feed,
            )
        return self._statistics

    def segment_duration(self, from_index: int, to_index: int) -> float:
        return segment_duration(
            self.program, from_index, to_index,
            self.profile.rapid_feed, self.profile.default_feed,
        )

    @property
    def pointer_scale(self) -> float:
        return adaptive_pointer_scale(self.program)

    def validate(self, include_envelope: bool = False) -> ValidationResult:
        result = validate_gcode(self.settings.gcode_text)
        if include_envelope:
            result.issues.extend(check_envelope(self.program, self.profile.envelope).issues)
        return result

    # -- view preferences ----------------------------------------------

    def toggle_visibility(self, key: str) -> bool:
        """Flip a visibility flag and return its new value.

        Raises KeyError for an unknown flag.
        """
        visibility = dict(self.settings.visibility)
        visibility[key] = not visibility[key]
        self.settings.visibility = visibility
        self.settings.save(self._store, "visibility")
        return visibility[key]

    def set_camera_preset(self, preset: str) -> None:
        self.settings.camera_preset = preset
        self.settings.save(self._store, "camera_preset")

    def toggle_depth_color(self) -> bool:
        self.settings.depth_color_enabled = not self.settings.depth_color_enabled
        self.settings.save(self._store, "depth_color_enabled")
        return self.settings.depth_color_enabled

    def set_depth_filter(self, z_min: float, z_max: float) -> None:
        self.settings.depth_filter = {"min": z_min, "max": z_max}
        self.settings.save(self._store, "depth_filter")

    def set_tool_diameter(self, diameter: float) -> None:
        if diameter <= 0:
            raise ValueError("tool diameter must be positive")
        self.settings.tool_diameter = diameter
        self.settings.save(self._store, "tool_diameter")
