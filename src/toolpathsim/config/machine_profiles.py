"""Machine profiles: traverse and default feed rates plus travel limits.

Feed rates are in mm/min, travel limits in mm.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..core.kinematics import DEFAULT_FEED_RATE, RAPID_FEED_RATE
from ..gcode.validate import MachineEnvelope


@dataclass
class MachineProfile:
    """Kinematic settings used for time estimates and travel checks."""

    name: str
    description: str
    rapid_feed: float = RAPID_FEED_RATE
    default_feed: float = DEFAULT_FEED_RATE
    envelope: MachineEnvelope = field(default_factory=MachineEnvelope)

    def __str__(self) -> str:
        e = self.envelope
        return (
            f"{self.name}: {self.description}  "
            f"rapid {self.rapid_feed:g} mm/min, default feed {self.default_feed:g} mm/min  "
            f"X[{e.x_min:g}, {e.x_max:g}] Y[{e.y_min:g}, {e.y_max:g}] Z[{e.z_min:g}, {e.z_max:g}]"
        )


DEFAULT_PROFILE = "generic"

_PROFILES: dict[str, MachineProfile] = {
    "generic": MachineProfile(
        name="generic",
        description="Generic machine",
    ),
    "router": MachineProfile(
        name="router",
        description="Hobby CNC router, 600 x 400 mm bed",
        rapid_feed=5000.0,
        default_feed=1000.0,
        envelope=MachineEnvelope(
            x_min=0.0, x_max=600.0,
            y_min=0.0, y_max=400.0,
            z_min=-80.0, z_max=80.0,
        ),
    ),
    "mill": MachineProfile(
        name="mill",
        description="Benchtop knee mill, 300 x 200 mm table",
        rapid_feed=2500.0,
        default_feed=300.0,
        envelope=MachineEnvelope(
            x_min=-150.0, x_max=150.0,
            y_min=-100.0, y_max=100.0,
            z_min=-250.0, z_max=50.0,
        ),
    ),
}


def get_profile(name: str) -> MachineProfile:
    """Return the profile called *name*.

    Raises
    ------
    KeyError:
        If no profile has that name.
    """
    try:
        return _PROFILES[name]
    except KeyError:
        raise KeyError(f"Unknown machine profile: {name!r}") from None


def list_profiles() -> list[MachineProfile]:
    return list(_PROFILES.values())
