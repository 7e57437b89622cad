from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

import numpy as np

from config import DISTANCE_SCALE, ORBIT_SEGMENTS, PLANETS
from physics import ORIGIN, calculate_orbit_points

logger = logging.getLogger(__name__)


class BodyState(Enum):
    UNPOSITIONED = "unpositioned"
    POSITIONED = "positioned"


@dataclass
class OrbitPath:
    """Circular orbit ring of a body. Spins about Z, always centered on the origin."""
    radius: float
    segments: int = ORBIT_SEGMENTS
    rotation: float = 0.0
    center: np.ndarray = field(default_factory=lambda: ORIGIN.copy())

    def points(self):
        return calculate_orbit_points(self.radius, self.rotation, self.segments, self.center)


@dataclass
class CelestialBody:
    """
    One body of the catalog.

    `position` is only ever replaced as a whole array (never edited in place) so that
    the render loop reading it from another thread sees either the old or the new point.
    """
    name: str
    command: str
    distance: float
    radius: float
    position: np.ndarray = field(default_factory=lambda: ORIGIN.copy())
    orbit: Optional[OrbitPath] = None
    visible: bool = True
    positioned: bool = False

    @property
    def state(self):
        return BodyState.POSITIONED if self.positioned else BodyState.UNPOSITIONED

    def ensure_orbit(self):
        """Creates the orbit ring on first use; afterwards always returns the same one."""
        if self.orbit is None:
            self.orbit = OrbitPath(radius=self.distance)
        return self.orbit


@dataclass
class DeepSkyObject:
    name: str
    ra_deg: float
    dec_deg: float
    distance: float
    diameter: float
    position: np.ndarray = field(default_factory=lambda: ORIGIN.copy())


@dataclass
class SimulationState:
    """
    Everything the refresh worker writes and the renderer reads.

    Owned by main.py and handed to both sides explicitly.
    """
    bodies: List[CelestialBody] = field(default_factory=list)
    deep_sky_objects: List[DeepSkyObject] = field(default_factory=list)
    ephemeris_date: date = field(default_factory=date.today)
    highlighted: Optional[CelestialBody] = None
    last_refresh: Optional[datetime] = None
    # Number of refresh cycles currently running; cycles may overlap
    active_refreshes: int = 0
    # Set once the user picks a date; until then the daily refresh follows today
    date_pinned: bool = False
    # Short message for the status line, e.g. a rejected date
    notice: str = ""
    _refresh_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def refreshing(self):
        return self.active_refreshes > 0

    def begin_refresh(self):
        with self._refresh_lock:
            self.active_refreshes += 1

    def end_refresh(self):
        with self._refresh_lock:
            self.active_refreshes = max(0, self.active_refreshes - 1)

    def find_body(self, name):
        for body in self.bodies:
            if body.name == name:
                return body
        return None

    def set_visibility(self, name, visible):
        """Shows or hides a body. Its stored position is left alone."""
        body = self.find_body(name)
        if body is None:
            logger.warning(f"No body named {name} to toggle")
            return False
        body.visible = visible
        logger.info(f"Checkbox for {name} is {'checked' if visible else 'unchecked'}")
        return True

    def positioned_count(self):
        return sum(1 for body in self.bodies if body.positioned)


def load_bodies(catalog=None, distance_scale=DISTANCE_SCALE):
    """
    Builds the body list from the static catalog.

    Every body starts at (distance, 0, 0) with no orbit ring; the first successful
    ephemeris update moves it and creates the ring.
    """
    if catalog is None:
        catalog = PLANETS

    bodies = []
    for entry in catalog:
        distance = float(entry['distance']) * distance_scale
        body = CelestialBody(
            name=entry['name'],
            command=str(entry['command']),
            distance=distance,
            radius=float(entry.get('radius', 1.0)),
            position=np.array([distance, 0.0, 0.0]),
        )
        bodies.append(body)
    logger.info(f"Loaded {len(bodies)} bodies from catalog.")
    return bodies
