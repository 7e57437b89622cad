import numpy as np

from config import DISTANCE_SCALE, ORBIT_SEGMENTS, PLANETS
from simulation import BodyState, OrbitPath, SimulationState, load_bodies


def test_load_bodies_scales_distance():
    bodies = load_bodies()
    assert len(bodies) == len(PLANETS)
    earth = next(b for b in bodies if b.name == "Earth")
    assert earth.command == "399"
    assert earth.distance == 10 * DISTANCE_SCALE
    assert np.array_equal(earth.position, [earth.distance, 0, 0])


def test_new_bodies_are_unpositioned_without_orbit():
    for body in load_bodies():
        assert body.state is BodyState.UNPOSITIONED
        assert body.orbit is None
        assert body.visible


def test_ensure_orbit_creates_exactly_one():
    body = load_bodies([{"name": "Mars", "radius": 0.5, "distance": 3, "command": 499}], distance_scale=2)[0]
    orbit = body.ensure_orbit()
    assert body.ensure_orbit() is orbit
    assert orbit.radius == 6
    assert orbit.segments == ORBIT_SEGMENTS
    assert body.command == "499"


def test_orbit_path_points_follow_rotation():
    orbit = OrbitPath(radius=4, segments=16, rotation=np.pi)
    points = orbit.points()
    assert points.shape == (16, 3)
    assert np.allclose(points[0], [-4, 0, 0], atol=1e-9)


def test_visibility_toggle_keeps_position():
    state = SimulationState(bodies=load_bodies())
    venus = state.find_body("Venus")
    venus.position = np.array([1.0, 2.0, 3.0])

    assert state.set_visibility("Venus", False)
    assert not venus.visible
    assert np.array_equal(venus.position, [1.0, 2.0, 3.0])

    assert state.set_visibility("Venus", True)
    assert venus.visible


def test_unknown_body():
    state = SimulationState(bodies=load_bodies())
    assert state.find_body("Pluto") is None
    assert not state.set_visibility("Pluto", False)


def test_positioned_count():
    state = SimulationState(bodies=load_bodies())
    assert state.positioned_count() == 0
    state.bodies[0].positioned = True
    assert state.positioned_count() == 1
