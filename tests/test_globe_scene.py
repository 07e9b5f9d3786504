"""
Tests for the trimesh-backed globe scene.

Tests cover:
- Ready state and SceneNotReady
- Shell construction
- Tunnel replacement inside a real trimesh scene
- Teardown and GLB export
- Camera placement
"""

import pytest
import numpy as np

from antipode_globe.common.config import Config
from antipode_globe.common.coords import GeoCoordinate, compute_antipode
from antipode_globe.common.exceptions import SceneNotReady
from antipode_globe.common.mesh_ops import create_shell_mesh
from antipode_globe.geometry.globe_scene import (
    CLOUDS_NAME,
    NIGHT_NAME,
    CameraView,
    GlobeScene,
    SceneObject,
)
from antipode_globe.geometry.tunnel import TUNNEL_NAME, build_tunnel


# ============== Fixtures ==============

@pytest.fixture
def config():
    """Coarse shells for fast testing."""
    return Config(shell_segments=8, tunnel_segments=8)


@pytest.fixture
def globe(config):
    return GlobeScene(config).initialize()


@pytest.fixture
def origin():
    return GeoCoordinate(lat=-33.8688, lng=151.2093)


@pytest.fixture
def antipode(origin):
    return compute_antipode(origin.lat, origin.lng)


# ============== Lifecycle Tests ==============

class TestLifecycle:
    """Test initialize/teardown."""

    def test_not_ready_before_initialize(self, config):
        globe = GlobeScene(config)
        assert not globe.ready
        with pytest.raises(SceneNotReady):
            globe.get_globe_radius()
        with pytest.raises(SceneNotReady):
            globe.scene()

    def test_initialize_adds_shells(self, globe):
        assert globe.ready
        assert globe.object_names() == [CLOUDS_NAME, NIGHT_NAME]
        assert set(globe.geometry_names()) == {CLOUDS_NAME, NIGHT_NAME}

    def test_initialize_is_idempotent(self, globe):
        assert globe.initialize() is globe
        assert globe.object_names() == [CLOUDS_NAME, NIGHT_NAME]

    def test_shell_radii(self, globe):
        clouds = globe.get_object_by_name(CLOUDS_NAME).mesh
        night = globe.get_object_by_name(NIGHT_NAME).mesh
        assert np.linalg.norm(clouds.vertices, axis=1).max() == pytest.approx(100.5)
        assert np.linalg.norm(night.vertices, axis=1).max() == pytest.approx(99.9)

    def test_teardown(self, globe, origin, antipode):
        build_tunnel(origin, antipode, globe)
        globe.teardown()

        assert not globe.ready
        assert globe.object_names() == []
        assert globe.tunnels.current is None

    def test_teardown_when_not_ready(self, config):
        GlobeScene(config).teardown()

    def test_reinitialize_after_teardown(self, globe):
        globe.teardown()
        globe.initialize()
        assert globe.object_names() == [CLOUDS_NAME, NIGHT_NAME]


# ============== Scene Graph Tests ==============

class TestSceneGraph:
    """Test add/remove/get_object_by_name."""

    def test_duplicate_name_rejected(self, globe):
        with pytest.raises(ValueError):
            globe.add(SceneObject(CLOUDS_NAME, create_shell_mesh(1.0, 8)))

    def test_remove_unknown_is_ignored(self, globe):
        globe.remove(SceneObject("ghost", create_shell_mesh(1.0, 8)))
        assert globe.object_names() == [CLOUDS_NAME, NIGHT_NAME]

    def test_remove_other_instance_with_same_name_is_ignored(self, globe):
        globe.remove(SceneObject(CLOUDS_NAME, create_shell_mesh(1.0, 8)))
        assert CLOUDS_NAME in globe.object_names()

    def test_missing_name_returns_none(self, globe):
        assert globe.get_object_by_name(TUNNEL_NAME) is None


# ============== Tunnel Tests ==============

class TestTunnelInScene:
    """Test the tunnel against a real trimesh scene."""

    def test_build_adds_tunnel(self, globe, origin, antipode):
        solid = build_tunnel(origin, antipode, globe)
        assert globe.get_object_by_name(TUNNEL_NAME) is solid
        assert TUNNEL_NAME in globe.geometry_names()

    def test_build_twice_leaves_one(self, globe, origin, antipode):
        build_tunnel(origin, antipode, globe)
        second = build_tunnel(antipode, origin, globe)

        assert globe.object_names().count(TUNNEL_NAME) == 1
        assert [n for n in globe.geometry_names() if n.startswith(TUNNEL_NAME)] == [TUNNEL_NAME]
        assert globe.get_object_by_name(TUNNEL_NAME) is second

    def test_not_initialized_is_noop(self, config, origin, antipode):
        globe = GlobeScene(config)
        assert build_tunnel(origin, antipode, globe) is None
        assert globe.tunnels.current is None

    def test_pole_tunnel(self, globe):
        north = GeoCoordinate(lat=90, lng=0)
        solid = build_tunnel(north, compute_antipode(90, 0), globe)
        assert solid is not None
        assert not np.any(np.isnan(solid.world_mesh().vertices))

    def test_export_glb(self, globe, origin, antipode, tmp_path):
        build_tunnel(origin, antipode, globe)
        path = globe.export(tmp_path / "scenes" / "sydney.glb")

        assert path.exists()
        assert path.stat().st_size > 0


# ============== Camera Tests ==============

class TestCameraView:
    """Test camera placement."""

    def test_position_above_null_island(self):
        view = CameraView(lat=0, lng=0, altitude=2.2)
        np.testing.assert_allclose(view.position(100.0).as_array(), [320.0, 0, 0], atol=1e-9)

    def test_to_dict(self):
        d = CameraView(lat=1.0, lng=2.0, altitude=2.2, transition_ms=2000).to_dict()
        assert d == {"lat": 1.0, "lng": 2.0, "altitude": 2.2, "transition_ms": 2000}
