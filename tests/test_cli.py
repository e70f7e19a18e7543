"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from circuit3d.cli import main
from circuit3d.scene.graph import Scene


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def circuit_file(tmp_path):
    path = tmp_path / "circuit.json"
    path.write_text(json.dumps([
        {
            "type": "pcb_board",
            "center": {"x": 0, "y": 0},
            "width": 40,
            "height": 20,
        },
        {
            "type": "pcb_component",
            "pcb_component_id": "R1",
            "center": {"x": 5, "y": 2},
        },
    ]))
    return path


@pytest.fixture
def gltf_file(tmp_path):
    path = tmp_path / "scene.gltf"
    path.write_text(json.dumps({
        "scenes": [{"nodes": [0]}],
        "nodes": [
            {"translation": [1, 0, 0], "children": [1]},
            {"translation": [0, 2, 0], "mesh": 0},
        ],
        "meshes": [{"primitives": [{"attributes": {"POSITION": 0}}]}],
        "accessors": [{"count": 3, "type": "VEC3", "min": [0, 0, 0], "max": [1, 1, 1]}],
    }))
    return path


class TestCameraCommand:
    """Test the camera command."""

    def test_json_output(self, runner, circuit_file):
        """Test JSON framing output."""
        result = runner.invoke(main, ["camera", str(circuit_file), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["camPos"] == pytest.approx([22.4, 38.4, 25.6])
        assert data["lookAt"] == [0.0, 0.0, 0.0]

    def test_table_output(self, runner, circuit_file):
        """Test table output mentions the framing."""
        result = runner.invoke(main, ["camera", str(circuit_file)])
        assert result.exit_code == 0, result.output
        assert "Camera position" in result.output

    def test_config_file(self, runner, circuit_file, tmp_path):
        """Test camera parameters come from the config file."""
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"camera": {"distance_factor": 1.0}}))

        result = runner.invoke(
            main, ["--config", str(config), "camera", str(circuit_file), "--json"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["camPos"] == pytest.approx([28.0, 48.0, 32.0])

    def test_malformed_circuit_file(self, runner, tmp_path):
        """Test unparseable circuit JSON is reported without a traceback."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        result = runner.invoke(main, ["camera", str(path)])

        assert result.exit_code == 1
        assert "Error loading circuit" in result.output
        assert not isinstance(result.exception, ValueError)


class TestTransformsCommand:
    """Test the transforms command."""

    def test_lists_meshes(self, runner, gltf_file):
        """Test mesh chains are printed."""
        result = runner.invoke(main, ["transforms", str(gltf_file)])
        assert result.exit_code == 0, result.output
        assert "1 mesh(es)" in result.output

    def test_strict_fails_on_dangling_reference(self, runner, tmp_path):
        """Test strict mode exits non-zero on unresolved references."""
        path = tmp_path / "broken.gltf"
        path.write_text(json.dumps({
            "scenes": [{"nodes": [0]}],
            "nodes": [{"children": [5]}],
        }))

        lenient = runner.invoke(main, ["transforms", str(path)])
        strict = runner.invoke(main, ["transforms", str(path), "--strict"])

        assert lenient.exit_code == 0
        assert strict.exit_code == 1

    def test_cycle_reported(self, runner, tmp_path):
        """Test cycles are reported as errors."""
        path = tmp_path / "cycle.gltf"
        path.write_text(json.dumps({
            "scenes": [{"nodes": [0]}],
            "nodes": [{"children": [0]}],
        }))
        result = runner.invoke(main, ["transforms", str(path)])
        assert result.exit_code == 1
        assert "Cycle" in result.output

    def test_strict_ignores_unreachable_nodes(self, runner, tmp_path):
        """Test strict mode accepts dangling references no root reaches."""
        path = tmp_path / "orphan.gltf"
        path.write_text(json.dumps({
            "scenes": [{"nodes": [0]}],
            "nodes": [{"mesh": 0}, {"children": [7]}],
        }))
        result = runner.invoke(main, ["transforms", str(path), "--strict"])
        assert result.exit_code == 0, result.output
        assert "1 mesh(es)" in result.output


class TestBoundsCommand:
    """Test the bounds command."""

    def test_json_output(self, runner, gltf_file):
        """Test scene bounds in JSON."""
        result = runner.invoke(main, ["bounds", str(gltf_file), "--json", "--per-mesh"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["min"] == [1.0, 2.0, 0.0]
        assert data["max"] == [2.0, 3.0, 1.0]
        assert "0" in data["meshes"]

    def test_no_meshes(self, runner, tmp_path):
        """Test a scene without placed meshes exits non-zero."""
        path = tmp_path / "empty.gltf"
        path.write_text(json.dumps({"scenes": [{"nodes": []}]}))
        result = runner.invoke(main, ["bounds", str(path)])
        assert result.exit_code == 1

    def test_malformed_glb_file(self, runner, tmp_path):
        """Test a file with a bad GLB header is reported without a traceback."""
        path = tmp_path / "scene.glb"
        path.write_bytes(b"NOPE" + b"\x00" * 40)

        result = runner.invoke(main, ["bounds", str(path)])

        assert result.exit_code == 1
        assert "Error loading scene" in result.output
        assert not isinstance(result.exception, ValueError)


class TestAssembleCommand:
    """Test the assemble command."""

    def test_saves_scene(self, runner, circuit_file, tmp_path):
        """Test the assembled scene is written and reloadable."""
        output = tmp_path / "scene.json"
        result = runner.invoke(main, ["assemble", str(circuit_file), "-o", str(output)])

        assert result.exit_code == 0, result.output
        scene = Scene.load(output)
        assert scene.roots == ("circuit",)
        assert set(scene.nodes) == {"circuit", "board", "R1"}
