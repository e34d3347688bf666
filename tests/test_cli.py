"""
Tests for the command line tools in snake_arena/cli.
"""

import json
import os
import random
import sys
from pathlib import Path

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from snake_arena import ArenaConfig, ArenaEngine, InputSnapshot  # noqa: E402
from snake_arena.cli import render_replay, simulate  # noqa: E402
from snake_arena.services.replay import ReplayRecorder, verify_replay  # noqa: E402
from snake_arena.services.replay_renderer import ReplayRenderer  # noqa: E402


def saved_replay(directory, game_id="g1"):
    engine = ArenaEngine(ArenaConfig(), seed=12)
    recorder = ReplayRecorder(engine, game_id=game_id)
    for frame in range(45):
        engine.tick(InputSnapshot.from_keys(set(), {"q"} if frame == 0 else set()), 1.0 / 60)
    return recorder.save(directory=str(directory))


class TestRenderReplay:
    """Tests for render_replay.py."""

    def test_process_replay_then_skip(self, tmp_path):
        json_path = saved_replay(tmp_path)
        renderer = ReplayRenderer(scale=0.2, fps=10)
        output_dir = tmp_path / "gifs"
        output_dir.mkdir()

        assert render_replay.process_replay(Path(json_path), output_dir, renderer) == "ok"
        assert (output_dir / "snake_arena_g1.gif").exists()
        assert render_replay.process_replay(Path(json_path), output_dir, renderer) == "skipped"
        assert render_replay.process_replay(Path(json_path), output_dir, renderer, overwrite=True) == "ok"

    def test_process_broken_replay_fails(self, tmp_path):
        broken = tmp_path / "snake_arena_broken.json"
        broken.write_text(json.dumps({"frames": []}))
        status = render_replay.process_replay(broken, tmp_path, ReplayRenderer())
        assert status == "failed"

    def test_iter_replay_files(self, tmp_path):
        saved_replay(tmp_path, "b")
        saved_replay(tmp_path, "a")
        (tmp_path / "notes.json").write_text("{}")
        names = [p.name for p in render_replay.iter_replay_files(tmp_path)]
        assert names == ["snake_arena_a.json", "snake_arena_b.json"]

    def test_main_renders_directory(self, tmp_path, monkeypatch):
        saved_replay(tmp_path, "x")
        out = tmp_path / "out"
        monkeypatch.setattr(sys, "argv", [
            "render_replay.py", str(tmp_path), "--output-dir", str(out), "--scale", "0.2", "--max-frames", "3",
        ])
        render_replay.main()
        assert (out / "snake_arena_x.gif").exists()


class TestSimulate:
    """Tests for simulate.py."""

    def test_key_masher_starts_on_first_frame(self):
        masher = simulate.KeyMasher([0, 2], random.Random(0))
        first = masher.next_inputs(1.0 / 60, True)
        second = masher.next_inputs(1.0 / 60, False)

        assert [first[slot].start for slot in range(4)] == [True, False, True, False]
        assert not any(second[slot].start for slot in range(4))
        assert not first[1].left and not first[1].right

    def test_run_simulation_records_replay(self, capsys):
        engine = simulate.run_simulation(players=2, seconds=2.0, fps=30, seed=3)

        assert engine.seed == 3
        assert 1 <= len(engine.recorder.frames) <= 60
        assert verify_replay(engine.recorder.to_dict())
        assert "P0:" in capsys.readouterr().out

    def test_main_saves_replay(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", [
            "simulate.py", "--players", "1", "--seconds", "1", "--seed", "4", "--output-dir", str(tmp_path),
        ])
        simulate.main()
        assert len(list(tmp_path.glob("snake_arena_*.json"))) == 1
        assert "Replay saved to" in capsys.readouterr().out

    def test_main_rejects_too_many_players(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["simulate.py", "--players", "5"])
        with pytest.raises(SystemExit):
            simulate.main()


class TestPygameHost:
    """Tests for play.py, run against SDL's dummy video driver."""

    def test_poll_and_draw(self, monkeypatch):
        pytest.importorskip("pygame")
        monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
        from snake_arena.cli import play

        engine = ArenaEngine(ArenaConfig(seed=1))
        host = play.PygameHost(engine)
        try:
            assert host._to_screen(0.0, 0.0) == (640, play.HUD_HEIGHT + 360)
            inputs = host.poll_inputs({"q"})
            assert inputs[0].start
            result = engine.tick(inputs, 1.0 / 60)
            host.draw(result)
        finally:
            play.pygame.quit()
