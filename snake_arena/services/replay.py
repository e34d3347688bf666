"""
Replay recording and deterministic re-simulation.

A replay stores the seed, the full config, every frame's (inputs, dt) and
any start_player() / reset_round() calls the host made directly. Because
the engine is deterministic for a given seed, that is enough to rebuild
every frame exactly. Per-frame states, scores, events and a digest of the
whole frame are stored too so a replay can be checked against a fresh run.
"""

import hashlib
import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from ..config import ArenaConfig
from ..domain.events import RoundEnded, SnakeDied, event_to_dict
from ..domain.game_state import FrameResult
from ..domain.inputs import InputSnapshot

logger = logging.getLogger(__name__)

REPLAY_VERSION = 2
DEFAULT_REPLAY_DIR = "completed_games"


def frame_digest(result: FrameResult) -> str:
    """SHA-256 of a frame's full JSON form: every entity position, event and score."""
    payload = json.dumps(result.to_dict(), sort_keys=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def round_result(scores: Dict[int, int], started: List[int]) -> Dict[int, str]:
    """
    Rank the started slots of a finished round by score: 'won', 'tied' or 'lost'.
    """
    if not started:
        return {}
    top_score = max(scores.get(slot, 0) for slot in started)
    winners = [slot for slot in started if scores.get(slot, 0) == top_score]
    result = {}
    for slot in started:
        if slot in winners:
            result[slot] = "tied" if len(winners) > 1 else "won"
        else:
            result[slot] = "lost"
    return result


class ReplayRecorder:
    """
    Attach to an engine and capture everything needed to replay it.

        recorder = ReplayRecorder(engine)
        ... engine.tick(...) as usual ...
        recorder.save()
    """

    def __init__(self, engine, game_id: Optional[str] = None):
        self.game_id = game_id or str(uuid.uuid4())
        self.seed = engine.seed
        self.config = engine.config
        self.start_time = datetime.now(timezone.utc)
        self.frames: List[Dict[str, Any]] = []
        self.rounds: List[Dict[str, Any]] = []
        self.deaths: List[Dict[str, Any]] = []
        self.pending_calls: List[List[Any]] = []
        engine.recorder = self

    def note_call(self, name: str, *args: Any) -> None:
        """Remember a direct engine call; it is stored on the next recorded frame."""
        self.pending_calls.append([name, *args])

    def record(self, inputs: InputSnapshot, dt: float, result: FrameResult) -> None:
        frame = {
            "dt": dt,
            "inputs": inputs.to_list(),
            "round_state": result.round_state,
            "slot_states": {str(k): v for k, v in result.slot_states.items()},
            "lengths": {str(k): v for k, v in result.lengths.items()},
            "scores": {str(k): v for k, v in result.scores.items()},
            "events": [event_to_dict(e) for e in result.events],
            "digest": frame_digest(result),
        }
        if self.pending_calls:
            frame["calls"] = self.pending_calls
            self.pending_calls = []
        self.frames.append(frame)
        for event in result.events:
            if isinstance(event, SnakeDied):
                self.deaths.append({
                    "frame": result.frame_number,
                    "clock": result.clock,
                    "slot": event.snake_id,
                    "reason": event.cause,
                    "other": event.other_id,
                })
            elif isinstance(event, RoundEnded):
                started = [slot for slot, state in result.slot_states.items() if state != "idle"]
                self.rounds.append({
                    "frame": result.frame_number,
                    "duration": result.clock,
                    "final_scores": {str(k): v for k, v in event.scores.items()},
                    "result": {str(k): v for k, v in round_result(event.scores, started).items()},
                })

    def to_dict(self) -> Dict[str, Any]:
        metadata = {
            "version": REPLAY_VERSION,
            "game_id": self.game_id,
            "start_time": self.start_time.isoformat(),
            "end_time": datetime.now(timezone.utc).isoformat(),
            "seed": self.seed,
            "config": self.config.to_dict(),
            "frames_recorded": len(self.frames),
            "rounds": self.rounds,
            "death_info": self.deaths,
        }
        return {"metadata": metadata, "frames": self.frames}

    def save(self, filename: Optional[str] = None, directory: str = DEFAULT_REPLAY_DIR) -> str:
        """Write the replay as JSON and return its path."""
        if filename is None:
            filename = f"snake_arena_{self.game_id}.json"
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, filename)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info("Saved replay %s (%d frames)", path, len(self.frames))
        return path


def load_replay(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if "metadata" not in data or "frames" not in data:
        raise ValueError(f"{path} is not a Snake Arena replay")
    return data


def replay_frames(data: Dict[str, Any]) -> Iterator[FrameResult]:
    """Re-simulate a replay, yielding the FrameResult of every recorded frame."""
    # Deferred: the engine module imports the services package
    from ..engine import ArenaEngine

    metadata = data["metadata"]
    engine = ArenaEngine(ArenaConfig.from_dict(metadata["config"]), seed=metadata["seed"])
    for frame in data["frames"]:
        for call in frame.get("calls", []):
            if call[0] == "start":
                engine.start_player(call[1])
            elif call[0] == "reset":
                engine.reset_round()
            else:
                raise ValueError(f"Unknown engine call in replay: {call!r}")
        yield engine.tick(InputSnapshot.from_list(frame["inputs"]), frame["dt"])


def verify_replay(data: Dict[str, Any]) -> bool:
    """
    True if re-simulating the replay reproduces every recorded frame.

    Events, scores, round and slot states and lengths are compared
    field by field; the frame digest (when present) also covers every
    entity position.
    """
    for index, (frame, result) in enumerate(zip(data["frames"], replay_frames(data))):
        events = json.loads(json.dumps([event_to_dict(e) for e in result.events]))
        recorded = json.loads(json.dumps(frame["events"]))
        checks = {
            "events": events == recorded,
            "scores": {str(k): v for k, v in result.scores.items()} == frame["scores"],
            "round_state": result.round_state == frame["round_state"],
        }
        if "slot_states" in frame:
            checks["slot_states"] = {str(k): v for k, v in result.slot_states.items()} == frame["slot_states"]
        if "lengths" in frame:
            checks["lengths"] = {str(k): v for k, v in result.lengths.items()} == frame["lengths"]
        if "digest" in frame:
            checks["digest"] = frame_digest(result) == frame["digest"]

        failed = sorted(name for name, ok in checks.items() if not ok)
        if failed:
            logger.warning("Replay diverged at frame %d (%s)", index, ", ".join(failed))
            return False
    return True
