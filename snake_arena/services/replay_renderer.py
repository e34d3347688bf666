"""
Replay rendering for Snake Arena

Turns a recorded replay into an animated GIF by:
1. Re-simulating the replay frame by frame
2. Drawing each sampled frame with PIL (Pillow)
3. Saving the frames as one looping GIF

The picture shows:
- The field with its border
- Snakes coloured per slot (dead snakes greyed out)
- Pickups and obstacles
- A score bar with each player's score and status
"""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..domain.constants import KIND_OBSTACLE, KIND_PICKUP, KIND_SNAKE_BODY, KIND_SNAKE_HEAD, MAX_PLAYERS
from ..domain.game_state import FrameResult
from .replay import replay_frames

logger = logging.getLogger(__name__)

# Output settings
DEFAULT_FPS = 15
DEFAULT_SCALE = 0.5          # image pixels per field pixel
SCORE_BAR_HEIGHT = 32
BORDER = 4


class ColorScheme:
    """Colour configuration, one snake colour per slot"""

    PLAYERS = ["#2F6FDB", "#3FB8E0", "#D8423A", "#F08A24"]
    DEAD = "#8C8C8C"

    BACKGROUND = "#101418"
    FIELD = "#1B232B"
    FIELD_BORDER = "#5A6673"
    PICKUP = "#6BD425"
    OBSTACLE = "#A0522D"

    SCORE_BAR = "#0B0E11"
    SCORE_TEXT = "#FFFFFF"


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to RGB tuple"""
    hex_color = hex_color.lstrip('#')
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def darken_color(hex_color: str, amount: float = 0.3) -> Tuple[int, int, int]:
    """Darken a hex color by a given amount"""
    r, g, b = hex_to_rgb(hex_color)
    r = max(0, int(r * (1 - amount)))
    g = max(0, int(g * (1 - amount)))
    b = max(0, int(b * (1 - amount)))
    return (r, g, b)


class ReplayRenderer:
    """Render Snake Arena replays to animated GIFs"""

    def __init__(self, scale: float = DEFAULT_SCALE, fps: int = DEFAULT_FPS):
        if scale <= 0 or fps <= 0:
            raise ValueError("scale and fps must be positive")
        self.scale = scale
        self.fps = fps
        self.font = ImageFont.load_default()

    def _to_image(self, x: float, y: float, result: FrameResult) -> Tuple[float, float]:
        """Field coordinates (origin centre, y up) to image pixels (origin top-left, y down)."""
        px = BORDER + (x + result.width / 2.0) * self.scale
        py = SCORE_BAR_HEIGHT + BORDER + (result.height / 2.0 - y) * self.scale
        return px, py

    def _circle(self, draw: ImageDraw.ImageDraw, result: FrameResult, x: float, y: float,
                radius: float, fill: Tuple[int, int, int]) -> None:
        cx, cy = self._to_image(x, y, result)
        r = max(radius * self.scale, 1.0)
        draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=fill)

    def render_frame(self, result: FrameResult) -> Image.Image:
        """Render a single frame of the arena"""
        width = int(result.width * self.scale) + 2 * BORDER
        height = int(result.height * self.scale) + 2 * BORDER + SCORE_BAR_HEIGHT
        img = Image.new('RGB', (width, height), hex_to_rgb(ColorScheme.BACKGROUND))
        draw = ImageDraw.Draw(img)

        # Field
        draw.rectangle(
            [BORDER, SCORE_BAR_HEIGHT + BORDER, width - BORDER, height - BORDER],
            fill=hex_to_rgb(ColorScheme.FIELD),
            outline=hex_to_rgb(ColorScheme.FIELD_BORDER),
            width=2
        )

        for entity in result.entities_of(KIND_PICKUP):
            self._circle(draw, result, entity.x, entity.y, entity.radius, hex_to_rgb(ColorScheme.PICKUP))
        for entity in result.entities_of(KIND_OBSTACLE):
            self._circle(draw, result, entity.x, entity.y, entity.radius, hex_to_rgb(ColorScheme.OBSTACLE))

        # Bodies under heads
        for entity in result.entities_of(KIND_SNAKE_BODY):
            color = ColorScheme.PLAYERS[entity.slot] if entity.alive else ColorScheme.DEAD
            self._circle(draw, result, entity.x, entity.y, entity.radius, darken_color(color, 0.25))
        for entity in result.entities_of(KIND_SNAKE_HEAD):
            color = ColorScheme.PLAYERS[entity.slot] if entity.alive else ColorScheme.DEAD
            self._circle(draw, result, entity.x, entity.y, entity.radius, hex_to_rgb(color))

        self._draw_score_bar(draw, result, width)
        return img

    def _draw_score_bar(self, draw: ImageDraw.ImageDraw, result: FrameResult, width: int) -> None:
        draw.rectangle([0, 0, width, SCORE_BAR_HEIGHT], fill=hex_to_rgb(ColorScheme.SCORE_BAR))
        column = width // (MAX_PLAYERS + 1)
        for slot in range(MAX_PLAYERS):
            state = result.slot_states.get(slot, "idle")
            label = f"P{slot}: {result.scores.get(slot, 0)}"
            if state == "dead":
                label += " (out)"
            color = ColorScheme.PLAYERS[slot] if state != "idle" else ColorScheme.DEAD
            draw.text((10 + column * slot, 10), label, fill=hex_to_rgb(color), font=self.font)

        status = "GAME OVER" if result.round_state == "ended" else f"{result.clock:6.1f}s"
        draw.text((10 + column * MAX_PLAYERS, 10), status, fill=hex_to_rgb(ColorScheme.SCORE_TEXT), font=self.font)

    def collect_frames(self, replay_data: Dict[str, Any], max_frames: Optional[int] = None) -> List[Image.Image]:
        """
        Re-simulate the replay and render roughly fps frames per simulated second.
        """
        images: List[Image.Image] = []
        interval = 1.0 / self.fps
        since_last = interval

        for frame, result in zip(replay_data["frames"], replay_frames(replay_data)):
            since_last += frame["dt"]
            if since_last < interval:
                continue
            since_last = 0.0
            images.append(self.render_frame(result))
            if max_frames is not None and len(images) >= max_frames:
                break

        return images

    def generate_gif(
        self,
        replay_data: Dict[str, Any],
        output_path: str,
        max_frames: Optional[int] = None
    ) -> str:
        """
        Render a replay to an animated GIF.

        Args:
            replay_data: replay dict as written by ReplayRecorder
            output_path: where to write the .gif
            max_frames: stop after this many rendered frames

        Returns:
            The output path
        """
        images = self.collect_frames(replay_data, max_frames=max_frames)
        if not images:
            raise ValueError("Replay contains no frames to render")

        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        duration_ms = int(1000 / self.fps)
        images[0].save(
            output_path,
            save_all=True,
            append_images=images[1:],
            duration=duration_ms,
            loop=0,
        )
        logger.info("Rendered %d frames to %s", len(images), output_path)
        return output_path
