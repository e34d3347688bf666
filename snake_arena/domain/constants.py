"""
Game constants for Snake Arena.
"""

# Player slots
MAX_PLAYERS = 4

# Turn intents
TURN_LEFT = "left"
TURN_RIGHT = "right"
TURN_NONE = "none"
VALID_TURNS = {TURN_LEFT, TURN_RIGHT, TURN_NONE}

# Snake lifecycle
IDLE = "idle"
ALIVE = "alive"
DEAD = "dead"

# Death causes
CAUSE_WALL = "wall"
CAUSE_OBSTACLE = "obstacle"
CAUSE_COLLISION = "collision"

# Round lifecycle
ROUND_WAITING = "waiting"
ROUND_IN_PROGRESS = "in_progress"
ROUND_ENDED = "ended"

# Pickup kinds
PICKUP_GROWTH = "growth"

# Render kinds
KIND_SNAKE_HEAD = "snake_head"
KIND_SNAKE_BODY = "snake_body"
KIND_PICKUP = "pickup"
KIND_OBSTACLE = "obstacle"

# Obstacle field-edge policies
EDGE_WRAP = "wrap"
EDGE_BOUNCE = "bounce"
EDGE_RESPAWN = "respawn"
VALID_EDGE_POLICIES = {EDGE_WRAP, EDGE_BOUNCE, EDGE_RESPAWN}

# Left/right key per slot
KEY_BINDINGS = {
    0: ("q", "w"),
    1: ("f", "g"),
    2: ("u", "i"),
    3: ("k", "l"),
}
