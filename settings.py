"""
settings.py - Game constants for Neural Chaser.

All configurable values live here so they're easy to tweak
and easy to reference from any module.
"""

# ── Screen ────────────────────────────────────────────────
SCREEN_WIDTH = 800
SCREEN_HEIGHT = 600
FPS = 60
TITLE = "Neural Chaser – Online-Learning Opponent"
BG_COLOR = (10, 10, 20)
TICK_MS = 1000 // FPS          # nominal frame length used by headless runs

# ── Colors (R, G, B) ─────────────────────────────────────
WHITE = (255, 255, 255)
GRAY = (60, 60, 60)
LIGHT_GRAY = (160, 160, 160)
PLAYER_COLOR = (74, 158, 255)      # blue orb
AI_COLOR = (255, 74, 74)           # red orb
PROJECTILE_COLOR = (255, 107, 107)
BEAM_COLOR = (255, 153, 255)
DASH_COLOR = (255, 170, 0)
BOOST_COLOR = (0, 255, 136)
YELLOW = (255, 220, 60)

# ── Orbs ──────────────────────────────────────────────────
ORB_RADIUS = 15
PLAYER_START_X = 100
PLAYER_START_Y = SCREEN_HEIGHT - 100
PLAYER_MAX_SPEED = 4.0
PLAYER_ACCEL = 0.075           # fraction of distance-to-cursor added per tick
PLAYER_FRICTION = 0.85

AI_START_X = SCREEN_WIDTH - 100
AI_START_Y = 100
AI_BASE_SPEED = 1.125          # pixels per tick

# ── Neural network ───────────────────────────────────────
NN_INPUT_SIZE = 8
NN_HIDDEN_SIZE = 16
NN_OUTPUT_SIZE = 4
NN_LEARNING_RATE = 0.1
NN_MOMENTUM = 0.9
NN_INIT_RANGE = 0.25           # weights drawn from [-range, range)
NN_VELOCITY_SCALE = 10.0       # opponent velocity divisor in the input vector

# ── Online training ───────────────────────────────────────
SAMPLE_BUFFER_CAPACITY = 100
TRAIN_MIN_SAMPLES = 15         # buffer must hold MORE than this before training
TRAIN_PROBABILITY = 0.08       # per-tick chance of a training event
TRAIN_BATCH = 8                # most recent samples trained per event
ACCURACY_ERROR_SCALE = 150.0

# ── Heuristic labels ──────────────────────────────────────
LABEL_PREDICTION_TICKS = 15
LABEL_MOVE_SCALE = 100.0
LABEL_HIGH = 0.9
LABEL_LOW = 0.1
LABEL_PROJECTILE_MIN_DIST = 50.0
LABEL_DASH_MIN_DIST = 150.0
LABEL_DASH_MAX_DIST = 250.0

# ── Action thresholds ─────────────────────────────────────
PROJECTILE_SIGNAL_THRESHOLD = 0.7
DASH_SIGNAL_THRESHOLD = 0.8

# ── Match progress / unlocks ──────────────────────────────
MATCH_MAX_DURATION = 30.0      # seconds for the progress bar to fill
UNLOCK_BAR_WIDTH = 496         # (64 px + 8 px gap) * 7 slots - 8 px
DASH_UNLOCK = 64 / UNLOCK_BAR_WIDTH
SPEED_BOOST_UNLOCK = 136 / UNLOCK_BAR_WIDTH
BEAM_UNLOCK = 208 / UNLOCK_BAR_WIDTH

# ── Abilities ─────────────────────────────────────────────
PROJECTILE_COOLDOWN = 3000     # ms
PROJECTILE_RANGE = 300.0
PROJECTILE_SPEED = 8.0         # pixels per tick
PROJECTILE_RADIUS = 8
PROJECTILE_LIFETIME = 3.0      # seconds
PROJECTILE_LEAD_TICKS = 20     # aim ahead of the player by this many ticks

DASH_COOLDOWN = 6000           # ms
DASH_WINDUP = 1500             # ms
DASH_DISTANCE = 200.0
DASH_SPEED = 8.0
DASH_ARRIVE_EPSILON = 5.0

SPEED_BOOST_COOLDOWN = 6000    # ms
SPEED_BOOST_DURATION = 3000    # ms
SPEED_BOOST_MULT = 2.0
SPEED_BOOST_MIN_DIST = 200.0

BEAM_COOLDOWN = 4000           # ms
BEAM_RANGE = 300.0
BEAM_SPEED = 4.0
BEAM_WINDUP = 2000             # ms, longer than the dash windup
BEAM_WIDTH = 6.0
BEAM_INACCURACY = 0.2          # radians, full jitter span
BEAM_LOCK_PROGRESS = 0.5       # aim freezes at this windup fraction
BEAM_LIFETIME = 0.5            # seconds the fired beam stays lethal

# ── HUD ───────────────────────────────────────────────────
FONT_SIZE = 22
SMALL_FONT_SIZE = 18
PROGRESS_BAR_WIDTH = 300
PROGRESS_BAR_HEIGHT = 10
