"""Constants of the cell duel.

All durations are milliseconds, all rates are energy per second.
"""

BOARD_SIZE = 10

PLAYER1 = 1
PLAYER2 = 2

# (row, col) of each player's seed cell at duel start.
PLAYER1_SEED = (0, 4)
PLAYER2_SEED = (9, 5)

STARTING_ENERGY = 0.0
STARTING_TIMER_MS = 20000

GENERATOR_LIFETIME_MS = 20000
ZAPPER_COOLDOWN_MS = 5000
ZAPPER_RADIUS = 2

DISCONNECT_THRESHOLD_MS = 2 * 60 * 1000
ONLINE_WINDOW_MS = 50 * 1000

NEUTRAL = "neutral"
BASIC = "basic"
HARDENED = "hardened"
GENERATOR = "generator"
ZAPPER = "zapper"

CELL_TYPES = (NEUTRAL, BASIC, HARDENED, GENERATOR, ZAPPER)
PURCHASABLE_TYPES = (BASIC, HARDENED, GENERATOR, ZAPPER)

BASE_CELL_COST = 20
CELL_COST_GROWTH = 1.25
CAPTURE_MULTIPLIER = 2

TYPE_SURCHARGE = {
    BASIC: 0,
    HARDENED: 700,
    GENERATOR: 100,
    ZAPPER: 500,
}

# Flat per-cell production. Generators are paid through the synergy bonus.
FLAT_RATE = {
    BASIC: 10,
    HARDENED: 40,
    ZAPPER: 30,
}

GENERATOR_BONUS_BASE = 50
GENERATOR_BONUS_GROWTH = 1.5

CELL_TYPE_DESCRIPTIONS = {
    BASIC: "Cheap territory producing a steady trickle of energy.",
    HARDENED: "Expensive, high-yield territory that cannot be captured.",
    GENERATOR: "Boosts energy exponentially with every other generator, expires after 20s.",
    ZAPPER: "Every 5s converts a random cell within two squares.",
}
