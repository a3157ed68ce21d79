"""Semi-weak reference parameters and simulation constants."""

# ── Strength states ──
UNINITIALIZED = 'uninitialized'   # constructed, first deferred evaluation pending
STRONG = 'strong'                 # target reachable from the ownership root
WEAK = 'weak'                     # target detached; collectible

# Early reads do not block on the first evaluation: strength reads
# UNINITIALIZED and the target stays in its strong slot until then.

# ── Scheduler ──
MAX_SCHEDULER_STEPS = 1000        # run_pending() safety bound

# ── Host data model ──
ROOT_NAME = 'Game'
DEFAULT_INSTANCE_NAME = 'Instance'

# ── Churn simulation: operation probabilities (normalized at use) ──
CHURN_OPS = {
    'detach':   0.25,   # parent = None
    'reattach': 0.20,   # held, detached instance back under a live node
    'move':     0.25,   # reparent within the attached tree
    'destroy':  0.05,
    'hold':     0.15,   # an external holder takes a strong reference
    'release':  0.10,   # an external holder lets go
}
MAX_HOLDERS = 8                   # external strong holders at any time
COLLECT_INTERVAL = 5              # gc.collect() every N steps

# ── Monte Carlo ──
N_SEEDS = 20
BASE_SEED = 42
N_NODES = 60
N_STEPS = 200
MAX_WORKERS = 8
