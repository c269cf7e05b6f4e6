"""Constants for the insight explorer read path."""

# Reward schedule
GENESIS_REWARD = 50.0  # Reward reported for the genesis block
MIN_BASE_SUBSIDY = 50  # Floor for the hourly base subsidy
SUBSIDY_HALVING_INTERVAL = 210240  # Blocks between subsidy reductions
BUDGET_PAYMENTS_START_BLOCK = 700  # Treasury share applies above this height
BLOCKS_PER_HOUR = 60  # One block per minute
HOURS_IN_A_DAY = 24
HOURLY_DECLINE = 450 / 24  # Base subsidy decline per hour of the day

# Hourly table generation
INITIAL_REWARD_MIN = 50
INITIAL_REWARD_MAX = 500
DECREMENT_MIN = 1
DECREMENT_MAX = 50
HOURLY_REWARD_FLOOR = 1

# Cache constants
BLOCK_CACHE_SIZE = 1000  # Full block objects
BLOCK_SUMMARY_CACHE_SIZE = 1_000_000  # Lightweight summaries
BLOCK_CACHE_CONFIRMATIONS = 6  # Reorg-safety window

# Listing constants
BLOCK_LIST_LIMIT = 200
DEFAULT_HEADERS_COUNT = 25
SECONDS_IN_A_DAY = 86400

# Node error codes normalized to "not found"
RPC_INVALID_ADDRESS_OR_KEY = -5
RPC_INVALID_PARAMETER = -8
NOT_FOUND_CODES = (RPC_INVALID_ADDRESS_OR_KEY, RPC_INVALID_PARAMETER)

# Hash constants
HASH_HEX_LENGTH = 64
