"""
Block reward schedule.

The reward paid for a block depends only on the height of its predecessor
and on a 24-entry table of hourly base subsidies. The table is generated
once per process by ``HourlySubsidyTable`` and injected into
``RewardCalculator``, so the calculator itself is a pure function.
"""
import random
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

import structlog

from .constants import (
    BLOCKS_PER_HOUR,
    BUDGET_PAYMENTS_START_BLOCK,
    DECREMENT_MAX,
    DECREMENT_MIN,
    GENESIS_REWARD,
    HOURLY_DECLINE,
    HOURLY_REWARD_FLOOR,
    HOURS_IN_A_DAY,
    INITIAL_REWARD_MAX,
    INITIAL_REWARD_MIN,
    MIN_BASE_SUBSIDY,
    SUBSIDY_HALVING_INTERVAL
)

logger = structlog.get_logger()

REWARD_QUANTUM = Decimal("0.00000001")


def format_amount(value: float) -> str:
    """
    Format an amount with exactly 8 fractional digits.

    Rounds the exact binary value of ``value`` half-up, the way
    JavaScript's ``Number.prototype.toFixed`` does.
    """
    return str(Decimal(value).quantize(REWARD_QUANTUM, rounding=ROUND_HALF_UP))


class HourlySubsidyTable:
    """Generator for the per-hour base subsidy table."""

    @staticmethod
    def generate(seed: Optional[int] = None) -> List[int]:
        """
        Generate a table of 24 non-increasing hourly base subsidies.

        Args:
            seed: Seed for the generator; a fresh one is drawn and logged
                when omitted so the table can be reproduced later

        Returns:
            List of 24 integer subsidies
        """
        if seed is None:
            seed = random.SystemRandom().randrange(2 ** 32)
        rng = random.Random(seed)

        rewards = [rng.randint(INITIAL_REWARD_MIN, INITIAL_REWARD_MAX)]
        for _ in range(1, HOURS_IN_A_DAY):
            decrement = rng.randint(DECREMENT_MIN, DECREMENT_MAX)
            rewards.append(max(rewards[-1] - decrement, HOURLY_REWARD_FLOOR))

        logger.info("hourly_subsidy_table_generated", seed=seed, table=rewards)
        return rewards


class RewardCalculator:
    """Computes block rewards from the previous block height."""

    def __init__(
        self,
        hourly_table: Sequence[float],
        halving_interval: int = SUBSIDY_HALVING_INTERVAL,
        budget_payments_start_block: int = BUDGET_PAYMENTS_START_BLOCK
    ):
        if len(hourly_table) != HOURS_IN_A_DAY:
            raise ValueError(
                f"Hourly subsidy table must have {HOURS_IN_A_DAY} entries, got {len(hourly_table)}"
            )
        if halving_interval <= 0:
            raise ValueError("Halving interval must be positive")
        self.hourly_table = tuple(hourly_table)
        self.halving_interval = halving_interval
        self.budget_payments_start_block = budget_payments_start_block

    def base_subsidy(self, prev_height: int) -> float:
        """Base subsidy for the hour bucket of ``prev_height``."""
        if prev_height == 0:
            return float(MIN_BASE_SUBSIDY)

        hour = (prev_height // BLOCKS_PER_HOUR) % HOURS_IN_A_DAY
        subsidy = self.hourly_table[hour] - (hour * HOURLY_DECLINE)
        if subsidy < MIN_BASE_SUBSIDY:
            subsidy = MIN_BASE_SUBSIDY
        return float(subsidy)

    def subsidy(self, prev_height: int) -> float:
        """Subsidy after the yearly declines, before the treasury share."""
        subsidy = self.base_subsidy(prev_height)

        # ~7.1% decline per interval crossed
        for _ in range(self.halving_interval, prev_height + 1, self.halving_interval):
            subsidy -= subsidy / 14

        return subsidy

    def treasury_share(self, prev_height: int, subsidy: float) -> float:
        if prev_height > self.budget_payments_start_block:
            return subsidy / 10
        return 0.0

    def reward(self, prev_height: Optional[int]) -> str:
        """
        Calculate the reward of the block following ``prev_height``.

        Args:
            prev_height: Height of the previous block, or None for genesis

        Returns:
            Reward as a decimal string with 8 fractional digits
        """
        if prev_height is None:
            return format_amount(GENESIS_REWARD)
        if prev_height < 0:
            raise ValueError(f"Previous height must be non-negative, got {prev_height}")

        subsidy = self.subsidy(prev_height)
        return format_amount(subsidy - self.treasury_share(prev_height, subsidy))
