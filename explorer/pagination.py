"""
Date-range listing of blocks.

Blocks are listed one UTC day at a time, most recent first. When a day
holds more blocks than fit on a page, the page exposes ``moreTs``: the
oldest block time seen, to be passed back as ``startTimestamp`` to fetch
the next page of the same day.
"""
import calendar
import re
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import structlog

from chain.constants import BLOCK_LIST_LIMIT, SECONDS_IN_A_DAY
from chain.errors import ValidationError
from chain.types import BlocksPage, Pagination
from node.base import BlockNode

from .resolver import BlockResolver

logger = structlog.get_logger()

DATE_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2}')
DATE_FORMAT = '%Y-%m-%d'


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(timestamp: int) -> str:
    """Format a unix timestamp as a UTC ``yyyy-mm-dd`` day."""
    try:
        day = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        raise ValidationError(f'Timestamp out of range: {timestamp}')
    return day.strftime(DATE_FORMAT)


def parse_day(date_str: str) -> datetime:
    """Parse a ``yyyy-mm-dd`` string as midnight UTC."""
    if not DATE_PATTERN.fullmatch(date_str):
        raise ValidationError('Please use yyyy-mm-dd format')
    try:
        return datetime.strptime(date_str, DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        raise ValidationError(f'Invalid date: {date_str}')


class DateRangePaginator:
    """Pages through the blocks mined on a given UTC day."""

    def __init__(
        self,
        node: BlockNode,
        resolver: BlockResolver,
        default_limit: int = BLOCK_LIST_LIMIT,
        clock: Callable[[], datetime] = utc_now
    ):
        self.node = node
        self.resolver = resolver
        self.default_limit = default_limit
        self.clock = clock

    async def list_by_date(
        self,
        block_date: Optional[str] = None,
        start_timestamp: Optional[int] = None,
        limit: Optional[int] = None
    ) -> BlocksPage:
        """
        List blocks mined on ``block_date``.

        Args:
            block_date: UTC day as ``yyyy-mm-dd``; today when omitted
            start_timestamp: Exclusive upper bound carried over from a
                previous page's ``moreTs``
            limit: Maximum number of blocks on the page

        Returns:
            The page of block summaries and its pagination cursor

        Raises:
            ValidationError: If the date is malformed, or ``start_timestamp``
                falls before the day or outside the representable range
        """
        today = self.clock().strftime(DATE_FORMAT)
        date_str = block_date or today
        day = parse_day(date_str)
        is_today = date_str == today

        if limit is None:
            limit = self.default_limit
        if limit <= 0:
            raise ValidationError('Limit must be a positive integer')

        gte = calendar.timegm(day.utctimetuple())
        if start_timestamp and start_timestamp > 0:
            if start_timestamp < gte:
                raise ValidationError(
                    f'startTimestamp {start_timestamp} is before the start of {date_str}'
                )
            lte = start_timestamp
        else:
            lte = gte + SECONDS_IN_A_DAY
        prev = (day - timedelta(days=1)).strftime(DATE_FORMAT)
        next_day = format_timestamp(lte)

        hashes = await self.node.get_block_hashes_by_timestamp(gte, lte)
        hashes = list(reversed(hashes))

        more = len(hashes) > limit
        if more:
            hashes = hashes[:limit]

        # Sequential so the first failure aborts the whole page
        blocks = []
        for block_hash in hashes:
            blocks.append(await self.resolver.resolve_summary(block_hash))

        blocks.sort(key=lambda block: block.height, reverse=True)

        more_ts = None
        if more and blocks:
            more_ts = min(block.time for block in blocks)

        logger.debug("blocks_listed", date=date_str, gte=gte, lte=lte,
                     count=len(blocks), more=more)

        return BlocksPage(
            blocks=blocks,
            length=len(blocks),
            pagination=Pagination(
                next=next_day,
                prev=prev,
                current_ts=lte - 1,
                current=date_str,
                is_today=is_today,
                more=more,
                more_ts=more_ts
            )
        )
