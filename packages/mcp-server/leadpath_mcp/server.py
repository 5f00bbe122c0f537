"""
LeadPath MCP Server - Main entry point.

MCP server exposing the attribution engine:
- Contact attribution and bulk attribution
- Dashboard statistics, cached per date range
- Touchpoint normalization
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections import OrderedDict
from dataclasses import replace

from fastmcp import FastMCP
from leadpath.attribution import (
    AttributionConfig,
    AttributionOrchestrator,
    AttributionStats,
    ContactNotFoundError,
    DateRange,
    TouchpointNormalizer,
    build_timeline,
    project_stats,
    summarize_results,
)
from leadpath.contacts import ContactStore, InMemoryContactStore, parse_timestamp

logger = logging.getLogger(__name__)

# Initialize server
mcp = FastMCP("LeadPath Attribution")

_store: ContactStore | None = None
_config: AttributionConfig | None = None

# cache key -> (monotonic time stored, stats), oldest insert first.
# Expired entries stay until evicted as the timeout fallback.
STATS_CACHE_MAX_ENTRIES = 100
_stats_cache: OrderedDict[str, tuple[float, AttributionStats]] = OrderedDict()


# =============================================================================
# Store and configuration
# =============================================================================


def set_contact_store(store: ContactStore, config: AttributionConfig | None = None) -> None:
    """Use the given store (and optionally config) for every tool call."""
    global _store, _config
    _store = store
    if config is not None:
        _config = config
    clear_stats_cache()


def clear_stats_cache() -> None:
    """Drop every cached statistics payload."""
    _stats_cache.clear()


def _cache_stats(key: str, stats: AttributionStats) -> None:
    """Store stats under key, evicting the oldest entries past the size bound."""
    _stats_cache[key] = (time.monotonic(), stats)
    _stats_cache.move_to_end(key)
    while len(_stats_cache) > STATS_CACHE_MAX_ENTRIES:
        evicted, _ = _stats_cache.popitem(last=False)
        logger.debug(f"Evicted attribution stats for {evicted} from cache")


def get_config() -> AttributionConfig:
    """Return the active configuration, loading it from the environment once."""
    global _config
    if _config is None:
        _config = AttributionConfig.from_env()
    return _config


def get_store() -> ContactStore:
    """Return the active store, loading LEADPATH_CONTACTS_FILE on first use.

    Raises:
        RuntimeError: If no store was set and LEADPATH_CONTACTS_FILE is unset.
    """
    global _store
    if _store is None:
        path = os.getenv("LEADPATH_CONTACTS_FILE")
        if not path:
            raise RuntimeError(
                "No contact store configured. Set LEADPATH_CONTACTS_FILE or call set_contact_store()."
            )
        logger.info(f"Loading contact store from {path}")
        _store = InMemoryContactStore.from_json_file(path)
    return _store


def _get_orchestrator() -> AttributionOrchestrator:
    return AttributionOrchestrator(get_store(), config=get_config())


def _date_range(start_date: str | None, end_date: str | None) -> DateRange | None:
    """Parse optional ISO-8601 bounds into a DateRange.

    Raises:
        ValueError: If a bound is not a valid timestamp or start is after end.
    """
    if not start_date and not end_date:
        return None

    bounds = {}
    for name, raw in (("start_date", start_date), ("end_date", end_date)):
        if raw:
            parsed = parse_timestamp(raw)
            if parsed is None:
                raise ValueError(f"Invalid {name}: {raw}")
            bounds[name] = parsed

    return DateRange(start=bounds.get("start_date"), end=bounds.get("end_date"))


# =============================================================================
# Attribution Tools
# =============================================================================


@mcp.tool()
def attribute_contact(
    contact_id: str,
    start_date: str | None = None,
    end_date: str | None = None,
) -> dict:
    """
    Attribute every deal of a contact to the touchpoints that preceded it.

    Args:
        contact_id: Contact identifier
        start_date: Only attribute deals created at or after this ISO-8601 time
        end_date: Only attribute deals created at or before this ISO-8601 time

    Returns:
        The contact's timeline, journey model, channel influence, one
        attribution chain per deal and the attribution certainty
    """
    try:
        date_range = _date_range(start_date, end_date)
        result = _get_orchestrator().attribute_contact(contact_id, date_range)
    except (ContactNotFoundError, ValueError, RuntimeError) as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "attribution": result.to_dict()}


@mcp.tool()
async def attribute_all_contacts(
    sample_size: int | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> dict:
    """
    Attribute a sample of contacts and aggregate the results.

    Contacts whose attribution fails are listed under "failures" and left out
    of every aggregate.

    Args:
        sample_size: Number of contacts to sample (default from configuration)
        start_date: Only attribute deals created at or after this ISO-8601 time
        end_date: Only attribute deals created at or before this ISO-8601 time

    Returns:
        Bulk analytics: channel stats, model usage, touchpoint and deal stats
    """
    try:
        date_range = _date_range(start_date, end_date)
        orchestrator = _get_orchestrator()
        bulk = await orchestrator.attribute_all_contacts_async(
            sample_size=sample_size, date_range=date_range
        )
    except (ValueError, RuntimeError) as e:
        return {"success": False, "error": str(e)}

    return {"success": True, **bulk.to_dict()}


def _empty_stats() -> AttributionStats:
    return project_stats(summarize_results([]))


@mcp.tool()
async def get_attribution_stats(
    start_date: str | None = None,
    end_date: str | None = None,
    sample_size: int | None = None,
) -> dict:
    """
    Dashboard attribution statistics.

    Results are cached per date range. When the computation exceeds the time
    budget, the last cached value (or an empty payload) is returned with
    "timed_out" set.

    Args:
        start_date: Only count deals created at or after this ISO-8601 time
        end_date: Only count deals created at or before this ISO-8601 time
        sample_size: Number of contacts to sample (default from configuration)

    Returns:
        attribution_accuracy (average certainty in percent), stats and
        timed_out
    """
    try:
        date_range = _date_range(start_date, end_date)
        orchestrator = _get_orchestrator()
    except (ValueError, RuntimeError) as e:
        return {"success": False, "error": str(e)}

    config = orchestrator.config
    key = date_range.cache_key if date_range else DateRange().cache_key
    if sample_size is not None:
        key = f"{key}:{sample_size}"

    cached = _stats_cache.get(key)
    if cached and time.monotonic() - cached[0] < config.stats_cache_ttl_seconds:
        logger.debug(f"Serving attribution stats for {key} from cache")
        return {"success": True, "cached": True, **cached[1].to_dict()}

    try:
        stats = await asyncio.wait_for(
            orchestrator.get_attribution_stats_async(
                date_range=date_range, sample_size=sample_size
            ),
            timeout=config.stats_timeout_seconds,
        )
    except TimeoutError:
        logger.warning(
            f"Attribution stats for {key} timed out after {config.stats_timeout_seconds}s"
        )
        fallback = cached[1] if cached else _empty_stats()
        return {
            "success": True,
            "cached": cached is not None,
            **replace(fallback, timed_out=True).to_dict(),
        }
    except ValueError as e:
        return {"success": False, "error": str(e)}

    _cache_stats(key, stats)
    return {"success": True, "cached": False, **stats.to_dict()}


# =============================================================================
# Touchpoint Tools
# =============================================================================


@mcp.tool()
def normalize_touchpoints(
    meetings: list[dict] | None = None,
    activities: list[dict] | None = None,
    forms: list[dict] | None = None,
) -> list[dict]:
    """
    Normalize raw platform records to touchpoints, ordered chronologically.

    Records without a resolvable timestamp are dropped.

    Args:
        meetings: Raw scheduler meetings
        activities: Raw CRM activities
        forms: Raw form tool submissions

    Returns:
        List of touchpoints, oldest first
    """
    touchpoints = TouchpointNormalizer().normalize(meetings, activities, forms)
    return [t.to_dict() for t in build_timeline(touchpoints)]


# =============================================================================
# Entry Point
# =============================================================================


def main():
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
