import asyncio
import pytest

from decimal import Decimal

from launchpad_core.common.config import EngineSettings
from launchpad_core.common.enums import SupplySource
from launchpad_core.sources.memory import InMemoryChainState, InMemoryMetadataStore
from launchpad_core.supply.tracker import SupplyTracker

MINT = "MintA"


@pytest.fixture
def settings():
    return EngineSettings(read_timeout_s=0.05, _env_file=None)


def _make_tracker(settings, on_chain=None, hint=None, with_store=True):
    """
    Returns (tracker, chain, store) with the given chain supply and ledger hint.
    """
    chain = InMemoryChainState()
    if on_chain is not None:
        chain.tokens_sold[MINT] = on_chain
    store = InMemoryMetadataStore() if with_store else None
    if hint is not None:
        store.tokens_sold_hints[MINT] = hint
    return SupplyTracker(chain, store, settings), chain, store


def test_ledger_first(settings):
    """A ledger hint wins and the chain is not read."""
    tracker, chain, _ = _make_tracker(settings, on_chain=700, hint=500)
    reading = asyncio.run(tracker.tokens_sold(MINT))
    assert reading.tokens_sold == 500
    assert reading.source == SupplySource.LEDGER
    assert not reading.degraded
    assert chain.calls["get_tokens_sold"] == 0


def test_zero_hint_is_valid(settings):
    """Zero is a real ledger value, not a missing one."""
    tracker, _, _ = _make_tracker(settings, on_chain=700, hint=0)
    reading = asyncio.run(tracker.tokens_sold(MINT))
    assert reading.tokens_sold == 0
    assert reading.source == SupplySource.LEDGER


@pytest.mark.parametrize("hint", [None, -1])
def test_chain_when_no_usable_hint(settings, hint):
    """A missing or negative hint falls through to the chain, flagged as degraded."""
    tracker, _, _ = _make_tracker(settings, on_chain=700, hint=hint)
    reading = asyncio.run(tracker.tokens_sold(MINT))
    assert reading.tokens_sold == 700
    assert reading.source == SupplySource.CHAIN
    assert reading.degraded


def test_chain_without_store(settings):
    """With no metadata store the chain is the first source."""
    tracker, _, _ = _make_tracker(settings, on_chain=42, with_store=False)
    reading = asyncio.run(tracker.tokens_sold(MINT))
    assert reading.tokens_sold == 42
    assert reading.source == SupplySource.CHAIN


def test_failing_store_falls_through(settings):
    """An erroring store is logged and skipped."""
    tracker, _, store = _make_tracker(settings, on_chain=700, hint=500)
    store.failing = True
    reading = asyncio.run(tracker.tokens_sold(MINT))
    assert reading.source == SupplySource.CHAIN


def test_slow_store_falls_through(settings):
    """A store slower than the read timeout is skipped."""
    tracker, _, store = _make_tracker(settings, on_chain=700, hint=500)
    store.delay_s = 0.5
    reading = asyncio.run(tracker.tokens_sold(MINT))
    assert reading.source == SupplySource.CHAIN
    assert reading.tokens_sold == 700


def test_everything_down(settings):
    """With no source available the floor is zero, flagged as degraded."""
    tracker, chain, store = _make_tracker(settings, on_chain=700, hint=500)
    store.failing = True
    chain.failing = True
    reading = asyncio.run(tracker.tokens_sold(MINT))
    assert reading.tokens_sold == 0
    assert reading.source == SupplySource.FALLBACK
    assert reading.degraded


def test_unknown_mint(settings):
    """A mint unknown to every source resolves to the zero floor instead of raising."""
    tracker, _, _ = _make_tracker(settings)
    reading = asyncio.run(tracker.tokens_sold(MINT))
    assert reading.source == SupplySource.FALLBACK


@pytest.mark.parametrize("sold, expected", [(700, 300), (1000, 0), (1200, 0)])
def test_tokens_remaining(settings, sold, expected):
    """Remaining supply never goes negative."""
    tracker, _, _ = _make_tracker(settings, hint=sold)
    assert asyncio.run(tracker.tokens_remaining(MINT, 1000)) == expected


def test_circulating_pct(settings):
    """Percent of the total supply already sold."""
    tracker, _, _ = _make_tracker(settings, hint=250)
    assert asyncio.run(tracker.circulating_pct(MINT, 1000)) == Decimal("25")
    assert asyncio.run(tracker.circulating_pct(MINT, 0)) == Decimal("0")
