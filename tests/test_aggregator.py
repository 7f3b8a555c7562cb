"""Tests for the aggregation cycle."""
from typing import List
from unittest.mock import MagicMock

import pytest

from core.entities import Item
from ingestion.base import SourceAdapter
from workflows.aggregator import Aggregator
from conftest import StaticAdapter, make_item


class ExplodingAdapter(SourceAdapter):
    name = "exploding"

    async def fetch_items(self) -> List[Item]:
        raise RuntimeError("adapter bug")


async def test_cycle_merges_in_priority_order_and_dedupes(store):
    curated = StaticAdapter("curated", [make_item("shared", score=1), make_item("c1")])
    hn = StaticAdapter("hackernews", [make_item("hn_1")])
    reddit = StaticAdapter("reddit", [make_item("shared", score=99), make_item("r1")])

    aggregator = Aggregator([curated, hn, reddit], store)
    result = await aggregator.run_cycle()

    assert [item.external_id for item in result] == ["shared", "c1", "hn_1", "r1"]
    assert store.get("shared").score == 1
    assert len(store) == 4


async def test_failing_adapter_does_not_fail_cycle(store):
    adapters = [
        StaticAdapter("curated", [make_item("c1")]),
        StaticAdapter("anthropic", [make_item("b1")]),
        ExplodingAdapter(),
        StaticAdapter("github", [make_item("gh_1")]),
        StaticAdapter("reddit", [make_item("r1"), make_item("r2")]),
    ]

    result = await Aggregator(adapters, store).run_cycle()

    assert sorted(item.external_id for item in result) == ["b1", "c1", "gh_1", "r1", "r2"]
    assert len(store) == 5


async def test_cycle_with_no_results_completes_without_writing(store):
    store.upsert_many = MagicMock()
    aggregator = Aggregator([ExplodingAdapter(), StaticAdapter("empty", [])], store)

    result = await aggregator.run_cycle()

    assert result == []
    store.upsert_many.assert_not_called()


async def test_repeated_cycles_keep_one_record_per_id(store):
    adapter = StaticAdapter("github", [make_item("gh_42", score=5)])
    aggregator = Aggregator([adapter], store)

    await aggregator.run_cycle()
    adapter.items = [make_item("gh_42", score=8)]
    await aggregator.run_cycle()

    assert len(store) == 1
    assert store.get("gh_42").score == 8


@pytest.mark.parametrize("count", [0, 3])
async def test_each_adapter_called_once_per_cycle(store, count):
    adapters = [StaticAdapter(f"s{i}", []) for i in range(count)]

    await Aggregator(adapters, store).run_cycle()

    assert all(adapter.calls == 1 for adapter in adapters)
