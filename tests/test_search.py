"""
Tests for search result parsing, ranking and the search session controller.
"""

import asyncio
import json

import httpx
import pytest

from cv_dashboard.core.errors import SearchUnavailable
from cv_dashboard.models.search import SearchResultEntry
from cv_dashboard.services import codec
from cv_dashboard.services.search import SearchProviderClient, SearchRankingEngine, SearchSession, apply_ranking
from cv_dashboard.services.search.ranking import parse_results

from .conftest import make_row


@pytest.fixture
def records():
    return codec.decode_many([make_row("r1"), make_row("r2"), make_row("r3")])


class TestParseResults:
    def test_primary_key_wins_over_fallback(self):
        body = json.dumps(
            [{"document": {"metadata": {"supabase_record_id": "a", "supabase_id": "b"}}, "score": 0.5}]
        )

        assert parse_results(body) == [SearchResultEntry(correlation_id="a", score=0.5)]

    def test_entries_without_id_or_score_are_skipped(self):
        body = json.dumps(
            [
                {"document": {"metadata": {}}, "score": 0.9},
                {"document": {"metadata": {"supabase_id": "r2"}}},
                {"document": {"metadata": {"supabase_id": "r3"}}, "score": "high"},
                {"score": 0.1},
                "junk",
                {"document": {"metadata": {"supabase_id": "r4"}}, "score": 1},
            ]
        )

        assert parse_results(body) == [SearchResultEntry(correlation_id="r4", score=1.0)]

    def test_non_array_is_malformed(self):
        with pytest.raises(SearchUnavailable) as exc_info:
            parse_results('{"results": []}')

        assert exc_info.value.kind == "malformed"

    def test_html_body_gets_format_message(self):
        with pytest.raises(SearchUnavailable) as exc_info:
            parse_results("<html><body>Workflow not active</body></html>")

        assert exc_info.value.kind == "malformed"
        assert "invalid data format" in exc_info.value.message

    def test_garbage_body_gets_malformed_message(self):
        with pytest.raises(SearchUnavailable) as exc_info:
            parse_results("definitely not json")

        assert "malformed data" in exc_info.value.message


class TestApplyRanking:
    def test_filters_and_sorts_by_score(self, records):
        entries = [
            SearchResultEntry(correlation_id="r2", score=0.4),
            SearchResultEntry(correlation_id="r1", score=0.9),
            SearchResultEntry(correlation_id="missing", score=0.99),
        ]

        ranked = apply_ranking(entries, records)

        assert [(p.id, p.search_score) for p in ranked] == [("r1", 0.9), ("r2", 0.4)]

    def test_output_is_subset_and_descending(self, records):
        entries = [SearchResultEntry(correlation_id=f"r{i}", score=s) for i, s in [(3, 0.2), (1, 0.7), (2, 0.5)]]

        ranked = apply_ranking(entries, records)

        assert {p.id for p in ranked} <= {r.id for r in records}
        for first, second in zip(ranked, ranked[1:]):
            assert first.search_score >= second.search_score

    def test_equal_scores_keep_input_order(self, records):
        entries = [SearchResultEntry(correlation_id=r.id, score=0.5) for r in reversed(records)]

        assert [p.id for p in apply_ranking(entries, records)] == ["r1", "r2", "r3"]

    def test_repeated_id_keeps_last_score(self, records):
        entries = [
            SearchResultEntry(correlation_id="r1", score=0.1),
            SearchResultEntry(correlation_id="r1", score=0.8),
        ]

        assert apply_ranking(entries, records)[0].search_score == 0.8

    def test_no_matches_is_empty(self, records):
        assert apply_ranking([SearchResultEntry(correlation_id="zzz", score=1.0)], records) == []


class TestSearchRankingEngine:
    async def test_scenario_ranks_and_excludes(self, make_engine, search_hits, records):
        calls = []
        engine = make_engine(body=search_hits, calls=calls)

        ranked = await engine.rank("python backend", records)

        assert calls == [{"message": "python backend"}]
        assert [(p.id, p.search_score) for p in ranked] == [("r1", 0.9), ("r2", 0.4)]

    @pytest.mark.parametrize("query", ["", "   ", "\n\t"])
    async def test_blank_query_makes_no_call(self, make_engine, records, query):
        calls = []
        engine = make_engine(calls=calls)

        assert await engine.rank(query, records) is None
        assert await engine.rank(query, records) is None
        assert calls == []

    async def test_is_idempotent(self, make_engine, search_hits, records):
        engine = make_engine(body=search_hits)

        first = await engine.rank("go", records)
        second = await engine.rank("go", records)

        assert [p.model_dump() for p in first] == [p.model_dump() for p in second]

    async def test_http_500_is_a_status_failure(self, make_engine, records):
        engine = make_engine(status_code=500, body="Internal Server Error")

        with pytest.raises(SearchUnavailable) as exc_info:
            await engine.rank("go", records)

        assert exc_info.value.kind == "status"
        assert exc_info.value.status == 500
        assert exc_info.value.category == "transport"
        assert "Search service error (500)" in exc_info.value.message
        assert "malformed" not in exc_info.value.message

    async def test_empty_body(self, make_engine, records):
        engine = make_engine(body="   ")

        with pytest.raises(SearchUnavailable) as exc_info:
            await engine.rank("go", records)

        assert exc_info.value.kind == "empty"
        assert exc_info.value.category == "payload"

    async def test_malformed_body(self, make_engine, records):
        engine = make_engine(body="{oops")

        with pytest.raises(SearchUnavailable) as exc_info:
            await engine.rank("go", records)

        assert exc_info.value.kind == "malformed"

    async def test_transport_error(self, records):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        engine = SearchRankingEngine(SearchProviderClient("https://search.test", transport=httpx.MockTransport(handler)))

        with pytest.raises(SearchUnavailable) as exc_info:
            await engine.rank("go", records)

        assert exc_info.value.kind == "transport"
        assert "Unable to connect" in exc_info.value.message

    async def test_timeout_is_a_transport_error(self, records):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        engine = SearchRankingEngine(SearchProviderClient("https://search.test", transport=httpx.MockTransport(handler)))

        with pytest.raises(SearchUnavailable) as exc_info:
            await engine.rank("go", records)

        assert exc_info.value.kind == "transport"


class StubProfiles:
    def __init__(self, records):
        self.records = records

    async def list(self, filter_text=None):
        return list(self.records)


class GatedEngine:
    """Engine whose responses are released by the test, one query at a time."""

    def __init__(self):
        self.gates: dict[str, asyncio.Event] = {}
        self.responses: dict[str, object] = {}

    def respond(self, query, response):
        self.responses[query] = response
        self.gates.setdefault(query, asyncio.Event()).set()

    async def rank(self, query, records):
        await self.gates.setdefault(query, asyncio.Event()).wait()
        response = self.responses[query]
        if isinstance(response, Exception):
            raise response
        return response


class TestSearchSession:
    async def test_fail_open_on_provider_error(self, make_engine, records):
        session = SearchSession(StubProfiles(records), make_engine(status_code=500, body="oops"))
        await session.load()

        await session.search("go")

        assert session.error.kind == "status"
        assert not session.ranked
        assert [p.id for p in session.visible] == ["r1", "r2", "r3"]

    async def test_ranked_view(self, make_engine, search_hits, records):
        session = SearchSession(StubProfiles(records), make_engine(body=search_hits))
        await session.load()

        await session.search("go")

        assert session.ranked
        assert [p.id for p in session.visible] == ["r1", "r2"]

    async def test_zero_matches_is_not_an_error(self, make_engine, records):
        session = SearchSession(StubProfiles(records), make_engine(body="[]"))
        await session.load()

        await session.search("cobol")

        assert session.error is None
        assert session.ranked
        assert session.visible == []

    async def test_clear_restores_full_list(self, make_engine, search_hits, records):
        session = SearchSession(StubProfiles(records), make_engine(body=search_hits))
        await session.load()
        await session.search("go")

        session.clear()

        assert session.query == ""
        assert session.error is None
        assert len(session.visible) == 3

    async def test_stale_response_is_discarded(self, records):
        engine = GatedEngine()
        session = SearchSession(StubProfiles(records), engine)
        await session.load()
        first_hits = apply_ranking([SearchResultEntry(correlation_id="r3", score=0.3)], records)
        second_hits = apply_ranking([SearchResultEntry(correlation_id="r1", score=0.9)], records)

        slow = asyncio.create_task(session.search("first"))
        await asyncio.sleep(0)
        engine.respond("second", second_hits)
        await session.search("second")
        engine.respond("first", first_hits)
        await slow

        assert session.query == "second"
        assert [p.id for p in session.visible] == ["r1"]

    async def test_stale_error_is_discarded(self, records):
        engine = GatedEngine()
        session = SearchSession(StubProfiles(records), engine)
        await session.load()

        slow = asyncio.create_task(session.search("first"))
        await asyncio.sleep(0)
        session.clear()
        engine.respond("first", SearchUnavailable("transport", "down"))
        await slow

        assert session.error is None
        assert len(session.visible) == 3

    async def test_empty_query_supersedes_in_flight_search(self, records):
        engine = GatedEngine()
        session = SearchSession(StubProfiles(records), engine)
        await session.load()
        hits = apply_ranking([SearchResultEntry(correlation_id="r1", score=0.9)], records)

        slow = asyncio.create_task(session.search("python"))
        await asyncio.sleep(0)
        await session.search("")
        engine.respond("python", hits)
        await slow

        assert session.query == ""
        assert session.results is None
        assert session.error is None
        assert not session.ranked
        assert [p.id for p in session.visible] == ["r1", "r2", "r3"]
