"""Tests for the analytics aggregator and activity log helpers."""

from datetime import timedelta

from linkforge.analytics import (
    create_activity_log,
    format_activity_type,
    generate_analytics,
    simulate_click,
    simulate_scan,
)
from linkforge.schemas import ActivityLogEntry, ActivityType


def _entry(i, timestamp):
    return ActivityLogEntry(type=ActivityType.CLICKED, details=f"entry {i}", timestamp=timestamp)


def test_totals(make_link):
    urls = [make_link(click_count=3, qr_code_scans=1), make_link(click_count=4, qr_code_scans=5)]
    summary = generate_analytics(urls, [])
    assert summary.total_urls == 2
    assert summary.total_clicks == 7
    assert summary.total_qr_scans == 6


def test_empty_inputs():
    summary = generate_analytics([], [])
    assert summary.total_urls == 0
    assert summary.total_clicks == 0
    assert summary.recent_activity == []
    assert summary.top_urls == []


def test_top_urls_ranked_by_engagement(make_link):
    urls = [make_link(click_count=c) for c in (10, 50, 5, 100, 20)]
    summary = generate_analytics(urls, [])
    assert [u.total_engagement for u in summary.top_urls] == [100, 50, 20, 10, 5]
    assert [u.id for u in summary.top_urls] == [urls[i].id for i in (3, 1, 4, 0, 2)]


def test_top_urls_count_clicks_and_scans(make_link):
    urls = [make_link(click_count=1, qr_code_scans=9), make_link(click_count=5, qr_code_scans=0)]
    summary = generate_analytics(urls, [])
    assert [u.total_engagement for u in summary.top_urls] == [10, 5]


def test_top_urls_truncated_to_five(make_link):
    urls = [make_link(click_count=c) for c in (1, 7, 3, 9, 2, 8, 4)]
    summary = generate_analytics(urls, [])
    assert [u.total_engagement for u in summary.top_urls] == [9, 8, 7, 4, 3]


def test_top_urls_ties_keep_list_order(make_link):
    urls = [make_link(click_count=5) for _ in range(3)]
    summary = generate_analytics(urls, [])
    assert [u.id for u in summary.top_urls] == [u.id for u in urls]


def test_recent_activity_newest_first(fixed_now):
    entries = [_entry(i, fixed_now + timedelta(minutes=i)) for i in range(15)]
    summary = generate_analytics([], entries)
    assert len(summary.recent_activity) == 10
    assert [e.details for e in summary.recent_activity] == [f"entry {i}" for i in range(14, 4, -1)]


def test_recent_activity_ties_keep_insertion_order(fixed_now):
    entries = [_entry(i, fixed_now) for i in range(3)]
    summary = generate_analytics([], entries)
    assert [e.details for e in summary.recent_activity] == ["entry 0", "entry 1", "entry 2"]


def test_inputs_not_mutated(make_link, fixed_now):
    entries = [_entry(i, fixed_now + timedelta(minutes=i)) for i in range(3)]
    urls = [make_link(click_count=c) for c in (1, 2, 3)]
    entries_before, urls_before = list(entries), list(urls)
    generate_analytics(urls, entries)
    assert entries == entries_before
    assert urls == urls_before


def test_summary_serializes_with_camel_case_keys(make_link):
    data = generate_analytics([make_link(qr_code_scans=2)], []).model_dump(by_alias=True)
    assert data["totalQRScans"] == 2
    assert data["topUrls"][0]["totalEngagement"] == 2
    assert data["topUrls"][0]["shortUrl"].startswith("https://short.ly/")


def test_simulated_events_increment_counters(make_link):
    link = make_link()
    simulate_click(link)
    simulate_click(link)
    simulate_scan(link)
    assert link.click_count == 2
    assert link.qr_code_scans == 1


def test_create_activity_log():
    entry = create_activity_log(activity_type=ActivityType.CREATED, details="Created short URL", url_id="abc")
    assert entry.type is ActivityType.CREATED
    assert entry.details == "Created short URL"
    assert entry.url_id == "abc"
    assert entry.id
    assert entry.timestamp.tzinfo is not None
    assert entry.label == "URL Created"


def test_activity_ids_are_unique():
    ids = {create_activity_log(ActivityType.CLICKED, "x").id for _ in range(50)}
    assert len(ids) == 50


def test_format_activity_type():
    assert format_activity_type(ActivityType.CLICKED) == "URL Clicked"
    assert format_activity_type(activity_type="scanned") == "QR Code Scanned"
    assert format_activity_type("deleted") == "Unknown"
