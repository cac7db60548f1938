import logging
from typing import List, Optional

from linkforge.schemas import ActivityLogEntry, ActivityType, AnalyticsSummary, LinkRecord, TopUrl

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10
TOP_URLS_LIMIT = 5

ACTIVITY_LABELS = {
    ActivityType.CREATED: "URL Created",
    ActivityType.CLICKED: "URL Clicked",
    ActivityType.SCANNED: "QR Code Scanned",
}


def engagement(url: LinkRecord) -> int:
    return url.click_count + url.qr_code_scans


def generate_analytics(urls: List[LinkRecord], activities: List[ActivityLogEntry]) -> AnalyticsSummary:
    """Summarize the link records and activity log.

    Nothing is cached: every call recomputes from its inputs, which are left
    untouched. Both rankings are stable, so ties keep list order.
    """
    recent = sorted(activities, key=lambda a: a.timestamp, reverse=True)[:RECENT_ACTIVITY_LIMIT]
    ranked = sorted(urls, key=engagement, reverse=True)[:TOP_URLS_LIMIT]
    return AnalyticsSummary(
        total_urls=len(urls),
        total_clicks=sum(u.click_count for u in urls),
        total_qr_scans=sum(u.qr_code_scans for u in urls),
        recent_activity=recent,
        top_urls=[TopUrl.model_validate({**u.model_dump(), "total_engagement": engagement(u)}) for u in ranked],
    )


def simulate_click(url: LinkRecord) -> LinkRecord:
    url.click_count += 1
    return url


def simulate_scan(url: LinkRecord) -> LinkRecord:
    url.qr_code_scans += 1
    return url


def create_activity_log(activity_type: ActivityType, details: str, url_id: Optional[str] = None) -> ActivityLogEntry:
    entry = ActivityLogEntry(type=activity_type, details=details, url_id=url_id)
    logger.info("Activity %s: %s", entry.type.value, details)
    return entry


def format_activity_type(activity_type) -> str:
    try:
        return ACTIVITY_LABELS[ActivityType(activity_type)]
    except ValueError:
        return "Unknown"
