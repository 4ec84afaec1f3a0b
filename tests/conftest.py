import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest


_PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_PROJECT_ROOT))


def channels_payload(*channel_ids):
    data = {
        "kind": "youtube#channelListResponse",
        "etag": "etag-channels",
        "pageInfo": {"totalResults": len(channel_ids), "resultsPerPage": 5},
    }
    if channel_ids:
        data["items"] = [
            {"kind": "youtube#channel", "etag": f"etag-{cid}", "id": cid}
            for cid in channel_ids
        ]
    return data


def search_item(video_id, title="Live now", channel_id="UC123", channel_title="Acme"):
    return {
        "kind": "youtube#searchResult",
        "etag": f"etag-{video_id}",
        "id": {"kind": "youtube#video", "videoId": video_id},
        "snippet": {
            "publishedAt": "2024-05-01T12:00:00Z",
            "channelId": channel_id,
            "title": title,
            "description": "",
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default_live.jpg", "width": 120, "height": 90},
                "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault_live.jpg", "width": 480, "height": 360},
            },
            "channelTitle": channel_title,
            "liveBroadcastContent": "live",
            "publishTime": "2024-05-01T12:00:00Z",
        },
    }


def search_payload(*items):
    return {
        "kind": "youtube#searchListResponse",
        "etag": "etag-search",
        "regionCode": "US",
        "pageInfo": {"totalResults": len(items), "resultsPerPage": 5},
        "items": list(items),
    }


def make_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = "OK" if response.ok else "Error"
    response.json.return_value = payload
    response.text = str(payload)
    return response


class FakeSession:
    """Answers /channels and /search with canned responses and records every call."""

    def __init__(self, channels, search):
        self.headers = {}
        self.calls = []
        self.responses = {"channels": channels, "search": search}

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        endpoint = url.rsplit("/", 1)[-1]
        response = self.responses[endpoint]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def acme_session():
    """Channel "Acme" resolves to UC123 and is live with video abcXYZ."""
    return FakeSession(
        channels=make_response(channels_payload("UC123")),
        search=make_response(search_payload(search_item("abcXYZ", title="Acme live"))),
    )


@pytest.fixture
def offline_session():
    return FakeSession(
        channels=make_response(channels_payload("UC123")),
        search=make_response(search_payload()),
    )
