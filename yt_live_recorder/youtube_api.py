import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

API_BASE = "https://www.googleapis.com/youtube/v3"
WATCH_BASE = "https://www.youtube.com/watch?v="


class YouTubeAPIError(Exception):
    """A YouTube Data API call failed (network, HTTP status or payload)."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class ResponseFormatError(YouTubeAPIError):
    """The API answered, but not with the JSON shape we expect."""


class ChannelNotFoundError(YouTubeAPIError):
    """The configured channel name does not resolve to any channel."""

    def __init__(self, channel):
        super().__init__(f"Channel '{channel}' did not resolve to a channel id.")
        self.channel = channel


def youtube_live_link(video_id: str) -> str:
    return f"{WATCH_BASE}{video_id}"


@dataclass(frozen=True)
class PageInfo:
    total_results: int
    results_per_page: int

    @classmethod
    def from_dict(cls, data: dict) -> "PageInfo":
        return cls(
            total_results=int(data["totalResults"]),
            results_per_page=int(data["resultsPerPage"]),
        )


@dataclass(frozen=True)
class ChannelItem:
    kind: str
    etag: str
    id: str

    @classmethod
    def from_dict(cls, data: dict) -> "ChannelItem":
        return cls(kind=data["kind"], etag=data["etag"], id=data["id"])


@dataclass(frozen=True)
class ChannelListResponse:
    kind: str
    etag: str
    page_info: PageInfo
    items: List[ChannelItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ChannelListResponse":
        # The API omits "items" entirely when nothing matches.
        return cls(
            kind=data["kind"],
            etag=data["etag"],
            page_info=PageInfo.from_dict(data["pageInfo"]),
            items=[ChannelItem.from_dict(it) for it in data.get("items", [])],
        )


@dataclass(frozen=True)
class Thumbnail:
    url: str
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Thumbnail":
        return cls(url=data["url"], width=data.get("width"), height=data.get("height"))


@dataclass(frozen=True)
class Snippet:
    published_at: str
    channel_id: str
    title: str
    description: str
    thumbnails: Dict[str, Thumbnail]
    channel_title: str
    live_broadcast_content: str
    publish_time: str

    @classmethod
    def from_dict(cls, data: dict) -> "Snippet":
        return cls(
            published_at=data["publishedAt"],
            channel_id=data["channelId"],
            title=data["title"],
            description=data.get("description", ""),
            thumbnails={name: Thumbnail.from_dict(t) for name, t in data.get("thumbnails", {}).items()},
            channel_title=data["channelTitle"],
            live_broadcast_content=data["liveBroadcastContent"],
            publish_time=data.get("publishTime", data["publishedAt"]),
        )


@dataclass(frozen=True)
class SearchResultId:
    kind: str
    video_id: str

    @classmethod
    def from_dict(cls, data: dict) -> "SearchResultId":
        return cls(kind=data["kind"], video_id=data["videoId"])


@dataclass(frozen=True)
class SearchItem:
    kind: str
    etag: str
    id: SearchResultId
    snippet: Snippet

    @classmethod
    def from_dict(cls, data: dict) -> "SearchItem":
        return cls(
            kind=data["kind"],
            etag=data["etag"],
            id=SearchResultId.from_dict(data["id"]),
            snippet=Snippet.from_dict(data["snippet"]),
        )


@dataclass(frozen=True)
class SearchListResponse:
    kind: str
    etag: str
    page_info: PageInfo
    items: List[SearchItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "SearchListResponse":
        return cls(
            kind=data["kind"],
            etag=data["etag"],
            page_info=PageInfo.from_dict(data["pageInfo"]),
            items=[SearchItem.from_dict(it) for it in data.get("items", [])],
        )


@dataclass(frozen=True)
class LiveVideo:
    video_id: str
    title: str
    channel_id: str
    channel_title: str
    published_at: str

    @property
    def url(self) -> str:
        return youtube_live_link(self.video_id)

    @classmethod
    def from_search_item(cls, item: SearchItem) -> "LiveVideo":
        return cls(
            video_id=item.id.video_id,
            title=item.snippet.title,
            channel_id=item.snippet.channel_id,
            channel_title=item.snippet.channel_title,
            published_at=item.snippet.published_at,
        )


class YouTubeAPI:
    def __init__(self, api_key, timeout=10, session=None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/json'})

    def _get(self, endpoint, params):
        """Issues a GET against the Data API and returns the decoded JSON body."""
        url = f"{API_BASE}/{endpoint}"
        query = dict(params, key=self.api_key)
        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise YouTubeAPIError(f"Request to /{endpoint} failed: {e}") from e

        if not response.ok:
            raise YouTubeAPIError(
                f"/{endpoint} returned HTTP {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ResponseFormatError(f"Failed to decode JSON from /{endpoint}. Response text: {response.text[:200]}") from e

    def get_channels(self, channel):
        # Handles ("@name") and legacy usernames are looked up through different filters.
        if channel.startswith("@"):
            params = {"part": "id", "forHandle": channel}
        else:
            params = {"part": "id", "forUsername": channel}
        data = self._get("channels", params)
        try:
            return ChannelListResponse.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseFormatError(f"Unexpected /channels payload: missing or invalid {e}") from e

    def get_channel_id(self, channel):
        """Resolves a channel name or @handle to its channel id."""
        response = self.get_channels(channel)
        if not response.items:
            raise ChannelNotFoundError(channel)
        return response.items[0].id

    def search_live(self, channel_id):
        """Searches for videos the channel is broadcasting live right now."""
        params = {
            "part": "snippet",
            "channelId": channel_id,
            "type": "video",
            "eventType": "live",
        }
        data = self._get("search", params)
        try:
            return SearchListResponse.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseFormatError(f"Unexpected /search payload: missing or invalid {e}") from e

    def get_live_video(self, channel) -> Optional[LiveVideo]:
        """
        Returns the video the channel is currently broadcasting live, or None.
        Only the first search result is considered.
        """
        channel_id = self.get_channel_id(channel)
        logger.debug("Channel '%s' resolved to %s", channel, channel_id)
        search = self.search_live(channel_id)
        if not search.items:
            return None
        return LiveVideo.from_search_item(search.items[0])


def _error_message(response):
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.reason or response.text[:200]


if __name__ == '__main__':
    # Example usage:
    # python -m yt_live_recorder.youtube_api <API_KEY> <CHANNEL>
    import sys

    logging.basicConfig(level=logging.DEBUG)
    if len(sys.argv) != 3:
        print("Usage: python -m yt_live_recorder.youtube_api <API_KEY> <CHANNEL>")
        sys.exit(1)

    api = YouTubeAPI(sys.argv[1])
    try:
        live = api.get_live_video(sys.argv[2])
    except YouTubeAPIError as e:
        print(e)
        sys.exit(1)

    if live:
        print(json.dumps(asdict(live), indent=2, ensure_ascii=False))
        print(f"  -> {live.url}")
    else:
        print("[OFFLINE]")
