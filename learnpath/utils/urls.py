"""
URL helpers shared by the enrichment adapters
"""
from typing import Optional
from urllib.parse import quote, urlsplit

# Characters JavaScript's encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(value: str) -> str:
    """Percent-encode a query/path component, matching encodeURIComponent.

    Characters UTF-8 cannot encode, such as lone surrogates, become ``?``.
    """
    return quote(value, safe=_URI_COMPONENT_SAFE, errors="replace")


def hostname(url: str) -> Optional[str]:
    """Host part of a URL, or None when there isn't one"""
    try:
        return urlsplit(url).hostname or None
    except ValueError:
        return None


def youtube_search_url(query: str) -> str:
    return f"https://www.youtube.com/results?search_query={encode_uri_component(query)}"


def youtube_video_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def youtube_playlist_url(playlist_id: str) -> str:
    return f"https://www.youtube.com/playlist?list={playlist_id}"
