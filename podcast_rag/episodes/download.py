"""Download podcast episodes listed in an RSS feed into the local data directory."""

from __future__ import annotations

import logging
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from podcast_rag.episodes.models import EpisodeData, Manifest

logger = logging.getLogger(__name__)


class DownloadError(RuntimeError):
    """Raised when the feed or an episode file cannot be fetched or validated."""


@dataclass
class Enclosure:
    url: str
    length: str = ""


@dataclass
class FeedItem:
    """The subset of an RSS ``<item>`` the pipeline keeps."""

    guid: str
    title: str = ""
    description: str = ""
    link: str = ""
    published: str = ""
    enclosures: list[Enclosure] = field(default_factory=list)


def _text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def parse_feed(xml_text: str) -> tuple[str, list[FeedItem]]:
    """Parse an RSS 2.0 document.

    Returns:
        ``(last_updated, items)`` where *last_updated* is the channel's
        ``lastBuildDate`` (or ``pubDate``) and *items* are in feed order.

    Raises:
        DownloadError: If the document is not RSS.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise DownloadError(f"failed to parse RSS feed: {exc}") from exc

    channel = root.find("channel")
    if channel is None:
        raise DownloadError("RSS feed has no <channel> element")

    last_updated = _text(channel, "lastBuildDate") or _text(channel, "pubDate")
    items: list[FeedItem] = []
    for item in channel.findall("item"):
        items.append(
            FeedItem(
                guid=_text(item, "guid"),
                title=_text(item, "title"),
                description=_text(item, "description"),
                link=_text(item, "link"),
                published=_text(item, "pubDate"),
                enclosures=[
                    Enclosure(url=e.get("url", ""), length=e.get("length", ""))
                    for e in item.findall("enclosure")
                ],
            )
        )
    return last_updated, items


def fetch_feed(client: httpx.Client, feed_url: str) -> tuple[str, list[FeedItem]]:
    try:
        response = client.get(feed_url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise DownloadError(f"failed to process RSS from {feed_url}: {exc}") from exc
    return parse_feed(response.text)


def download_file(client: httpx.Client, url: str, destination: Path, expected_length: int) -> int:
    """Stream *url* into *destination* and check the byte count.

    Raises:
        FileExistsError: If *destination* already exists.
        DownloadError: On HTTP errors or a length mismatch.
    """
    written = 0
    with open(destination, "xb") as out:
        try:
            with client.stream("GET", url) as response:
                if response.status_code != 200:
                    response.read()
                    raise DownloadError(
                        f"unexpected http status {response.status_code} while downloading "
                        f"{url}: {response.text}"
                    )
                for data in response.iter_bytes():
                    out.write(data)
                    written += len(data)
        except httpx.HTTPError as exc:
            out.close()
            destination.unlink(missing_ok=True)
            raise DownloadError(f"failed to download podcast file {url}: {exc}") from exc
        except DownloadError:
            out.close()
            destination.unlink(missing_ok=True)
            raise

    if written != expected_length:
        destination.unlink(missing_ok=True)
        raise DownloadError(
            f"downloaded file was not the expected length: expected {expected_length} "
            f"and got {written} bytes"
        )
    return written


def download_episodes(
    client: httpx.Client,
    manifest: Manifest,
    data_dir: str | Path,
    feed_url: str,
    max_episodes: int = 10,
    pause_seconds: float = 2.0,
) -> list[str]:
    """Download up to *max_episodes* feed items not yet in *manifest*.

    The manifest is updated in place; saving it is left to the caller.

    Returns:
        GUIDs of the newly downloaded episodes.
    """
    data_path = Path(data_dir)
    data_path.mkdir(parents=True, exist_ok=True)

    last_updated, items = fetch_feed(client, feed_url)
    manifest.last_updated = last_updated

    downloaded: list[str] = []
    for item in items:
        if item.guid in manifest.episodes:
            logger.info("Skipping existing item %s", item.guid)
            continue
        if len(downloaded) >= max_episodes:
            break

        if len(item.enclosures) != 1:
            raise DownloadError(
                f"unexpected number of enclosures ({len(item.enclosures)}) in podcast item "
                f"{item.guid} ({item.title})"
            )
        enclosure = item.enclosures[0]
        try:
            expected_length = int(enclosure.length)
        except ValueError as exc:
            raise DownloadError(
                f"failed to parse expected file length from string {enclosure.length!r}"
            ) from exc

        filename = f"{item.guid}.mp3"
        logger.info("Downloading %s (%s)", item.guid, item.title)
        try:
            download_file(client, enclosure.url, data_path / filename, expected_length)
        except FileExistsError:
            logger.info("Skipping existing file at %s", filename)
            continue

        manifest.episodes[item.guid] = EpisodeData(
            guid=item.guid,
            title=item.title,
            description=item.description,
            link=item.link,
            filename=filename,
            published=item.published,
        )
        downloaded.append(item.guid)
        if pause_seconds:
            time.sleep(pause_seconds)

    return downloaded
