import logging
import re
from typing import Iterable, List, Optional

from feedmill.storage.models import NormalizedRecord, RawTweet
from feedmill.utils.time_utils import parse_twitter_date

logger = logging.getLogger(__name__)

# text, then the first whitespace-delimited http(s) link
TWEET_RE = re.compile(r"(.*?)(?:^|\s)(https?://\S+)", re.DOTALL)


def normalize_tweet(raw: RawTweet) -> Optional[NormalizedRecord]:
    """Split a tweet into title and link. Returns None when the tweet can't be used."""
    m = TWEET_RE.match(raw.text)
    if not m:
        logger.info("Skipping tweet without a link: %r", raw.text[:80])
        return None

    try:
        created = parse_twitter_date(raw.created_at)
    except ValueError:
        logger.warning("Skipping tweet with bad timestamp %r", raw.created_at)
        return None

    return NormalizedRecord(title=m.group(1).strip(), url=m.group(2), created=created)


def normalize_tweets(raws: Iterable[RawTweet]) -> List[NormalizedRecord]:
    records = []
    for raw in raws:
        record = normalize_tweet(raw)
        if record is not None:
            records.append(record)
    return records
