import requests
from requests.adapters import HTTPAdapter

USER_AGENT = "feedmill/1.0 (+https://localhost)"


def build_session(pool_maxsize: int = 50) -> requests.Session:
    """Shared session with a connection pool sized for the enrichment workers.

    No retry policy: every item gets a single best-effort attempt.
    """
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=20, pool_maxsize=pool_maxsize, max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"User-Agent": USER_AGENT})
    return session
