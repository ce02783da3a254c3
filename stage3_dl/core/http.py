# stage3_dl/core/http.py
import requests
from requests.adapters import HTTPAdapter, Retry

from .. import __version__

UA = f"Gentoo-Stage3-Downloader/{__version__}"

def make_session() -> requests.Session:
    # Retry policy lives in download.fetch(); keep the adapter from retrying underneath it.
    retries = Retry(total=0, raise_on_status=False)
    adapter = HTTPAdapter(max_retries=retries, pool_connections=4, pool_maxsize=4)
    s = requests.Session()
    s.mount("http://", adapter); s.mount("https://", adapter)
    s.headers.update({"User-Agent": UA})
    return s

SESSION = make_session()
