"""Keep blob store URLs out of logs and error messages."""
from urllib.parse import urlparse


def get_url_domain(url: str) -> str:
    """Host part of a URL, e.g. `abc.public.blob.vercel-storage.com`.

    Blob URLs are public and unguessable, so the full URL is a secret of sorts.
    """
    return urlparse(url).hostname or "<no host>"
