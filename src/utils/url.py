from urllib.parse import urlsplit, urlunsplit


def sanitize(url: str, service: str) -> str:
    """Normalize literal '+' characters before a URL is sent or logged.

    S3 treats '+' in object keys literally, so it is percent-encoded in the
    path only. Every other service reads '+' as an encoded space.
    """
    if service == "s3":
        parts = urlsplit(url)
        return urlunsplit(parts._replace(path=parts.path.replace("+", "%2B")))
    return url.replace("+", "%20")
