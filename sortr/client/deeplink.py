from urllib.parse import urlsplit

from sortr.client.models import RESOURCE_KINDS, ResourceRef

SCHEME = "sortr"
WEB_HOSTS = {"sortr.app", "www.sortr.app"}


def _ref(kind: str, raw_id: str) -> ResourceRef | None:
    if kind not in RESOURCE_KINDS or not raw_id.isdecimal() or int(raw_id) < 1:
        return None
    return ResourceRef(kind=kind, id=int(raw_id))


def parse_deep_link(uri: str) -> ResourceRef | None:
    """Resolve ``sortr://box/7`` or ``https://sortr.app/box/7``; anything else is None."""
    try:
        parts = urlsplit(uri.strip())
    except ValueError:
        return None
    segments = [s for s in parts.path.split("/") if s]

    if parts.scheme == SCHEME:
        # sortr://{kind}/{id}: the kind is parsed as the host
        if len(segments) != 1:
            return None
        return _ref(parts.netloc.lower(), segments[0])

    if parts.scheme == "https" and parts.netloc.lower() in WEB_HOSTS:
        if len(segments) != 2:
            return None
        return _ref(segments[0].lower(), segments[1])

    return None
