"""Image URL normalization.

Externally-hosted images are served through the internal image proxy
(``/api/image-proxy?url=...``). URLs that are already proxied, inline
(``data:``/``blob:``) or hosted on the trusted storage origin pass through.

The slice helpers work on camelCase dicts (the persisted layout) so that
both the migration steps and the step mutators share one rewrite.
"""

from urllib.parse import parse_qs, quote, urlsplit

IMAGE_PROXY_PATH = "/api/image-proxy"
TRUSTED_STORAGE_HOSTS = ("supabase.co",)

_PASSTHROUGH_PREFIXES = (IMAGE_PROXY_PATH, "data:", "blob:")


def is_trusted_storage_url(url: str) -> bool:
    host = (urlsplit(url).hostname or "").lower()
    return any(host == h or host.endswith("." + h) for h in TRUSTED_STORAGE_HOSTS)


def ensure_proxy_url(url: str | None) -> str | None:
    """Rewrite an external http(s) URL to go through the image proxy."""
    if not url:
        return url
    if url.startswith(_PASSTHROUGH_PREFIXES):
        return url
    if url.startswith(("http://", "https://")):
        if is_trusted_storage_url(url):
            return url
        encoded = quote(url, safe="!~*'()")
        return f"{IMAGE_PROXY_PATH}?url={encoded}"
    return url


def extract_original_url(url: str | None) -> str | None:
    """Inverse of ``ensure_proxy_url``: the upstream URL behind a proxy URL."""
    if not url:
        return None
    if url.startswith(f"{IMAGE_PROXY_PATH}?"):
        values = parse_qs(urlsplit(url).query).get("url")
        return values[0] if values else None
    return url


# ── Slice rewrites (camelCase dicts) ────────────────────────

def _proxy_field(item: dict, field: str = "url") -> None:
    value = item.get(field)
    if isinstance(value, str):
        item[field] = ensure_proxy_url(value)


def _proxy_variation(variation: dict) -> None:
    """Proxy ``url`` and remember the upstream URL in ``originalUrl``."""
    url = variation.get("url")
    if not isinstance(url, str):
        return
    if not variation.get("originalUrl"):
        original = extract_original_url(url)
        if original and original != ensure_proxy_url(original):
            variation["originalUrl"] = original
    variation["url"] = ensure_proxy_url(url)


def _dicts(value) -> list[dict]:
    return [item for item in value if isinstance(item, dict)] if isinstance(value, list) else []


def proxy_step2_urls(step2: dict) -> dict:
    for image in _dicts(step2.get("referenceImages")):
        _proxy_field(image)
    return step2


def proxy_step3_urls(step3: dict) -> dict:
    logo = step3.get("logo")
    if isinstance(logo, dict):
        _proxy_field(logo)
    for variation in _dicts(step3.get("logoVariations")):
        _proxy_variation(variation)
    return step3


def proxy_step4_urls(step4: dict) -> dict:
    navigation = step4.get("navigation")
    if not isinstance(navigation, dict):
        return step4
    for variation in _dicts(navigation.get("navBarVariations")):
        _proxy_variation(variation)
    nav_bar = navigation.get("generatedNavBar")
    if isinstance(nav_bar, dict):
        _proxy_field(nav_bar)
    return step4


def proxy_step5_urls(step5: dict) -> dict:
    for screen in _dicts(step5.get("generatedScreens")):
        _proxy_field(screen)
        for variation in _dicts(screen.get("variations")):
            _proxy_variation(variation)
    return step5


SLICE_URL_REWRITES = {
    "step2": proxy_step2_urls,
    "step3": proxy_step3_urls,
    "step4": proxy_step4_urls,
    "step5": proxy_step5_urls,
}
