"""Query string helpers for building and sanitizing redirect URLs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from urllib.parse import quote_plus, unquote_plus, urlsplit, urlunsplit


def build_query(params: Mapping[str, object], separator: str = "&") -> str:
    """Form-encode params, joining pairs with ``separator``.

    Keys and values are encoded like an HTML form (spaces become ``+``,
    reserved characters are percent-encoded). Values of ``None`` are skipped.
    """
    return separator.join(
        f"{quote_plus(str(key))}={quote_plus(str(value))}"
        for key, value in params.items()
        if value is not None
    )


class UrlManipulator:
    """Rewrites URLs the way the provider expects them during code exchange."""

    def remove_params_from_url(self, url: str, params: Iterable[str]) -> str:
        """Strip the named query parameters from a URL.

        Remaining parameters are kept exactly as written, in their original
        order, because the provider compares redirect URLs byte for byte. A
        query left empty is dropped along with its ``?``. Fragments are
        preserved.

        Args:
            url: URL to clean
            params: Names of the query parameters to remove

        Returns:
            The URL without the named parameters
        """
        parts = urlsplit(url)
        if not parts.query:
            return url

        to_remove = set(params)
        # Only keys are decoded; kept segments are never re-encoded
        kept = [
            segment
            for segment in parts.query.split("&")
            if segment and unquote_plus(segment.split("=", 1)[0]) not in to_remove
        ]

        return urlunsplit(parts._replace(query="&".join(kept)))
