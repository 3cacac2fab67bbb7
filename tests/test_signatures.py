"""
Unit tests for signed asset URL stripping and restoration.

Tests cover:
- Stripping signature parameters from CDN asset URLs
- Canonical keys (order and entity insensitive)
- SignatureIndex building and restoring
- URLs that must be left alone (foreign hosts, malformed ports)
"""
import pytest

from article_codec.signatures import (
    SignatureIndex,
    build_signature_index,
    canonical_key,
    has_signature,
    restore_signatures,
    strip_signatures,
    strip_url,
)

ASSET = "https://downloads.intercomcdn.com/i/o/123/abc.png"


class TestStripUrl:
    """Test stripping of a single asset URL."""

    def test_removes_all_signature_params(self):
        """Only signature params present: the query disappears."""
        url = f"{ASSET}?expires=1700000000&signature=deadbeef&req=abc"
        assert strip_url(url) == ASSET

    def test_keeps_other_params_in_order(self):
        """Non-signature params survive in their original order."""
        url = f"{ASSET}?b=2&expires=1&a=1&signature=x"
        assert strip_url(url) == f"{ASSET}?b=2&a=1"

    def test_keeps_entity_separator(self):
        """An ``&amp;`` separated query keeps using ``&amp;``."""
        url = f"{ASSET}?width=300&amp;expires=1&amp;signature=x&amp;h=2"
        assert strip_url(url) == f"{ASSET}?width=300&amp;h=2"

    def test_unsigned_url_unchanged(self):
        """URLs without signature params come back untouched."""
        url = f"{ASSET}?width=300"
        assert strip_url(url) == url
        assert strip_url(ASSET) == ASSET

    def test_keeps_fragment(self):
        """A trailing fragment is preserved."""
        url = f"{ASSET}?signature=x#section"
        assert strip_url(url) == f"{ASSET}#section"

    def test_malformed_port_left_literal(self):
        """URLs that cannot be parsed are left exactly as they are."""
        url = "https://downloads.intercomcdn.com:99999/a.png?signature=x"
        assert strip_url(url) == url


class TestStripSignatures:
    """Test stripping over a whole HTML body."""

    def test_strips_image_source(self):
        """Signed image sources lose their signature."""
        html = f'<img src="{ASSET}?expires=1&amp;signature=abc&amp;req=z">'
        assert strip_signatures(html) == f'<img src="{ASSET}">'

    def test_attachment_hosts_are_recognised(self):
        """Numbered attachment hosts are treated as asset hosts."""
        url = "https://intercom-attachments-7.com/i/o/1/guide.pdf"
        html = f'<a href="{url}?expires=1&signature=2">Guide</a>'
        assert strip_signatures(html) == f'<a href="{url}">Guide</a>'

    def test_foreign_hosts_untouched(self):
        """Query strings on other hosts are never rewritten."""
        html = (
            '<img src="https://example.com/a.png?signature=1">'
            '<img src="https://intercomcdn.com.evil.org/a.png?signature=1">'
        )
        assert strip_signatures(html) == html

    def test_idempotent(self):
        """Stripping twice is the same as stripping once."""
        html = (
            f'<img src="{ASSET}?a=1&expires=1&signature=2">'
            f'<p>text</p><img src="{ASSET}?signature=3">'
        )
        once = strip_signatures(html)
        assert strip_signatures(once) == once

    def test_empty_input(self):
        """Empty and missing input yield an empty string."""
        assert strip_signatures("") == ""
        assert strip_signatures(None) == ""


class TestCanonicalKey:
    """Test canonical key construction."""

    def test_ignores_signature_params(self):
        """Signed and stripped forms share one key."""
        signed = f"{ASSET}?expires=1&signature=2"
        assert canonical_key(signed) == canonical_key(ASSET) == ASSET

    def test_sorted_pairs(self):
        """Remaining query pairs are compared in sorted order."""
        assert canonical_key(f"{ASSET}?b=2&a=1") == canonical_key(
            f"{ASSET}?a=1&b=2"
        )

    def test_entity_ampersands_normalised(self):
        """``&amp;`` and ``&`` separators produce the same key."""
        assert canonical_key(f"{ASSET}?a=1&amp;b=2") == canonical_key(
            f"{ASSET}?a=1&b=2"
        )

    def test_distinct_params_give_distinct_keys(self):
        """Different non-signature params are different assets."""
        assert canonical_key(f"{ASSET}?w=1") != canonical_key(f"{ASSET}?w=2")

    def test_unparseable_url(self):
        """Malformed URLs have no key."""
        assert canonical_key("https://cdn.intercomcdn.com:99999/a") is None
        assert canonical_key("not a url") is None

    def test_has_signature(self):
        """Signature detection is case-insensitive on the param name."""
        assert has_signature(f"{ASSET}?Signature=x")
        assert not has_signature(f"{ASSET}?width=2")
        assert not has_signature(ASSET)


class TestSignatureIndex:
    """Test index building and restoration."""

    def test_restore_is_inverse_of_strip(self):
        """Restoring against the original brings back the signed URL."""
        original = f'<img src="{ASSET}?expires=1&amp;signature=abc">'
        index = SignatureIndex.build(original)
        assert index.restore(strip_signatures(original)) == original

    def test_last_signed_url_wins(self):
        """When an asset appears twice, the later signature is kept."""
        original = (
            f'<img src="{ASSET}?signature=first">'
            f'<img src="{ASSET}?signature=second">'
        )
        index = build_signature_index(original)
        assert len(index) == 1
        assert index.lookup(ASSET) == f"{ASSET}?signature=second"

    def test_unsigned_urls_not_indexed(self):
        """Only URLs carrying a signature are recorded."""
        index = SignatureIndex.build(f'<img src="{ASSET}?width=3">')
        assert len(index) == 0
        assert ASSET not in index

    def test_unknown_assets_unchanged(self):
        """URLs missing from the index come back untouched."""
        index = SignatureIndex.build(f'<img src="{ASSET}?signature=x">')
        other = "https://downloads.intercomcdn.com/i/o/999/other.png"
        html = f'<img src="{other}">'
        assert restore_signatures(html, index) == html
        assert ASSET in index

    def test_empty_index_is_noop(self):
        """An empty original leaves the body untouched."""
        html = f'<img src="{ASSET}">'
        assert SignatureIndex.build(None).restore(html) == html


@pytest.mark.parametrize(
    "host",
    [
        "downloads.intercomcdn.com",
        "static.intercomassets.intercomcdn.com",
        "intercom-attachments.com",
        "intercom-attachments-12.com",
    ],
)
def test_asset_hosts_strip(host):
    """Every recognised asset host family is stripped."""
    url = f"https://{host}/i/o/1/file.png"
    assert strip_signatures(f"{url}?req=abc") == url
