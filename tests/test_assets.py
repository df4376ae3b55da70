"""Test image reference resolution."""

from conftest import make_asset, make_entry
from storefront.catalog.assets import resolve_images, resolve_images_remote
from storefront.catalog.errors import FetchError, NotFoundError
from storefront.catalog.schemas import AssetRecord, RawEntry


def _image_field(image):
    return RawEntry.model_validate(make_entry("e", image=image)).entry_fields.image


def _assets(*payloads):
    return [AssetRecord.model_validate(p) for p in payloads]


class TestResolveImagesInline:
    """Test resolution against assets included in a listing response."""

    def test_absent_field(self):
        assert resolve_images(None, _assets(make_asset("a", "//a.jpg"))) == []

    def test_single_reference(self):
        assets = _assets(make_asset("a", "//a.jpg"), make_asset("b", "//b.jpg"))
        assert resolve_images(_image_field("b"), assets) == ["//b.jpg"]

    def test_single_reference_missing(self):
        assert resolve_images(_image_field("zz"), _assets(make_asset("a", "//a.jpg"))) == []

    def test_list_follows_reference_order(self):
        assets = _assets(
            make_asset("a", "//a.jpg"), make_asset("b", "//b.jpg"), make_asset("c", "//c.jpg")
        )
        assert resolve_images(_image_field(["c", "a", "b"]), assets) == ["//c.jpg", "//a.jpg", "//b.jpg"]

    def test_unresolved_references_are_dropped(self):
        """Missing assets and assets without URLs shorten the output but keep order."""
        assets = _assets(make_asset("a", "//a.jpg"), make_asset("b"), make_asset("c", "//c.jpg"))
        field = _image_field(["c", "missing", "b", "a"])
        assert resolve_images(field, assets) == ["//c.jpg", "//a.jpg"]

    def test_no_assets_available(self):
        assert resolve_images(_image_field(["a", "b"]), []) == []

    def test_repeated_reference(self):
        assets = _assets(make_asset("a", "//a.jpg"))
        assert resolve_images(_image_field(["a", "a"]), assets) == ["//a.jpg", "//a.jpg"]


class TestResolveImagesRemote:
    """Test resolution by fetching each asset."""

    def _fetcher(self, assets, failures=None):
        calls = []
        failures = failures or {}

        def fetch(asset_id):
            calls.append(asset_id)
            if asset_id in failures:
                raise failures[asset_id]
            if asset_id not in assets:
                raise NotFoundError(asset_id)
            return AssetRecord.model_validate(assets[asset_id])

        return fetch, calls

    def test_absent_field_fetches_nothing(self):
        fetch, calls = self._fetcher({})
        assert resolve_images_remote(None, fetch) == []
        assert calls == []

    def test_fetches_in_reference_order(self):
        fetch, calls = self._fetcher({
            "a": make_asset("a", "//a.jpg"),
            "b": make_asset("b", "//b.jpg"),
        })
        assert resolve_images_remote(_image_field(["b", "a"]), fetch) == ["//b.jpg", "//a.jpg"]
        assert calls == ["b", "a"]

    def test_single_reference(self):
        fetch, _ = self._fetcher({"a": make_asset("a", "//a.jpg")})
        assert resolve_images_remote(_image_field("a"), fetch) == ["//a.jpg"]

    def test_failed_fetch_is_skipped(self):
        """One failing asset must not abort the others."""
        fetch, calls = self._fetcher(
            {"a": make_asset("a", "//a.jpg"), "c": make_asset("c", "//c.jpg")},
            failures={"b": FetchError("HTTP 500", status=500)},
        )
        result = resolve_images_remote(_image_field(["a", "b", "missing", "c"]), fetch)
        assert result == ["//a.jpg", "//c.jpg"]
        assert calls == ["a", "b", "missing", "c"]

    def test_asset_without_url_is_skipped(self):
        fetch, _ = self._fetcher({"a": make_asset("a")})
        assert resolve_images_remote(_image_field(["a"]), fetch) == []
