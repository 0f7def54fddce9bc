import json

import pytest
from lxml import html

from arclight_navigator.core.exceptions import MountPointConfigError
from arclight_navigator.core.models import (
    MountPointConfig,
    NavigationSettings,
    RequestContext,
)

from conftest import arclight_data, mount_point


def _config(**overrides) -> MountPointConfig:
    return MountPointConfig.from_mapping(arclight_data(**overrides))


class TestRequestContext:
    """Derivation of the target node and the query parent."""

    def test_chain_entry_at_level_selects_target_and_parent(self):
        config = _config(eadid="abc", level=2, originalDocument="abc789",
                         originalParents=["x", "abc123", "abc456"])
        ctx = RequestContext(config, config.original_parents, config.original_document)

        assert ctx.target_id == "abcabc456"
        assert ctx.request_parent == "abc123"

    def test_without_chain_falls_back_to_original_document(self):
        config = _config(eadid="abc", level=2, originalDocument="abc789")
        ctx = RequestContext(config, None, "abc789")

        assert ctx.request_parent == "789"
        assert ctx.target_id == "abc789"

    def test_short_chain_falls_back_for_target_only(self):
        config = _config(eadid="abc", level=2, originalDocument="abc789")
        ctx = RequestContext(config, ("abc", "abc1"), "abc789")

        assert ctx.target_id == "abc789"
        assert ctx.request_parent == "abc1"

    def test_level_zero_never_reads_negative_index(self):
        config = _config(eadid="abc", level=0, originalDocument="abc")
        ctx = RequestContext(config, ("abc", "abc1"), "abc")

        assert ctx.target_id == "abcabc"
        assert ctx.request_parent == ""

    def test_empty_chain_entries_count_as_missing(self):
        config = _config(eadid="abc", level=1, originalDocument="abc789")
        ctx = RequestContext(config, ("", ""), "abc789")

        assert ctx.target_id == "abc789"
        assert ctx.request_parent == "789"

    def test_eadid_prefix_removed_once(self):
        config = _config(eadid="ab", level=1, originalDocument="abab1")
        ctx = RequestContext(config, None, "abab1")

        assert ctx.request_parent == "ab1"


class TestMountPointConfig:

    def test_from_element_reads_declaration_and_labels(self):
        el = html.fragment_fromstring(mount_point(
            expand="Show more", collapse="Show less",
            originalParents=["coll1", "aspace_1"], access="online", search_field="all_fields",
        ))
        config = MountPointConfig.from_element(el)

        assert config.eadid == "coll1"
        assert config.level == 1
        assert config.original_parents == ("coll1", "aspace_1")
        assert config.access == "online"
        assert config.search_field == "all_fields"
        assert config.expand_label == "Show more"
        assert config.collapse_label == "Show less"

    def test_labels_fall_back_to_settings(self):
        el = html.fragment_fromstring(mount_point(expand=None, collapse=None))
        settings = NavigationSettings(expand_label="More", collapse_label="Less")

        config = MountPointConfig.from_element(el, settings)

        assert (config.expand_label, config.collapse_label) == ("More", "Less")

    def test_level_string_is_coerced(self):
        assert _config(level="3").level == 3

    def test_missing_attribute_rejected(self):
        el = html.fragment_fromstring('<div id="nav"></div>')
        with pytest.raises(MountPointConfigError) as info:
            MountPointConfig.from_element(el)
        assert info.value.field == "data-arclight"
        assert "nav" in str(info.value)

    def test_invalid_json_rejected(self):
        el = html.fragment_fromstring("<div data-arclight='{not json'></div>")
        with pytest.raises(MountPointConfigError):
            MountPointConfig.from_element(el)

    @pytest.mark.parametrize("key", ["eadid", "level", "name", "path", "originalDocument"])
    def test_required_keys(self, key):
        data = arclight_data()
        del data[key]
        with pytest.raises(MountPointConfigError) as info:
            MountPointConfig.from_mapping(data)
        assert info.value.field == key

    @pytest.mark.parametrize("level", ["two", True, -1, [1]])
    def test_bad_level_rejected(self, level):
        with pytest.raises(MountPointConfigError):
            _config(level=level)

    def test_parents_must_be_a_list(self):
        with pytest.raises(MountPointConfigError):
            _config(originalParents="coll1")

    def test_non_object_rejected(self):
        with pytest.raises(MountPointConfigError):
            MountPointConfig.from_mapping(json.loads("[1, 2]"))


class TestNavigationSettings:

    def test_defaults(self):
        settings = NavigationSettings.from_mapping({})
        assert settings.placeholder_count == 3
        assert settings.request_timeout is None
        assert settings.max_concurrent_requests == 0

    def test_from_mapping_coerces(self):
        settings = NavigationSettings.from_mapping({
            "placeholder_count": "2", "request_timeout": 5, "max_concurrent_requests": None,
            "base_url": "https://archives.example.edu",
        })
        assert settings.placeholder_count == 2
        assert settings.request_timeout == 5.0
        assert settings.max_concurrent_requests == 0
        assert settings.base_url == "https://archives.example.edu"

    def test_load_uses_packaged_yaml(self):
        settings = NavigationSettings.load()
        assert settings.expand_label == "Expand"
        assert settings.collapse_label == "Collapse"
        assert settings.placeholder_count == 3

    @pytest.mark.parametrize("key, value", [
        ("placeholder_count", None),
        ("placeholder_count", "many"),
        ("placeholder_count", -1),
        ("request_timeout", "abc"),
        ("request_timeout", 0),
        ("max_concurrent_requests", True),
    ])
    def test_invalid_values_fall_back_to_defaults(self, key, value, caplog):
        settings = NavigationSettings.from_mapping({key: value})

        assert getattr(settings, key) == getattr(NavigationSettings(), key)
        assert key in caplog.text
