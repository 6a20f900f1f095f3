"""Tests for storage object naming and public URL parsing."""

import pytest

from farmops.core.storage_paths import (
    build_object_path,
    object_path_from_public_url,
    quote_object_path,
    sanitize_folder,
)


@pytest.mark.parametrize("raw, expected", [
    (None, "uploads"),
    ("", "uploads"),
    ("crops/123", "crops/123"),
    ("/crops/123/", "crops/123"),
    ("../../etc", "etc"),
    ("a/./b//c", "a/b/c"),
    ("..", "uploads"),
    ("crops\\123", "crops/123"),
    ("field?a#b", "field?a#b"),
])
def test_sanitize_folder(raw, expected):
    assert sanitize_folder(raw) == expected


def test_object_path_keeps_extension_case():
    assert build_object_path("Leaf.JPEG", "crops", token="abc") == "crops/abc.JPEG"


def test_object_path_without_extension():
    assert build_object_path("blob", None, token="abc") == "uploads/abc"


def test_object_paths_are_unique():
    assert build_object_path("a.png") != build_object_path("a.png")


def test_object_path_from_public_url():
    url = (
        "https://p.supabase.co/storage/v1/object/public/growth-records/"
        "crops/abc.jpg?t=1"
    )
    assert object_path_from_public_url(url, "growth-records") == "crops/abc.jpg"


@pytest.mark.parametrize("url", [
    "https://p.supabase.co/storage/v1/object/public/other-bucket/abc.jpg",
    "https://example.com/abc.jpg",
    "https://p.supabase.co/storage/v1/object/public/growth-records/",
])
def test_foreign_urls_have_no_object_path(url):
    assert object_path_from_public_url(url, "growth-records") is None


def test_quote_object_path_encodes_each_segment():
    assert quote_object_path("field?a#b/x 1%.jpg") == "field%3Fa%23b/x%201%25.jpg"


def test_object_path_from_public_url_decodes_segments():
    url = (
        "https://p.supabase.co/storage/v1/object/public/growth-records/"
        "field%3Fa%23b/abc.jpg"
    )
    assert object_path_from_public_url(url, "growth-records") == "field?a#b/abc.jpg"
