"""Tests for input validators."""

import pytest

from bucket_gateway.services.validation import (
    allowed_content_type,
    normalize_content_type,
    public_address,
    valid_bucket_name,
    valid_folder_path,
    valid_path,
    valid_size,
)


class TestBucketName:
    @pytest.mark.parametrize("name", ["docs", "a", "my-bucket-01", "0", "-", "a" * 63])
    def test_valid_names(self, name):
        assert valid_bucket_name(name) is True

    @pytest.mark.parametrize(
        "name",
        ["", "Docs", "my_bucket", "my.bucket", "a" * 64, "bucket!", "buc ket", "docs\n", "桶"],
    )
    def test_invalid_names(self, name):
        assert valid_bucket_name(name) is False

    @pytest.mark.parametrize("name", [None, 123, b"docs", ["docs"]])
    def test_non_string_is_false(self, name):
        assert valid_bucket_name(name) is False


class TestPath:
    @pytest.mark.parametrize(
        "path",
        ["a.txt", "notes/a.txt", "deep/nested/dir/file-1_final.tar.gz", "报告/年度.pdf", "x" * 255],
    )
    def test_valid_paths(self, path):
        assert valid_path(path) is True

    @pytest.mark.parametrize(
        "path",
        ["..", "../etc/passwd", "notes/../a.txt", "a..b", "notes\\a.txt", "\\", "ok/..hidden"],
    )
    def test_traversal_and_backslash_rejected(self, path):
        assert valid_path(path) is False

    @pytest.mark.parametrize("path", ["", "x" * 256, "a b.txt", "a?.txt", "a%20.txt", "é.txt", "a.txt\n"])
    def test_invalid_charset_or_length(self, path):
        assert valid_path(path) is False

    @pytest.mark.parametrize("path", [None, 42, object()])
    def test_non_string_is_false(self, path):
        assert valid_path(path) is False


class TestFolderPath:
    @pytest.mark.parametrize("folder", ["", None, "uploads", "a/b/c", "2024-01/images_raw", "资料"])
    def test_valid_folders(self, folder):
        assert valid_folder_path(folder) is True

    @pytest.mark.parametrize("folder", ["a.b", "../x", "a\\b", "has space", "x" * 256, 7])
    def test_invalid_folders(self, folder):
        assert valid_folder_path(folder) is False


class TestSize:
    def test_bounds(self):
        assert valid_size(1, 10) is True
        assert valid_size(10, 10) is True
        assert valid_size(0, 10) is False
        assert valid_size(11, 10) is False
        assert valid_size(-5, 10) is False

    @pytest.mark.parametrize("size", [None, "5", 5.0, True])
    def test_non_integers_rejected(self, size):
        assert valid_size(size, 10) is False


class TestContentType:
    def test_parameters_stripped(self):
        assert allowed_content_type("image/png; charset=binary", ["image/png"]) is True

    def test_case_insensitive(self):
        assert allowed_content_type("IMAGE/PNG", ["image/png"]) is True
        assert allowed_content_type("image/png", ["Image/PNG"]) is True

    def test_not_in_list(self):
        assert allowed_content_type("image/bmp", ["image/png"]) is False

    def test_prefix_is_not_a_match(self):
        assert allowed_content_type("image/png2", ["image/png"]) is False
        assert allowed_content_type("image", ["image/png"]) is False

    @pytest.mark.parametrize("content_type", [None, "", ";", 12])
    def test_malformed_is_false(self, content_type):
        assert allowed_content_type(content_type, ["image/png"]) is False

    def test_empty_allow_list_rejects_everything(self):
        assert allowed_content_type("text/plain", []) is False

    def test_normalize(self):
        assert normalize_content_type(" Text/Plain ; charset=UTF-8") == "text/plain"
        assert normalize_content_type(None) == ""


class TestPublicAddress:
    @pytest.mark.parametrize("address", ["93.184.216.34", "8.8.8.8", "2606:4700:4700::1111"])
    def test_public(self, address):
        assert public_address(address) is True

    @pytest.mark.parametrize(
        "address",
        [
            "127.0.0.1",
            "10.1.2.3",
            "172.16.0.1",
            "192.168.0.1",
            "169.254.169.254",
            "100.64.0.1",
            "0.0.0.0",
            "224.0.0.1",
            "240.0.0.1",
            "::1",
            "fe80::1%eth0",
            "fd00::1",
            "::ffff:10.0.0.1",
        ],
    )
    def test_internal(self, address):
        assert public_address(address) is False

    @pytest.mark.parametrize("address", [None, "", "example.com", "999.1.1.1", 42])
    def test_not_an_address(self, address):
        assert public_address(address) is False
