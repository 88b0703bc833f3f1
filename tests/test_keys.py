from oasync.catalog.keys import ResourceKey, split_platform_suffix, strip_version_suffix


class TestSplitPlatformSuffix:
    def test_aws_suffix(self):
        assert split_platform_suffix("orders-v1-aws") == ("orders-v1", "aws")

    def test_azure_suffix(self):
        assert split_platform_suffix("orders-v1-azure") == ("orders-v1", "azure")

    def test_no_suffix(self):
        assert split_platform_suffix("orders-v1") == ("orders-v1", None)

    def test_bare_suffix_is_not_stripped(self):
        assert split_platform_suffix("-aws") == ("-aws", None)


class TestStripVersionSuffix:
    def test_strips_trailing_version(self):
        assert strip_version_suffix("orders-v12") == "orders"

    def test_keeps_inner_version(self):
        assert strip_version_suffix("orders-v1-beta") == "orders-v1-beta"

    def test_no_version(self):
        assert strip_version_suffix("orders") == "orders"


class TestResourceKey:
    def test_parse_full_key(self):
        key = ResourceKey.parse("orders-v1-aws")
        assert key.api_key == "orders"
        assert key.version_key == "orders-v1"
        assert key.deployment_key == "orders-v1-aws"
        assert key.platform == "aws"

    def test_parse_without_version(self):
        key = ResourceKey.parse("billing-azure")
        assert key.version_key == "billing"
        assert key.api_key == "billing"

    def test_parse_rejects_unknown_platform(self):
        assert ResourceKey.parse("orders-v1-gcp") is None

    def test_parse_rejects_root_document(self):
        assert ResourceKey.parse("orders") is None

    def test_derive_is_lenient(self):
        key = ResourceKey.derive("orders-v2")
        assert key.platform is None
        assert key.version_key == "orders-v2"
        assert key.api_key == "orders"

    def test_keys_are_hashable(self):
        assert len({ResourceKey.parse("a-v1-aws"), ResourceKey.parse("a-v1-aws")}) == 1
