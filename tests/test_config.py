"""Tests for the environment-driven configuration."""

from xml_to_xls.config import Config, config
from xml_to_xls.services.staging import staging_path


class TestConfig:
    """Test suite for Config."""

    def test_xml_media_types_accepted(self):
        assert config.validate_content_type("text/xml")
        assert config.validate_content_type("application/xml; charset=utf-8")

    def test_other_media_types_rejected(self):
        assert not config.validate_content_type("application/json")
        assert not config.validate_content_type("")
        assert not config.validate_content_type(None)

    def test_upload_limit_in_bytes(self):
        assert config.max_upload_bytes() == config.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    def test_staging_uses_upload_dir(self):
        assert staging_path("doc.xml").parent == config.UPLOAD_DIR

    def test_only_used_helpers_exposed(self):
        helpers = {name for name, value in vars(Config).items() if isinstance(value, classmethod)}
        assert helpers == {"validate_content_type", "max_upload_bytes"}
