import os
import tempfile

# Configuration is read at import time, so point it at scratch space first
_BASE_DIR = tempfile.mkdtemp(prefix="xml_to_xls_tests_")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_BASE_DIR, "uploads"))
os.environ.setdefault("LOG_DIR", os.path.join(_BASE_DIR, "logs"))
os.environ.setdefault("RATE_LIMIT_CALLS", "100000")

import pytest


MINIMAL_XML = (
    "<root><items>"
    "<item><id>1</id><val>foo</val></item>"
    "<item><id>2</id><val>bar</val></item>"
    "</items></root>"
)


@pytest.fixture
def minimal_xml():
    return MINIMAL_XML


@pytest.fixture
def xml_file(tmp_path, minimal_xml):
    path = tmp_path / "document.xml"
    path.write_text(minimal_xml, encoding="utf-8")
    return path
