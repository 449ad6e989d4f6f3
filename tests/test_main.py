"""
Tests for turning Streamlit uploads into documents.
"""

from main import _decode_uploads


class FakeUpload:
    """Stands in for a Streamlit UploadedFile."""

    def __init__(self, name, data):
        self.name = name
        self._data = data

    def getvalue(self):
        return self._data


class TestDecodeUploads:
    """Test suite for _decode_uploads."""

    def test_text_uploads_keep_their_names(self):
        documents, notices = _decode_uploads(
            [FakeUpload("a.log", b"10.0.0.1"), FakeUpload("b.log", b"10.0.0.2")]
        )

        assert documents == [("a.log", "10.0.0.1"), ("b.log", "10.0.0.2")]
        assert notices == []

    def test_repeated_names_are_made_unique(self):
        """Two uploads called app.log must both reach the orchestrator."""
        documents, notices = _decode_uploads(
            [
                FakeUpload("app.log", b"first"),
                FakeUpload("app.log", b"second"),
                FakeUpload("app.log", b"third"),
            ]
        )

        assert documents == [
            ("app.log", "first"),
            ("app-2.log", "second"),
            ("app-3.log", "third"),
        ]
        assert len(notices) == 2

    def test_undecodable_upload_is_skipped(self):
        documents, notices = _decode_uploads(
            [FakeUpload("blob.bin", b"\xff\xfe\x00\x81"), FakeUpload("a.log", b"ok")]
        )

        assert documents == [("a.log", "ok")]
        assert len(notices) == 1
        assert "blob.bin" in notices[0]
