import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import Settings, get_settings  # noqa: E402
from backend.main import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def _vika_env(monkeypatch):
    monkeypatch.setenv("VIKA_TOKEN", "test-token")
    monkeypatch.setenv("VIKA_DATASHEET_ID", "dstTest")
    monkeypatch.setenv("VIKA_VIEW_ID", "viwTest")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeVika:
    """In-memory stand-in for VikaClient.

    ``fail`` may hold a vendor envelope (returned as-is) or an exception
    (raised) for every record call; ``upload_fail`` does the same for
    attachment uploads.
    """

    def __init__(self):
        self.records: list[dict] = []
        self.calls: list[tuple] = []
        self.fail = None
        self.upload_fail = None
        self._next_id = 1

    def _failure(self, fail):
        if isinstance(fail, Exception):
            raise fail
        return fail

    async def query(self, view_id=None, **params):
        self.calls.append(("query", view_id))
        if self.fail is not None:
            return self._failure(self.fail)
        return {
            "success": True,
            "code": 200,
            "message": "SUCCESS",
            "data": {"total": len(self.records), "records": list(self.records), "pageNum": 1, "pageSize": 100},
        }

    async def create(self, records):
        self.calls.append(("create", records))
        if self.fail is not None:
            return self._failure(self.fail)
        created = []
        for record in records:
            stored = {"recordId": f"rec{self._next_id}", "fields": dict(record["fields"])}
            self._next_id += 1
            self.records.append(stored)
            created.append(stored)
        return {"success": True, "code": 200, "message": "SUCCESS", "data": {"records": created}}

    async def update(self, records):
        self.calls.append(("update", records))
        if self.fail is not None:
            return self._failure(self.fail)
        return {"success": True, "code": 200, "message": "SUCCESS", "data": {"records": records}}

    async def delete(self, record_ids):
        self.calls.append(("delete", record_ids))
        if self.fail is not None:
            return self._failure(self.fail)
        self.records = [item for item in self.records if item["recordId"] not in record_ids]
        return {"success": True, "code": 200, "message": "SUCCESS", "data": True}

    async def upload_attachment(self, filename, content, content_type):
        self.calls.append(("upload_attachment", filename, content_type))
        if self.upload_fail is not None:
            return self._failure(self.upload_fail)
        return {
            "success": True,
            "code": 200,
            "message": "SUCCESS",
            "data": {
                "id": "atcVendor1",
                "name": filename,
                "size": len(content),
                "mimeType": content_type,
                "token": "space/2024/01/01/abc",
                "width": 4,
                "height": 3,
                "url": "https://s1.vika.cn/space/2024/01/01/abc",
            },
        }


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        vika_token="test-token",
        vika_datasheet_id="dstTest",
        vika_view_id="viwTest",
        create_retry_delay=0,
        upload_dir=tmp_path / "uploads",
        static_dir=tmp_path / "public",
    )


@pytest.fixture
def fake_vika():
    return FakeVika()


@pytest.fixture
def client(settings, fake_vika):
    app = create_app(settings, vika=fake_vika)
    with TestClient(app) as test_client:
        yield test_client
