# tests/test_logging_config.py
# Journal de données JSON et rétention des fichiers de logs.

import json
from datetime import datetime

from bson import ObjectId

from questengine.core.logging_config import (
    DataLogger,
    cleanup_old_logs,
    extract_user_data,
    get_loggers,
)


class TestDataLogger:
    def test_entries_form_a_json_array(self, tmp_path):
        data_logger = DataLogger(str(tmp_path))
        user_id = ObjectId()

        data_logger.log_data("mission.close", {"state": "succeed", "points": 40}, {"user_id": user_id})
        data_logger.log_data("mission.close", {"state": "failed", "at": datetime(2024, 1, 2)})

        files = list(tmp_path.glob("*-data.json"))
        assert len(files) == 1
        entries = json.loads(files[0].read_text(encoding="utf-8"))
        assert [e["data"]["state"] for e in entries] == ["succeed", "failed"]
        assert entries[0]["user_data"]["user_id"] == str(user_id)
        assert entries[1]["data"]["at"] == "2024-01-02T00:00:00"
        assert entries[1]["user_data"] == {}


class TestLogRetention:
    def test_old_files_are_removed(self, tmp_path):
        today = datetime.now().strftime("%Y-%m-%d")
        old = [tmp_path / "2000-01-01-data.json", tmp_path / "generic.log.2000-01-01"]
        recent = [tmp_path / f"{today}-data.json", tmp_path / f"errors.log.{today}", tmp_path / "generic.log"]
        for path in old + recent:
            path.write_text("x", encoding="utf-8")

        cleanup_old_logs(tmp_path, retention_days=30)

        assert not any(path.exists() for path in old)
        assert all(path.exists() for path in recent)


class TestLoggers:
    def test_loggers_are_shared(self):
        generic, errors, data_logger = get_loggers()

        assert get_loggers()[0] is generic
        assert generic.name == "questengine.generic"
        assert errors.name == "questengine.errors"
        assert isinstance(data_logger, DataLogger)

    def test_extract_user_data_skips_missing_ids(self):
        user_id = ObjectId()

        assert extract_user_data(user_id) == {"user_id": user_id}
        assert extract_user_data() == {}
