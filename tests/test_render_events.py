"""
Render event logging tests.
"""
import logging
from unittest.mock import MagicMock, patch

from services.render_events import record_render_event, _summary


class TestSummary:

    def test_credentials_removed_and_lists_shortened(self):
        summary = _summary({
            "api_key": "secret",
            "appName": "Flair",
            "event": {"name": "Gala", "keyInfo": "long text"},
            "snapshots": [{"name": "Full", "filterTagIds": ["t1"]}, "junk"],
            "data": {"scheduleDetail": [{}]},
        })
        assert summary == {"appName": "Flair", "event": {"name": "Gala"}, "snapshots": ["Full"]}


class TestRecordRenderEvent:

    def test_logged_without_database(self, caplog):
        with patch("services.render_events.get_db") as get_db:
            with caplog.at_level(logging.INFO, logger="services.render_events"):
                record_render_event("generateHome", run_id="r1", success=True, message="ok",
                                    execution_seconds=1.5, to_db=False)

        get_db.assert_not_called()
        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.event["run_id"] == "r1"

    def test_failures_logged_as_errors(self, caplog):
        with caplog.at_level(logging.INFO, logger="services.render_events"):
            record_render_event("generateHome", run_id="r2", success=False, message="boom", to_db=False)
        assert caplog.records[-1].levelno == logging.ERROR

    def test_database_insert(self):
        db = MagicMock()
        with patch("services.render_events.get_db", return_value=db):
            record_render_event("generateHome", run_id="r3", success=True, body={"api_key": "k"}, to_db=True)

        sql, params = db.execute.call_args.args
        assert "INSERT INTO render_events" in sql
        assert params[0] == "r3"
        db.commit.assert_called_once()

    def test_database_failure_swallowed(self, caplog):
        with patch("services.render_events.get_db", side_effect=RuntimeError("db down")):
            with caplog.at_level(logging.WARNING, logger="services.render_events"):
                record_render_event("generateHome", run_id="r4", success=True, to_db=True)

        assert "Failed to persist event for run=r4" in caplog.text
