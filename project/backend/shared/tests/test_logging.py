"""
Tests for structured logging.
"""

import json
import logging

from shared.errors import DataQualityError
from shared.logging import JSONFormatter, get_job_id, log_data_quality, set_job_id


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("reelsmith.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_output_includes_extra():
    payload = json.loads(JSONFormatter().format(_record(scene_index=3)))

    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "reelsmith.test"
    assert payload["scene_index"] == 3


def test_job_id_from_context():
    set_job_id("job-42")
    try:
        payload = json.loads(JSONFormatter().format(_record()))
        assert payload["job_id"] == "job-42"
        assert get_job_id() == "job-42"
    finally:
        set_job_id(None)

    assert get_job_id() is None


def test_data_quality_issue_logged_as_warning(caplog):
    logger = logging.getLogger("reelsmith.test.data_quality")
    issue = DataQualityError("Conflicting output folder", job_id="job-1", code="FOLDER_CONFLICT")

    with caplog.at_level(logging.WARNING, logger=logger.name):
        log_data_quality(logger, issue, scene_index=2)

    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "Conflicting output folder"
    assert record.data_quality is True
    assert record.error_code == "FOLDER_CONFLICT"
    assert record.job_id == "job-1"
    assert record.scene_index == 2
