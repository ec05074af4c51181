"""
Unit tests for the archive command-line interface.
"""

import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from dead_letter_archive.cli import archive_cli
from dead_letter_archive.handler import build_writer


@pytest.fixture
def mock_s3(monkeypatch):
    """Route CLI-built writers to a mocked S3 client"""
    s3 = MagicMock()
    monkeypatch.setattr(
        archive_cli,
        "build_writer",
        lambda config: build_writer(config, s3_client=s3, sfn_client=MagicMock()),
    )
    return s3


class TestBuildParser:
    """Tests for argument parsing"""

    def test_archive_arguments(self):
        args = archive_cli.build_parser().parse_args(
            ["--bucket", "b", "--stack-name", "s", "archive", "--input", "event.json"]
        )
        assert args.command == "archive"
        assert args.input == "event.json"
        assert args.bucket == "b"

    def test_migrate_limit(self):
        args = archive_cli.build_parser().parse_args(["migrate", "--limit", "5"])
        assert args.limit == 5


class TestMain:
    """Tests for main"""

    def test_no_command(self):
        assert archive_cli.main([]) == 1

    def test_missing_configuration(self, clean_env, tmp_path):
        event_file = tmp_path / "event.json"
        event_file.write_text(json.dumps({"Records": []}))
        code = archive_cli.main(
            ["--env-file", str(tmp_path / "none.env"), "archive", "--input", str(event_file)]
        )
        assert code == 2

    def test_missing_input_file(self, clean_env, tmp_path):
        code = archive_cli.main(
            ["--env-file", str(tmp_path / "none.env"), "--bucket", "b", "--stack-name", "s",
             "archive", "--input", str(tmp_path / "missing.json")]
        )
        assert code == 1

    def test_archive_record_list(self, clean_env, tmp_path, mock_s3):
        """Test a bare list of records is archived to the given bucket"""
        event_file = tmp_path / "records.json"
        event_file.write_text(json.dumps([{"opaque": 1}, {"opaque": 2}]))

        code = archive_cli.main(
            ["--env-file", str(tmp_path / "none.env"), "--bucket", "cli-bucket",
             "--stack-name", "cli-stack", "archive", "--input", str(event_file)]
        )

        assert code == 0
        assert mock_s3.put_object.call_count == 2
        for call in mock_s3.put_object.call_args_list:
            assert call.kwargs["Bucket"] == "cli-bucket"
            assert call.kwargs["Key"].startswith("cli-stack/dead-letter-archive/sqs/")

    def test_env_file_loaded(self, clean_env, tmp_path, mock_s3):
        env_file = tmp_path / ".env"
        env_file.write_text("system_bucket=dotenv-bucket\nstackName=dotenv-stack\n")
        event_file = tmp_path / "event.json"
        event_file.write_text(json.dumps({"Records": [{"opaque": 1}]}))

        code = archive_cli.main(["--env-file", str(env_file), "archive", "--input", str(event_file)])

        assert code == 0
        assert mock_s3.put_object.call_args.kwargs["Bucket"] == "dotenv-bucket"

    def test_invalid_input_json(self, clean_env, tmp_path, mock_s3):
        """Test a malformed event file exits with 1 instead of a traceback"""
        event_file = tmp_path / "bad.json"
        event_file.write_text("{not json")

        code = archive_cli.main(
            ["--env-file", str(tmp_path / "none.env"), "--bucket", "b", "--stack-name", "s",
             "archive", "--input", str(event_file)]
        )

        assert code == 1
        mock_s3.put_object.assert_not_called()

    def test_missing_config_file(self, clean_env, tmp_path):
        event_file = tmp_path / "event.json"
        event_file.write_text(json.dumps({"Records": []}))

        code = archive_cli.main(
            ["--env-file", str(tmp_path / "none.env"), "--config", str(tmp_path / "missing.yaml"),
             "archive", "--input", str(event_file)]
        )
        assert code == 1

    def test_migrate_listing_failure(self, clean_env, tmp_path, mock_s3):
        mock_s3.get_paginator.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "ListObjectsV2"
        )
        code = archive_cli.main(
            ["--env-file", str(tmp_path / "none.env"), "--bucket", "b", "--stack-name", "s",
             "migrate"]
        )
        assert code == 1

    def test_metrics_file_written(self, clean_env, tmp_path, mock_s3):
        event_file = tmp_path / "event.json"
        event_file.write_text(json.dumps({"Records": [{"opaque": 1}]}))
        metrics_file = tmp_path / "archive.prom"

        code = archive_cli.main(
            ["--env-file", str(tmp_path / "none.env"), "--bucket", "b", "--stack-name", "s",
             "--metrics-file", str(metrics_file), "archive", "--input", str(event_file)]
        )

        assert code == 0
        text = metrics_file.read_text()
        assert 'dla_records_archived_total{kind="opaque"}' in text

    def test_failed_write_exit_code(self, clean_env, tmp_path, mock_s3):
        mock_s3.put_object.side_effect = IOError("disk on fire")
        event_file = tmp_path / "event.json"
        event_file.write_text(json.dumps({"Records": [{"opaque": 1}]}))

        code = archive_cli.main(
            ["--env-file", str(tmp_path / "none.env"), "--bucket", "b", "--stack-name", "s",
             "archive", "--input", str(event_file)]
        )
        assert code == 1

    def test_migrate_nothing_to_do(self, clean_env, tmp_path, mock_s3):
        mock_s3.get_paginator.return_value.paginate.return_value = [{}]
        code = archive_cli.main(
            ["--env-file", str(tmp_path / "none.env"), "--bucket", "b", "--stack-name", "s",
             "migrate"]
        )
        assert code == 0
        mock_s3.get_paginator.return_value.paginate.assert_called_once_with(
            Bucket="b", Prefix="s/dead-letter-archive/sqs/", Delimiter="/"
        )
