"""Integration tests for CLI workflows.

This module invokes the hl7-transcoder command group end to end with
configuration files, record files and output directories.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from hl7_transcoder import __version__
from hl7_transcoder.cli.main import cli


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a quiet configuration file so console logging stays out of the output."""
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "conversion": {"input_type": "fhir", "output_type": "hl7"},
                "logging": {"level": "CRITICAL", "log_file": str(tmp_path / "logs" / "cli.log")},
            }
        )
    )
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove configuration environment variables for every test."""
    for name in ("INPUT_TYPE", "OUTPUT_TYPE", "LOG_LEVEL", "LOG_FILE", "REDACT_PII"):
        monkeypatch.delenv(f"HL7_TRANSCODER_{name}", raising=False)


def _invoke(config_file: Path, *args: str):
    runner = CliRunner()
    return runner.invoke(cli, ["--config", str(config_file), *args])


class TestTranscodeCommand:
    """Integration tests for the transcode command."""

    def test_fhir_file_to_hl7(self, tmp_path, config_file, fhir_payload):
        """Test a FHIR file transcodes using the configured pair."""
        # Arrange
        patient_file = tmp_path / "patient.json"
        patient_file.write_bytes(fhir_payload)

        # Act
        result = _invoke(config_file, "transcode", str(patient_file), "--json")

        # Assert
        assert result.exit_code == 0
        report = json.loads(result.stdout)
        assert len(report) == 1
        assert report[0]["status"] == "success"
        assert report[0]["position"] == "patient.json"
        assert json.loads(report[0]["payload"])["hl7"].startswith("MSH|")

    def test_hl7v3_to_fhir_with_type_options(self, tmp_path, config_file, hl7v3_xml):
        """Test --input-type and --output-type override the config."""
        xml_file = tmp_path / "patient.xml"
        xml_file.write_bytes(hl7v3_xml)

        result = _invoke(
            config_file, "transcode", str(xml_file), "--input-type", "hl7v3", "--output-type", "fhir"
        )

        assert result.exit_code == 0
        resource = json.loads(result.stdout.strip())
        assert resource["birthDate"] == "1976-03-20"
        assert resource["gender"] == "male"

    def test_line_delimited_batch_with_failure(self, tmp_path, config_file, hl7v2_envelope):
        """Test a .jsonl file is one record per line and failures exit 1."""
        # Arrange
        batch_file = tmp_path / "messages.jsonl"
        batch_file.write_bytes(hl7v2_envelope + b"\n\n" + b'{"hl7": "INVALID|HL7|MESSAGE"}\n' + hl7v2_envelope + b"\n")

        # Act
        result = _invoke(
            config_file, "transcode", str(batch_file), "--input-type", "hl7", "--output-type", "fhir", "--json"
        )

        # Assert
        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert [entry["status"] for entry in report] == ["success", "failed", "success"]
        assert [entry["position"] for entry in report] == [
            "messages.jsonl:1",
            "messages.jsonl:3",
            "messages.jsonl:4",
        ]
        assert report[1]["error"]["error_type"] == "FormatError"

    def test_output_dir_writes_files(self, tmp_path, config_file, fhir_payload):
        """Test --output-dir writes one file per transcoded record."""
        # Arrange
        patient_file = tmp_path / "patient.json"
        patient_file.write_bytes(fhir_payload)
        output_dir = tmp_path / "out"

        # Act
        result = _invoke(
            config_file,
            "transcode",
            str(patient_file),
            "--output-type",
            "hl7v3",
            "--output-dir",
            str(output_dir),
        )

        # Assert
        assert result.exit_code == 0
        written = output_dir / "00000.xml"
        assert written.exists()
        assert b"<code>M</code>" in written.read_bytes()

    def test_unsupported_pair_exits_2(self, tmp_path, config_file, hl7v2_envelope):
        """Test hl7 -> hl7v3 is rejected before reading records."""
        batch_file = tmp_path / "message.json"
        batch_file.write_bytes(hl7v2_envelope)

        result = _invoke(
            config_file, "transcode", str(batch_file), "--input-type", "hl7", "--output-type", "hl7v3"
        )

        assert result.exit_code == 2
        assert "Unsupported conversion" in result.output

    def test_failure_prints_error_report(self, tmp_path, config_file):
        """Test failures are listed with the error summary."""
        bad_file = tmp_path / "bad.json"
        bad_file.write_text('{"invalid": json}')

        result = _invoke(config_file, "transcode", str(bad_file))

        assert result.exit_code == 1
        assert "bad.json" in result.output
        assert "TRANSCODING ERROR SUMMARY" in result.output

    def test_audit_flag_writes_log(self, tmp_path, config_file, fhir_payload):
        """Test --audit writes per-record audit events to the log file."""
        patient_file = tmp_path / "patient.json"
        patient_file.write_bytes(fhir_payload)

        result = _invoke(config_file, "transcode", str(patient_file), "--audit")

        assert result.exit_code == 0
        log_content = (tmp_path / "logs" / "cli.log").read_text()
        assert "RECORD_TRANSCODED" in log_content
        assert "BATCH_TRANSCODED" in log_content


class TestInfoCommands:
    """Integration tests for informational commands."""

    def test_conversions(self, config_file):
        """Test the supported pairs are listed."""
        result = _invoke(config_file, "conversions")

        assert result.exit_code == 0
        assert result.stdout.split() == ["fhir->hl7", "fhir->hl7v3", "hl7->fhir", "hl7v3->fhir"]

    def test_spec(self, config_file):
        """Test the specification is printed as JSON."""
        result = _invoke(config_file, "spec")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["name"] == "conduit-processor-hl7"
        assert set(data["parameters"]) == {"inputType", "outputType"}

    def test_version(self, config_file):
        """Test the version command."""
        result = _invoke(config_file, "version")

        assert result.exit_code == 0
        assert __version__ in result.output


class TestConfigCommands:
    """Integration tests for configuration commands."""

    def test_validate_valid_config(self, config_file):
        """Test a valid file is reported with its values."""
        result = _invoke(config_file, "config", "validate", str(config_file))

        assert result.exit_code == 0
        assert "Configuration is valid" in result.output
        assert "Input type:  fhir" in result.output

    def test_validate_invalid_config(self, tmp_path, config_file):
        """Test an unsupported pair fails validation."""
        bad_config = tmp_path / "bad.json"
        bad_config.write_text(json.dumps({"conversion": {"input_type": "hl7", "output_type": "hl7v3"}}))

        result = _invoke(config_file, "config", "validate", str(bad_config))

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output

    def test_show_effective_config(self, config_file, monkeypatch):
        """Test the effective configuration includes environment overrides."""
        monkeypatch.setenv("HL7_TRANSCODER_INPUT_TYPE", "hl7v3")
        monkeypatch.setenv("HL7_TRANSCODER_OUTPUT_TYPE", "fhir")

        result = _invoke(config_file, "config", "show")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["conversion"] == {"input_type": "hl7v3", "output_type": "fhir"}
        assert data["logging"]["level"] == "CRITICAL"

    def test_invalid_global_config_exits(self, tmp_path):
        """Test a malformed global config stops the CLI."""
        bad_config = tmp_path / "broken.json"
        bad_config.write_text("{broken")

        result = CliRunner().invoke(cli, ["--config", str(bad_config), "version"])

        assert result.exit_code == 1
        assert "Error loading configuration" in result.output
