"""Tests for the CLI main module."""

import json
from unittest.mock import patch

import pytest

from codec_text_view.cli.main import (
    create_argument_parser,
    decode_file,
    format_results,
    load_iterator_config,
    main,
    transcode_file,
    units_from_bytes,
)
from codec_text_view.shared.config import MalformedInputPolicy, TextIteratorConfig
from codec_text_view.shared.errors import MalformedInputError


class TestArgumentParser:
    """Test command-line argument parsing."""

    def test_decode_defaults(self):
        """Test decode command defaults."""
        args = create_argument_parser().parse_args(["decode", "a.txt"])

        assert args.command == "decode"
        assert args.codec == "utf-8"
        assert args.format == "text"
        assert args.stream is False
        assert args.ranges is False
        assert args.malformed is None
        assert args.byteorder == "little"

    def test_transcode_requires_target_codec(self):
        """Test that --to is mandatory."""
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["transcode", "a", "b"])

    def test_benchmark_scenarios_validated(self):
        """Test that unknown scenarios are rejected by argparse."""
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["benchmark", "--scenarios", "sideways"])

    def test_global_flags(self):
        """Test verbose and quiet flags."""
        args = create_argument_parser().parse_args(["--verbose", "benchmark"])

        assert args.verbose is True
        assert args.quiet is False


class TestHelpers:
    """Test CLI helper functions."""

    def test_units_from_bytes(self):
        """Test splitting bytes into code units."""
        assert units_from_bytes(b"\x41\x42", 1, "little") == [0x41, 0x42]
        assert units_from_bytes(b"\x41\x00\x42\x00", 2, "little") == [0x41, 0x42]
        assert units_from_bytes(b"\x00\x00\x00\x41", 4, "big") == [0x41]

    def test_units_from_bytes_drops_partial_unit(self, caplog):
        """Test that a trailing partial unit is dropped with a warning."""
        assert units_from_bytes(b"\x41\x00\x42", 2, "little") == [0x41]
        assert "Dropping trailing partial code unit" in caplog.text

    def test_load_iterator_config(self, tmp_path):
        """Test --config and --malformed layering."""
        config_path = tmp_path / "config.json"
        config_path.write_text(TextIteratorConfig.traced("cli").to_json())
        args = create_argument_parser().parse_args(
            ["decode", "x", "--config", str(config_path), "--malformed", "raise"]
        )

        config = load_iterator_config(args)

        assert config.correlation_id == "cli"
        assert config.trace_steps is True
        assert config.malformed_input is MalformedInputPolicy.RAISE

    def test_format_results_text(self):
        """Test text output with ranges and errors."""
        results = [
            {"file": "a", "codec": "utf-8", "tier": "BIDIRECTIONAL",
             "characters": 1, "text": "€", "ranges": [[0, 3]]},
            {"file": "b", "error": "File not found"},
        ]

        output = format_results(results, "text")

        assert "U+20AC" in output
        assert "[0, 3)" in output
        assert "b: File not found" in output

    def test_format_results_json(self):
        """Test JSON output keeps non-ASCII text readable."""
        output = format_results([{"file": "a", "text": "é"}], "json")

        assert json.loads(output) == [{"file": "a", "text": "é"}]
        assert "é" in output

    def test_format_results_empty(self):
        """Test text output with nothing to show."""
        assert format_results([], "text") == "No results to display."


class TestDecodeFile:
    """Test decoding files."""

    def test_decode_utf8(self, tmp_path):
        """Test decoding with code-unit ranges."""
        path = tmp_path / "in.txt"
        path.write_bytes("a€".encode("utf-8"))

        result = decode_file(path, "utf-8", TextIteratorConfig(), ranges=True)

        assert result["text"] == "a€"
        assert result["characters"] == 2
        assert result["tier"] == "BIDIRECTIONAL"
        assert result["ranges"] == [[0, 1], [1, 4]]

    def test_decode_stream(self, tmp_path):
        """Test single-pass decoding has no ranges."""
        path = tmp_path / "in.txt"
        path.write_bytes("hé".encode("utf-16-be"))

        result = decode_file(
            path, "utf-16", TextIteratorConfig(), byteorder="big", stream=True, ranges=True
        )

        assert result["text"] == "hé"
        assert result["tier"] == "INPUT"
        assert "ranges" not in result

    def test_decode_utf32_random_access(self, tmp_path):
        """Test the random-access tier is reported for UTF-32."""
        path = tmp_path / "in.txt"
        path.write_bytes("\U0001F600".encode("utf-32-le"))

        result = decode_file(path, "utf-32", TextIteratorConfig())

        assert result["text"] == "\U0001F600"
        assert result["tier"] == "RANDOM_ACCESS"


class TestTranscodeFile:
    """Test transcoding files."""

    def test_utf8_to_utf16(self, tmp_path):
        """Test re-encoding UTF-8 as UTF-16."""
        source = tmp_path / "in.txt"
        target = tmp_path / "out.txt"
        source.write_bytes("a\U0001F600".encode("utf-8"))

        summary = transcode_file(source, target, "utf-8", "utf-16", TextIteratorConfig())

        assert target.read_bytes() == "a\U0001F600".encode("utf-16-le")
        assert summary["characters"] == 2
        assert summary["code_units_read"] == 5
        assert summary["code_units_written"] == 3

    def test_add_bom(self, tmp_path):
        """Test transcoding to UTF-8 with a byte order mark."""
        source = tmp_path / "in.txt"
        target = tmp_path / "out.txt"
        source.write_bytes(b"hi")

        transcode_file(source, target, "ascii", "utf-8-bom", TextIteratorConfig())

        assert target.read_bytes() == b"\xef\xbb\xbfhi"

    def test_failure_leaves_target_untouched(self, tmp_path):
        """Test that malformed input under the strict policy writes nothing."""
        # Arrange
        source = tmp_path / "in.txt"
        target = tmp_path / "out.txt"
        source.write_bytes(b"ab\xffcd")
        target.write_bytes(b"previous")

        # Act
        with pytest.raises(MalformedInputError):
            transcode_file(source, target, "utf-8", "utf-16", TextIteratorConfig.strict())

        # Assert
        assert target.read_bytes() == b"previous"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["in.txt", "out.txt"]

    def test_failure_creates_no_target(self, tmp_path):
        """Test that a failed transcode does not leave a truncated file."""
        source = tmp_path / "in.txt"
        target = tmp_path / "out.txt"
        source.write_bytes(b"\xff")

        with pytest.raises(MalformedInputError):
            transcode_file(source, target, "utf-8", "utf-16", TextIteratorConfig.strict())

        assert not target.exists()


class TestMain:
    """Test main function routing."""

    def test_main_no_command(self, capsys):
        """Test that running without a command prints help."""
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    @patch("codec_text_view.cli.main.cmd_decode")
    def test_main_decode_command(self, mock_cmd_decode):
        """Test main routing to the decode command."""
        mock_cmd_decode.return_value = 0

        assert main(["decode", "x.txt"]) == 0
        mock_cmd_decode.assert_called_once()

    @patch("codec_text_view.cli.main.cmd_transcode")
    def test_main_transcode_command(self, mock_cmd_transcode):
        """Test main routing to the transcode command."""
        mock_cmd_transcode.return_value = 0

        assert main(["transcode", "a", "b", "--to", "utf-16"]) == 0
        mock_cmd_transcode.assert_called_once()

    def test_main_keyboard_interrupt(self):
        """Test main handling of keyboard interrupt."""
        with patch("codec_text_view.cli.main.cmd_decode", side_effect=KeyboardInterrupt):
            assert main(["decode", "x.txt"]) == 130

    def test_main_unknown_codec(self, tmp_path, capsys):
        """Test that an unknown codec name is reported."""
        path = tmp_path / "in.txt"
        path.write_bytes(b"a")

        assert main(["decode", str(path), "--codec", "ebcdic"]) == 1
        assert "Unknown codec" in capsys.readouterr().err


@pytest.mark.integration
class TestCLIIntegration:
    """Integration tests for CLI commands."""

    def test_cli_decode(self, tmp_path, capsys):
        """Test decoding a file to JSON."""
        path = tmp_path / "in.txt"
        path.write_bytes("héllo".encode("utf-8"))

        exit_code = main(["decode", str(path), "--format", "json"])

        assert exit_code == 0
        results = json.loads(capsys.readouterr().out)
        assert results[0]["text"] == "héllo"

    def test_cli_decode_missing_file(self, tmp_path, capsys):
        """Test that missing files are reported and fail the run."""
        exit_code = main(["decode", str(tmp_path / "missing.txt")])

        assert exit_code == 1
        assert "File not found" in capsys.readouterr().out

    def test_cli_decode_strict(self, tmp_path, capsys):
        """Test the strict policy turns malformed input into a failure."""
        path = tmp_path / "bad.txt"
        path.write_bytes(b"a\xffb")

        exit_code = main(["decode", str(path), "--malformed", "raise"])

        assert exit_code == 1
        assert "Malformed input at code unit 1" in capsys.readouterr().out

    def test_cli_decode_skips_by_default(self, tmp_path, capsys):
        """Test the default policy skips malformed input."""
        path = tmp_path / "bad.txt"
        path.write_bytes(b"a\xffb")

        assert main(["decode", str(path)]) == 0
        assert "ab" in capsys.readouterr().out

    def test_cli_transcode(self, tmp_path, capsys):
        """Test transcoding through the CLI."""
        source = tmp_path / "in.txt"
        target = tmp_path / "out.txt"
        source.write_bytes("€".encode("utf-8"))

        exit_code = main(["transcode", str(source), str(target), "--to", "utf-32"])

        assert exit_code == 0
        assert target.read_bytes() == "€".encode("utf-32-le")
        assert json.loads(capsys.readouterr().out)["characters"] == 1

    def test_cli_benchmark(self, tmp_path):
        """Test a quick benchmark run written to a file."""
        output = tmp_path / "report.json"

        exit_code = main([
            "benchmark", "--quick", "--codecs", "utf-32",
            "--scenarios", "forward", "--output", str(output)
        ])

        assert exit_code == 0
        report = json.loads(output.read_text())
        assert report["codecs"] == ["utf-32"]
        assert report["scenarios"] == ["forward"]
