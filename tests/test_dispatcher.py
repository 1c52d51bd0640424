"""Tests for the CLI dispatcher and the config command."""

from duplicaci import __version__
from duplicaci.cli.dispatcher import create_subcommand_parser, main


class TestParser:
    """Tests for create_subcommand_parser."""

    def test_backup_args(self):
        """Test backup options are parsed."""
        parser = create_subcommand_parser()
        args = parser.parse_args(
            [
                "backup",
                "-r", "appdata",
                "-s", "nas",
                "-s", "gdrive",
                "--backup-options", "-threads 4",
                "--check",
                "--prune",
                "--create-issues",
                "--forgejo-url", "https://git",
                "--docker-container", "Duplicacy",
                "-n",
            ]
        )
        assert args.command == "backup"
        assert args.repository == "appdata"
        assert args.storages == ["nas", "gdrive"]
        assert args.backup_options == "-threads 4"
        assert args.check and args.prune and args.create_issues
        assert args.forgejo_url == "https://git"
        assert args.docker_container == "Duplicacy"
        assert args.dry_run is True

    def test_prune_default_options(self):
        """Test prune has the default retention options."""
        args = create_subcommand_parser().parse_args(["prune", "-s", "nas"])
        assert args.prune_options == "-keep 0:180 -keep 7:14 -keep 1:1 -a"

    def test_check_args(self):
        """Test check options are parsed."""
        args = create_subcommand_parser().parse_args(
            ["check", "-s", "nas", "--update-stats", "--stats-path", "/stats"]
        )
        assert args.update_stats is True
        assert args.stats_path == "/stats"

    def test_global_options(self):
        """Test global options precede the command."""
        args = create_subcommand_parser().parse_args(
            ["-c", "/etc/x.toml", "--debug", "run", "--dry-run"]
        )
        assert args.config == "/etc/x.toml"
        assert args.debug is True
        assert args.command == "run"
        assert args.dry_run is True


class TestMain:
    """Tests for main."""

    def test_version(self, capsys):
        """Test --version prints the version."""
        assert main(["--version"]) == 0
        assert f"duplicaci {__version__}" in capsys.readouterr().out

    def test_no_command(self, capsys):
        """Test a missing command is an error."""
        assert main([]) == 1
        assert "No command specified" in capsys.readouterr().out


class TestConfigCommand:
    """Tests for the config command."""

    def test_no_action(self, capsys):
        """Test config without an action prints usage."""
        assert main(["config"]) == 1
        assert "Usage" in capsys.readouterr().out

    def test_init_stdout(self, capsys):
        """Test init prints the example config."""
        assert main(["config", "init"]) == 0
        assert "[[backups]]" in capsys.readouterr().out

    def test_init_file(self, tmp_path):
        """Test init writes the example config to a file."""
        output = tmp_path / "config.toml"
        assert main(["config", "init", "-o", str(output)]) == 0
        assert "[connection]" in output.read_text()

    def test_init_unwritable(self, tmp_path, capsys):
        """Test a write failure is reported."""
        output = tmp_path / "missing" / "config.toml"
        assert main(["config", "init", "-o", str(output)]) == 1
        assert "Error writing file" in capsys.readouterr().out

    def test_validate(self, config_file, capsys):
        """Test a valid config is reported with its summary."""
        assert main(["-c", str(config_file), "config", "validate"]) == 0
        out = capsys.readouterr().out
        assert "Configuration is valid." in out
        assert "Backups: 2" in out
        assert "Storages: 3" in out
        assert "Container: Duplicacy" in out

    def test_validate_invalid(self, tmp_path, capsys):
        """Test an invalid config is reported."""
        path = tmp_path / "config.toml"
        path.write_text("[connection]\n")
        assert main(["-c", str(path), "config", "validate"]) == 1
        assert "no backups defined" in capsys.readouterr().out

    def test_validate_not_found(self, tmp_path, monkeypatch, capsys):
        """Test a missing config is reported with the searched locations."""
        monkeypatch.setattr(
            "duplicaci.config.loader.CONFIG_PATHS", [tmp_path / "missing.toml"]
        )
        assert main(["config", "validate"]) == 1
        assert "No configuration file found." in capsys.readouterr().out
