"""Tests for CsvConfig and csvdb.toml loading."""

import pytest

from csvdb.config import CsvConfig, InvalidConfigError, init_config, load_config


class TestCsvConfig:
    def test_defaults(self):
        cfg = CsvConfig()
        assert cfg.delimiter == ","
        assert cfg.line_separator == "\n"
        assert cfg.header is True
        assert cfg.fields is None

    def test_empty_delimiter_rejected(self):
        with pytest.raises(InvalidConfigError):
            CsvConfig(delimiter="")

    def test_fields_normalised_to_tuple(self):
        assert CsvConfig(fields=["id", "name"]).fields == ("id", "name")

    def test_overrides_skip_none(self):
        cfg = CsvConfig().with_overrides(delimiter=";", header=None)
        assert cfg.delimiter == ";"
        assert cfg.header is True

    def test_require_fields(self):
        CsvConfig(header=False, fields=("id",)).require_fields()
        with pytest.raises(InvalidConfigError):
            CsvConfig(header=False).require_fields()


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path):
        cfg = load_config(tmp_path)
        assert cfg.file == tmp_path / "data.csv"
        assert cfg.header is True

    def test_reads_section(self, tmp_path):
        (tmp_path / "csvdb.toml").write_text(
            '[csvdb]\nfile = "people.csv"\ndelimiter = ";"\nheader = false\nfields = ["id", "name"]\n'
        )
        cfg = load_config(tmp_path)
        assert cfg.file == tmp_path / "people.csv"
        assert cfg.delimiter == ";"
        assert cfg.header is False
        assert cfg.fields == ("id", "name")

    def test_searches_upward(self, tmp_path):
        (tmp_path / "csvdb.toml").write_text('[csvdb]\nfile = "x.csv"\n')
        sub = tmp_path / "a" / "b"
        sub.mkdir(parents=True)
        assert load_config(sub).file == tmp_path / "x.csv"

    def test_headerless_without_fields_rejected(self, tmp_path):
        (tmp_path / "csvdb.toml").write_text("[csvdb]\nheader = false\n")
        with pytest.raises(InvalidConfigError):
            load_config(tmp_path)

    def test_string_header_rejected(self, tmp_path):
        (tmp_path / "csvdb.toml").write_text('[csvdb]\nheader = "false"\n')
        with pytest.raises(InvalidConfigError):
            load_config(tmp_path)

    def test_bad_fields_type_rejected(self, tmp_path):
        (tmp_path / "csvdb.toml").write_text('[csvdb]\nfields = "id"\n')
        with pytest.raises(InvalidConfigError):
            load_config(tmp_path)

    def test_malformed_toml_rejected(self, tmp_path):
        (tmp_path / "csvdb.toml").write_text("[csvdb\n")
        with pytest.raises(InvalidConfigError):
            load_config(tmp_path)


class TestInitConfig:
    def test_writes_loadable_file(self, tmp_path):
        path = init_config(tmp_path, fields=["id", "name"])
        assert path == tmp_path / "csvdb.toml"
        cfg = load_config(tmp_path)
        assert cfg.fields == ("id", "name")
        assert cfg.line_separator == "\n"

    def test_refuses_to_overwrite(self, tmp_path):
        init_config(tmp_path)
        with pytest.raises(FileExistsError):
            init_config(tmp_path)

    def test_headerless_needs_fields(self, tmp_path):
        with pytest.raises(InvalidConfigError):
            init_config(tmp_path, header=False)
