from pathlib import Path

import pytest

from pyinifile import MISSING, api
from pyinifile.errors import FileNotExistError, InvalidParameterError


def test_load(sample_ini: Path):
    assert api.load(sample_ini) == {
        "Section1": {"Key1": "Value1", "Key2": "Value2"},
        "Section2": {"KeyA": 1},
    }
    assert api.load(sample_ini, "raw")["Section2"]["KeyA"] == "1"


def test_get_entry(sample_ini: Path):
    assert api.get_entry(sample_ini, "Section1", "Key2") == "Value2"
    assert api.get_entry(sample_ini, "Section1", "Nope") is None
    assert api.get_entry(sample_ini, "Section1", "Nope", default=MISSING) is MISSING


def test_set_entry(sample_ini: Path):
    api.set_entry(sample_ini, "Section3", "Foo", "Bar")
    assert sample_ini.read_text().endswith("[Section3]\nFoo=Bar\n\n")


def test_set_entry_keeps_untouched_values_verbatim(tmp_path: Path):
    path = tmp_path / "raw.ini"
    path.write_text("[s]\nflag=yes\nnothing=null\n")
    api.set_entry(path, "s", "new", "1")
    assert path.read_text() == "[s]\nflag=yes\nnothing=null\nnew=1\n\n"


def test_set_entry_missing_file(tmp_path: Path):
    with pytest.raises(FileNotExistError):
        api.set_entry(tmp_path / "missing.ini", "s", "k", "v")


def test_set_entry_create(tmp_path: Path):
    path = tmp_path / "nested" / "new.ini"
    api.set_entry(path, "s", "k", "v", create=True)
    assert path.read_text() == "[s]\nk=v\n\n"


def test_set_entry_invalid_leaves_file(sample_ini: Path):
    before = sample_ini.read_bytes()
    with pytest.raises(InvalidParameterError):
        api.set_entry(sample_ini, "Sec[1", "k", "v")
    assert sample_ini.read_bytes() == before


def test_set_section(sample_ini: Path):
    api.set_section(sample_ini, "Section2", {"KeyB": "2"}, merge=True)
    assert api.load(sample_ini, "raw")["Section2"] == {"KeyA": "1", "KeyB": "2"}
    api.set_section(sample_ini, "Section2", {"KeyC": "3"})
    assert api.load(sample_ini, "raw")["Section2"] == {"KeyC": "3"}


def test_delete_entry_and_section(sample_ini: Path):
    assert api.delete_entry(sample_ini, "Section1", "Key1") is True
    assert api.delete_entry(sample_ini, "Section1", "Key1") is False
    assert api.delete_section(sample_ini, "Section2") is True
    assert api.delete_section(sample_ini, "Section2") is False
    assert sample_ini.read_text() == "[Section1]\nKey2=Value2\n\n"


def test_delete_missing_does_not_rewrite(tmp_path: Path):
    path = tmp_path / "spaced.ini"
    path.write_text("[s]\n  k = v  \n")
    api.delete_entry(path, "s", "other")
    api.delete_section(path, "t")
    assert path.read_text() == "[s]\n  k = v  \n"


def test_get_section(sample_ini: Path):
    assert api.get_section(sample_ini, "Section2") == {"KeyA": 1}
    assert api.get_section(sample_ini, " Section2 ", scanner_mode="raw") == {"KeyA": "1"}
    assert api.get_section(sample_ini, "Nope") is None


def test_get_section_missing_file(tmp_path: Path):
    with pytest.raises(FileNotExistError):
        api.get_section(tmp_path / "nope.ini", "s")
