import stat

import pytest

from dwl_launcher.errors import ErrorKind, FileIOError
from dwl_launcher.util import write_string


def test_write_creates_parent_directories(tmp_path):
    target = tmp_path / "a" / "b" / "script"
    write_string("#!/bin/bash\n\n", target)

    assert target.read_text(encoding="utf-8") == "#!/bin/bash\n\n"
    assert stat.S_IMODE(target.stat().st_mode) == 0o744


def test_write_truncates_existing_file(tmp_path):
    target = tmp_path / "script"
    target.write_text("a much longer previous content\n", encoding="utf-8")
    target.chmod(0o600)

    write_string("short", target)

    assert target.read_text(encoding="utf-8") == "short"
    assert stat.S_IMODE(target.stat().st_mode) == 0o744


def test_write_keeps_content_verbatim(tmp_path):
    target = tmp_path / "script"
    write_string("no newline\r\nat end", target)
    assert target.read_bytes() == b"no newline\r\nat end"


def test_write_into_file_parent_fails(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(FileIOError) as excinfo:
        write_string("data", blocker / "script")

    assert excinfo.value.kind is ErrorKind.IO
    assert excinfo.value.path == blocker / "script"
    assert isinstance(excinfo.value.cause, OSError)
