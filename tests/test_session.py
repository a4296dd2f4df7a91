import stat

import pytest

from dwl_launcher.errors import ConfigParseError, SpawnError
from dwl_launcher.session import prepare_session, start_session
from dwl_launcher.settings import LauncherSettings


@pytest.fixture
def fake_target(tmp_path):
    """Executable that records its environment and argument."""
    out = tmp_path / "target.out"
    target = tmp_path / "bin" / "dwl"
    target.parent.mkdir()
    target.write_text(
        f'#!/bin/sh\necho "$XDG_SESSION_TYPE|$XDG_CURRENT_DESKTOP|$1" > "{out}"\n',
        encoding="utf-8",
    )
    target.chmod(0o755)
    return target, out


def make_settings(tmp_path, target):
    return LauncherSettings(
        config_dir=tmp_path / "config",
        script_path=tmp_path / "run" / "dwl_service",
        target_executable=target,
    )


def test_full_session(tmp_path, fake_target):
    target, out = fake_target
    settings = make_settings(tmp_path, target)

    process = start_session(settings)
    assert process.wait(timeout=10) == 0

    script = settings.script_path.read_text(encoding="utf-8")
    assert script == (
        "#!/bin/bash\n\n"
        "# Import environment\n"
        "/sbin/systemctl --user import-environment DISPLAY WAYLAND_DISPLAY XDG_CURRENT_DESKTOP &\n"
    )
    assert stat.S_IMODE(settings.script_path.stat().st_mode) == 0o744
    assert out.read_text(encoding="utf-8") == f'wayland|wlroots|-s "{settings.script_path}"\n'


def test_user_config_is_used(tmp_path, fake_target):
    target, out = fake_target
    settings = make_settings(tmp_path, target)
    settings.config_dir.mkdir()
    (settings.config_dir / "services").write_text(
        "[[service]]\nname = 'bar'\nexec = 'waybar'\n", encoding="utf-8"
    )
    (settings.config_dir / "envs").write_text(
        "XDG_SESSION_TYPE = 'wayland'\nXDG_CURRENT_DESKTOP = 'dwl'\n", encoding="utf-8"
    )

    start_session(settings).wait(timeout=10)

    assert settings.script_path.read_text(encoding="utf-8") == "#!/bin/bash\n\n# bar\nwaybar &\n"
    assert out.read_text(encoding="utf-8").startswith("wayland|dwl|")


def test_dry_run_writes_script_without_spawning(tmp_path, fake_target):
    target, out = fake_target
    settings = make_settings(tmp_path, target)

    assert start_session(settings, dry_run=True) is None
    assert settings.script_path.exists()
    assert not out.exists()


def test_parse_error_stops_before_script(tmp_path, fake_target):
    target, out = fake_target
    settings = make_settings(tmp_path, target)
    settings.config_dir.mkdir()
    (settings.config_dir / "services").write_text("service = [", encoding="utf-8")

    with pytest.raises(ConfigParseError):
        start_session(settings)

    assert not settings.script_path.exists()
    # defaults for the other file were still created
    assert (settings.config_dir / "envs").exists()


def test_spawn_error_leaves_script_in_place(tmp_path):
    settings = make_settings(tmp_path, tmp_path / "no-such-dwl")

    with pytest.raises(SpawnError):
        start_session(settings)

    assert settings.script_path.exists()


def test_prepare_session_reports_created_files(tmp_path):
    settings = make_settings(tmp_path, tmp_path / "dwl")

    first = prepare_session(settings)
    second = prepare_session(settings)

    assert len(first.created) == 2
    assert second.created == []
    assert first.script == second.script
    assert first.config_dir == settings.config_dir
