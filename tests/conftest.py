import pytest

import scout_envelope.ids as ids_mod


@pytest.fixture(autouse=True)
def isolate_home(tmp_path, monkeypatch):
    """Keep device id and CLI config out of the real home directory."""
    monkeypatch.setattr(ids_mod, "DEVICE_ID_FILE", tmp_path / "device_id")
    try:
        import scout_envelope.cli.main as cli_main
    except SystemExit:
        # CLI extras not installed
        cli_main = None
    if cli_main is not None:
        monkeypatch.setattr(cli_main, "CONFIG_FILE", tmp_path / "config.json")
    yield tmp_path
