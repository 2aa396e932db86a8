import json

import pytest

from buildlink import cli


def test_encode(capsys):
    cli.encode_main(["build-encode", '{"trees": [{"yellow.attack_boost": 1}, {}, {}], "owned": 5}'])
    assert capsys.readouterr().out.strip() == "1-3-1_1---o5"


def test_decode(capsys):
    cli.decode_main(["build-decode", "1-3-1_1---o5"])
    data = json.loads(capsys.readouterr().out)
    assert data == {"trees": [{"yellow.attack_boost": 1}, {}, {}], "owned": 5}


@pytest.mark.parametrize("main", [cli.encode_main, cli.decode_main])
def test_usage(main, capsys):
    with pytest.raises(SystemExit) as info:
        main(["prog"])
    assert info.value.code == 1
    assert "Usage" in capsys.readouterr().err


def test_encode_rejects_bad_json():
    with pytest.raises(SystemExit) as info:
        cli.encode_main(["build-encode", "{"])
    assert info.value.code == 1


def test_decode_rejects_bad_code(capsys):
    with pytest.raises(SystemExit) as info:
        cli.decode_main(["build-decode", "1-4-1_1---"])
    assert info.value.code == 2
    assert "branch count mismatch" in capsys.readouterr().err
