import numpy as np
from PIL import Image

import convert_image
from panel_quant.palette_data import DEFAULT_CONFIG


def test_cli_writes_panel_png(tmp_path, capsys):
    src = tmp_path / "photo.jpg"
    Image.new("RGB", (40, 90), (250, 5, 5)).save(src)
    assert convert_image.main([str(src)]) == 0

    dst = tmp_path / "photo_panel.png"
    with Image.open(dst) as out:
        assert out.size == (87, 60)
        pixels = {tuple(px) for px in np.asarray(out.convert("RGB")).reshape(-1, 3)}
    assert pixels <= set(DEFAULT_CONFIG.palette)
    log = capsys.readouterr().out
    assert "Wrote photo_panel.png" in log
    assert "Red" in log


def test_cli_size_and_no_rotate(tmp_path):
    src = tmp_path / "tall.png"
    dst = tmp_path / "out.bin"
    Image.new("RGB", (10, 30), (0, 0, 0)).save(src)
    code = convert_image.main(
        [str(src), str(dst), "--size", "8x4", "--no-rotate", "--search", "linear"]
    )
    assert code == 0
    with Image.open(tmp_path / "out.png") as out:
        assert out.size == (8, 4)


def test_cli_fallback(tmp_path):
    src = tmp_path / "clear.png"
    Image.new("RGBA", (87, 60), (250, 5, 5, 0)).save(src)
    assert convert_image.main([str(src), "--fallback", "#fff"]) == 0
    with Image.open(tmp_path / "clear_panel.png") as out:
        arr = np.asarray(out.convert("RGB"))
    assert np.all(arr == 255)


def test_cli_missing_input(tmp_path, capsys):
    assert convert_image.main([str(tmp_path / "nope.png")]) == 2
    assert "not found" in capsys.readouterr().err


def test_cli_undecodable_input(tmp_path, capsys):
    src = tmp_path / "broken.png"
    src.write_bytes(b"definitely not a png")
    assert convert_image.main([str(src)]) == 2
    assert "cannot decode" in capsys.readouterr().err


def test_parse_size():
    assert convert_image._parse_size("87x60") == (87, 60)
    assert convert_image._parse_size("4X2") == (4, 2)
