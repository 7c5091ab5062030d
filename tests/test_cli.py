# SPDX-License-Identifier: MIT
import builtins, errno

import marvellfw.extract
from marvellfw.cli import main
from fwimage import JUNK, image, payload

def test_extracts_into_output_dir(tmp_path, capsys):
    driver = tmp_path / 'TN40xxmp_64.sys'
    driver.write_bytes(image(JUNK, payload(version=(0, 3, 4, 0), build=3090, device=1)))
    out = tmp_path / 'fw'

    assert main([str(driver), '-o', str(out)]) == 0
    assert (out / 'x3310fw_0_3_4_0_3090.hdr.new').exists()
    captured = capsys.readouterr()
    assert 'version: 0.3.4.0 3090 x3310' in captured.out
    assert 'Extracted 1 firmware files.' in captured.out
    assert 'found start sequence of FW at offset 0x00000010' in captured.err

def test_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / 'nope.sys'), '-o', str(tmp_path)]) == 1
    assert 'open of input file failed' in capsys.readouterr().err

def test_premature_end_keeps_exit_status(tmp_path, capsys):
    driver = tmp_path / 'TN40xxmp_32.sys'
    driver.write_bytes(image(payload()[:-1]))
    assert main([str(driver), '-o', str(tmp_path)]) == 0
    assert 'premature end of input' in capsys.readouterr().err

def test_output_is_a_file(tmp_path, capsys):
    driver = tmp_path / 'TN40xxmp_64.sys'
    driver.write_bytes(image(payload()))
    out = tmp_path / 'fw'
    out.write_bytes(b'')

    assert main([str(driver), '-o', str(out)]) == 1
    assert 'cannot create output directory' in capsys.readouterr().err

class FullDisk:
    closed = False

    def write(self, data):
        raise OSError(errno.ENOSPC, 'No space left on device')

    def close(self):
        self.closed = True

def test_write_failure_exit_status(tmp_path, monkeypatch, capsys):
    def fake_open(path, mode):
        if mode == 'wb':
            return FullDisk()
        return builtins.open(path, mode)
    monkeypatch.setattr(marvellfw.extract, 'open', fake_open, raising=False)

    driver = tmp_path / 'TN40xxmp_64.sys'
    driver.write_bytes(image(payload()))
    assert main([str(driver), '-o', str(tmp_path)]) == 2
    assert 'No space left on device' in capsys.readouterr().err
