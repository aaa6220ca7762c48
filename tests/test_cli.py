import json

import pytest
from click.testing import CliRunner
from PIL import Image

from fractal_sampler import __version__
from fractal_sampler.cli.main import main, parse_complex_pair

SMALL = ['--width', '16', '--height', '12', '--max-iter', '40', '--samples', '4',
         '--processes', '1', '--seed', '3']


@pytest.fixture
def runner():
    return CliRunner()


def test_parse_complex_pair():
    assert parse_complex_pair("-0.5, 0.25", '--center') == (-0.5, 0.25)


@pytest.mark.parametrize("value", ["1", "a,b", "1,2,3"])
def test_parse_complex_pair_rejects(value):
    import click
    with pytest.raises(click.BadParameter):
        parse_complex_pair(value, '--center')


def test_version(runner):
    result = runner.invoke(main, ['--version'])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_list_commands(runner):
    palettes = runner.invoke(main, ['palettes'])
    assert palettes.exit_code == 0
    assert 'rainbow' in palettes.output.split()

    presets = runner.invoke(main, ['presets'])
    assert presets.exit_code == 0
    assert 'rabbit' in presets.output

    fractals = runner.invoke(main, ['fractals'])
    assert fractals.exit_code == 0
    assert 'mandelbrot' in fractals.output
    assert 'julia' in fractals.output


def test_render_png(runner, tmp_path):
    output = tmp_path / "out.png"
    result = runner.invoke(main, ['render', str(output), '--center', '-0.5,0', '--scale', '1.5',
                                  '--filter', 'box', '--palette', 'gray'] + SMALL)
    assert result.exit_code == 0, result.output
    assert "Render complete" in result.output
    with Image.open(output) as saved:
        assert saved.size == (16, 12)
        metadata = json.loads(saved.info['FractalMetadata'])
    assert metadata['palette'] == 'gray'
    assert metadata['filter'].startswith('BoxFilter')


def test_render_julia_preset(runner, tmp_path):
    output = tmp_path / "julia.png"
    result = runner.invoke(main, ['render', str(output), '--fractal', 'julia',
                                  '--julia-c', 'dragon', '--raw'] + SMALL)
    assert result.exit_code == 0, result.output
    assert "Using Julia preset: dragon" in result.output
    assert (tmp_path / "julia.npy").exists()
    metadata = json.loads((tmp_path / "julia.json").read_text())
    assert metadata['fractal_parameters'] == {'c_real': -0.75, 'c_imag': 0.1}
    assert metadata['center'] == [0.0, 0.0]


def test_julia_c_is_ignored_for_mandelbrot(runner, tmp_path, caplog):
    output = tmp_path / "mandelbrot.png"
    result = runner.invoke(main, ['render', str(output), '--julia-c', 'dragon'] + SMALL)
    assert result.exit_code == 0, result.output
    assert "Using Julia preset" not in result.output
    assert "--julia-c is ignored" in caplog.text
    with Image.open(output) as saved:
        metadata = json.loads(saved.info['FractalMetadata'])
    assert metadata['fractal_type'] == "Mandelbrot"
    assert metadata['center'] == [-0.743643, 0.131825]
    assert metadata['scale'] == 0.00006
    assert metadata['fractal_parameters'] == {}


def test_julia_c_from_config_file_fractal(runner, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({'fractal': 'julia', 'num_processes': 1}))
    output = tmp_path / "julia.png"
    result = runner.invoke(main, ['render', str(output), '--config', str(config_path),
                                  '--julia-c', '-0.8,0.156'] + SMALL)
    assert result.exit_code == 0, result.output
    with Image.open(output) as saved:
        metadata = json.loads(saved.info['FractalMetadata'])
    assert metadata['fractal_parameters'] == {'c_real': -0.8, 'c_imag': 0.156}


def test_jpeg_quality_option(runner, tmp_path):
    output = tmp_path / "out.jpg"
    result = runner.invoke(main, ['render', str(output), '--quality', '60'] + SMALL)
    assert result.exit_code == 0, result.output
    assert output.exists()
    assert (tmp_path / "out.json").exists()

    rejected = runner.invoke(main, ['render', str(tmp_path / "bad.jpg"), '--quality', '0'] + SMALL)
    assert rejected.exit_code == 1
    assert "jpeg_quality" in rejected.output


def test_config_file_with_overrides(runner, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({'width': 8, 'height': 8, 'max_iterations': 30,
                                       'samples_per_pixel': 1, 'sampler': 'simple',
                                       'jitter': False, 'num_processes': 1,
                                       'center': [-0.5, 0.0], 'scale': 2.0}))
    output = tmp_path / "configured.png"
    result = runner.invoke(main, ['render', str(output), '--config', str(config_path),
                                  '--width', '10'])
    assert result.exit_code == 0, result.output
    with Image.open(output) as saved:
        assert saved.size == (10, 8)
        metadata = json.loads(saved.info['FractalMetadata'])
    # The jitter flag default does not override the config file
    assert metadata['jitter'] is False
    assert metadata['sampler'] == 'simple'


def test_bad_center_is_rejected(runner, tmp_path):
    result = runner.invoke(main, ['render', str(tmp_path / "out.png"), '--center', 'nowhere'])
    assert result.exit_code != 0
    assert not (tmp_path / "out.png").exists()


def test_invalid_config_reports_error(runner, tmp_path):
    result = runner.invoke(main, ['render', str(tmp_path / "out.png"), '--samples', '0'] + SMALL[:4])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_unsupported_output_format(runner, tmp_path):
    result = runner.invoke(main, ['render', str(tmp_path / "out.gif")] + SMALL)
    assert result.exit_code == 1
    assert "Unsupported format" in result.output
