import json

import numpy as np
import pytest
from PIL import Image

from fractal_sampler.api import FractalRenderer, RenderConfig, load_config
from fractal_sampler.core.filters import BoxFilter, MitchellFilter
from fractal_sampler.core.fractal_types import JuliaFunction, MandelbrotFunction
from fractal_sampler.rendering.image_output import RenderMetadata


def small_config(**overrides):
    params = dict(width=16, height=12, center=(-0.5, 0.0), scale=1.5,
                  max_iterations=50, samples_per_pixel=4, num_processes=1,
                  tile_size=8, seed=7)
    params.update(overrides)
    return RenderConfig(**params)


class TestRenderConfig:

    def test_defaults_are_valid(self):
        RenderConfig().validate()

    @pytest.mark.parametrize("overrides", [
        {'width': 0},
        {'height': -5},
        {'max_iterations': 0},
        {'scale': 0.0},
        {'fractal': 'newton'},
        {'sampler': 'halton'},
        {'samples_per_pixel': 0},
        {'filter': 'gaussian'},
        {'filter_radius': (1.0, 0.0)},
        {'palette': 'sepia'},
        {'num_processes': 0},
        {'tile_size': 0},
        {'jpeg_quality': 101},
        {'center': (1.0,)},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            RenderConfig(**overrides).validate()

    def test_dict_roundtrip(self):
        config = small_config(filter_radius=(1.0, 1.0))
        restored = RenderConfig.from_dict(json.loads(json.dumps(config.to_dict())))
        assert restored == config

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            RenderConfig.from_dict({'width': 10, 'colour': 'red'})

    def test_load_config(self, tmp_path):
        path = tmp_path / "render.json"
        path.write_text(json.dumps({'fractal': 'julia', 'julia_c': [-0.8, 0.156],
                                    'width': 64, 'height': 48}))
        config = load_config(path)
        assert config.fractal == 'julia'
        assert config.julia_c == (-0.8, 0.156)
        assert config.width == 64
        assert config.samples_per_pixel == 16

    def test_load_config_rejects_non_object(self, tmp_path):
        path = tmp_path / "render.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError):
            load_config(path)

    def test_load_config_validates(self, tmp_path):
        path = tmp_path / "render.json"
        path.write_text(json.dumps({'samples_per_pixel': -1}))
        with pytest.raises(ValueError):
            load_config(path)


class TestFractalRenderer:

    def test_components_follow_config(self):
        renderer = FractalRenderer(small_config(filter='box', filter_radius=(0.75, 0.75)))
        assert isinstance(renderer.render_function, MandelbrotFunction)
        assert isinstance(renderer.pixel_filter, BoxFilter)
        assert renderer.pixel_filter.radius() == (0.75, 0.75)
        assert renderer.driver.num_processes == 1

    def test_mitchell_parameters(self):
        renderer = FractalRenderer(small_config(mitchell_b=0.0, mitchell_c=0.5))
        assert isinstance(renderer.pixel_filter, MitchellFilter)
        assert renderer.pixel_filter.b == 0.0
        assert renderer.pixel_filter.c == 0.5

    def test_invalid_config_raises(self):
        with pytest.raises(ValueError):
            FractalRenderer(small_config(width=0))

    def test_render_shape_and_reproducibility(self):
        first = FractalRenderer(small_config()).render()
        second = FractalRenderer(small_config()).render()
        assert first.shape == (12, 16, 3)
        assert first.dtype == np.uint8
        np.testing.assert_array_equal(first, second)

    def test_render_values(self):
        values = FractalRenderer(small_config()).render_values()
        assert values.shape == (12, 16)
        # The image center lies in the main cardioid
        assert values[6, 8] == -1.0
        assert (values < 1.0).all()

    def test_julia(self):
        renderer = FractalRenderer(small_config(fractal='julia', julia_c=(-0.8, 0.156),
                                                center=(0.0, 0.0)))
        assert isinstance(renderer.render_function, JuliaFunction)
        assert renderer.render_function.c == complex(-0.8, 0.156)
        assert renderer.create_metadata().fractal_parameters == {'c_real': -0.8, 'c_imag': 0.156}

    def test_metadata(self):
        renderer = FractalRenderer(small_config(samples_per_pixel=5))
        metadata = renderer.create_metadata(1.5)
        assert metadata.fractal_type == "Mandelbrot"
        assert metadata.resolution == (16, 12)
        # Five requested samples fit a 2x2 grid
        assert metadata.samples_per_pixel == 4
        assert metadata.render_time_seconds == 1.5
        assert metadata.filter.startswith("MitchellFilter")

    def test_render_to_png(self, tmp_path):
        path = tmp_path / "mandelbrot.png"
        image = FractalRenderer(small_config()).render_to_file(path)
        with Image.open(path) as saved:
            np.testing.assert_array_equal(np.asarray(saved), image)
            metadata = RenderMetadata.from_json(saved.info['FractalMetadata'])
        assert metadata.resolution == (16, 12)

    def test_render_to_file_with_raw_data(self, tmp_path):
        path = tmp_path / "mandelbrot.png"
        renderer = FractalRenderer(small_config(save_raw_data=True))
        image = renderer.render_to_file(path)

        values, metadata = renderer.image_exporter.load_raw_data(tmp_path / "mandelbrot.npy")
        assert values.shape == (12, 16)
        assert metadata.fractal_type == "Mandelbrot"
        np.testing.assert_array_equal(image, renderer.render())
