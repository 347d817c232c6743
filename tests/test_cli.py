"""
Tests for the command line interface.
"""

import json

import numpy as np
import pytest
from click.testing import CliRunner
from PIL import Image

from lumigrade.analysis.suggestion import SuggestionService
from lumigrade.cli.main import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def gray_png(tmp_path):
    path = tmp_path / 'gray.png'
    Image.fromarray(np.full((8, 10, 3), 100, dtype=np.uint8)).save(path)
    return path


def read_rgb(path):
    with Image.open(path) as img:
        return np.asarray(img.convert('RGB'))


class TestRenderCommand:

    def test_render_with_overrides(self, runner, gray_png, tmp_path):
        output = tmp_path / 'out.png'
        result = runner.invoke(main, ['-q', 'render', str(gray_png), '-o', str(output),
                                      '--set', 'exposure=100'])
        assert result.exit_code == 0, result.output
        assert np.all(read_rgb(output) == 200)

    def test_render_reports_settings(self, runner, gray_png, tmp_path):
        output = tmp_path / 'out.png'
        result = runner.invoke(main, ['render', str(gray_png), '-o', str(output),
                                      '--set', 'contrast=20'])
        assert result.exit_code == 0, result.output
        assert 'gray.png' in result.output
        assert 'contrast' in result.output

    def test_settings_file_then_override(self, runner, gray_png, tmp_path):
        settings_path = tmp_path / 'grade.json'
        settings_path.write_text(json.dumps({'exposure': -100, 'temp': 0}))
        output = tmp_path / 'out.png'
        result = runner.invoke(main, ['-q', 'render', str(gray_png), '-o', str(output),
                                      '--settings', str(settings_path),
                                      '--set', 'exposure=100'])
        assert result.exit_code == 0, result.output
        assert np.all(read_rgb(output) == 200)

    def test_render_with_preset(self, runner, gray_png, tmp_path):
        output = tmp_path / 'out.png'
        result = runner.invoke(main, ['-q', 'render', str(gray_png), '-o', str(output),
                                      '-p', 'night'])
        assert result.exit_code == 0, result.output
        assert read_rgb(output).mean() > 100

    def test_default_output_name(self, runner, gray_png):
        result = runner.invoke(main, ['-q', 'render', str(gray_png)])
        assert result.exit_code == 0, result.output
        outputs = list(gray_png.parent.glob('lumigrade_*.jpg'))
        assert len(outputs) == 1

    def test_workers_option(self, runner, gray_png, tmp_path):
        output = tmp_path / 'out.png'
        result = runner.invoke(main, ['-q', 'render', str(gray_png), '-o', str(output),
                                      '-w', '3', '--set', 'exposure=100'])
        assert result.exit_code == 0, result.output
        assert np.all(read_rgb(output) == 200)

    @pytest.mark.parametrize("assignment", ['exposure', 'grain=10', 'exposure=loud'])
    def test_bad_assignment(self, runner, gray_png, tmp_path, assignment):
        result = runner.invoke(main, ['render', str(gray_png), '-o', str(tmp_path / 'x.png'),
                                      '--set', assignment])
        assert result.exit_code == 2

    def test_unknown_preset(self, runner, gray_png, tmp_path):
        result = runner.invoke(main, ['render', str(gray_png), '-o', str(tmp_path / 'x.png'),
                                      '-p', 'sepia'])
        assert result.exit_code == 2

    def test_unreadable_image(self, runner, tmp_path):
        broken = tmp_path / 'broken.png'
        broken.write_bytes(b'not an image')
        result = runner.invoke(main, ['render', str(broken), '-o', str(tmp_path / 'x.png')])
        assert result.exit_code == 1


class TestBatchCommand:

    def test_batch_grades_directory(self, runner, tmp_path):
        source = tmp_path / 'in'
        source.mkdir()
        for name in ('a.png', 'b.png'):
            Image.fromarray(np.full((6, 6, 3), 50, dtype=np.uint8)).save(source / name)
        (source / 'notes.txt').write_text('skip me')

        output = tmp_path / 'out'
        result = runner.invoke(main, ['-q', 'batch', str(source), '-o', str(output),
                                      '--set', 'vignette=40'])
        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in output.iterdir()) == ['a.jpg', 'b.jpg']

    def test_batch_keeps_same_stem_images_apart(self, runner, tmp_path):
        source = tmp_path / 'in'
        source.mkdir()
        Image.fromarray(np.full((6, 6, 3), 50, dtype=np.uint8)).save(source / 'a.png')
        Image.fromarray(np.full((6, 6, 3), 90, dtype=np.uint8)).save(source / 'a.jpg')
        Image.fromarray(np.full((6, 6, 3), 10, dtype=np.uint8)).save(source / 'b.png')

        output = tmp_path / 'out'
        result = runner.invoke(main, ['-q', 'batch', str(source), '-o', str(output)])
        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in output.iterdir()) == ['a_jpg.jpg', 'a_png.jpg', 'b.jpg']

    def test_batch_empty_directory(self, runner, tmp_path):
        result = runner.invoke(main, ['batch', str(tmp_path), '-o', str(tmp_path / 'out')])
        assert result.exit_code == 0
        assert 'No images found' in result.output


class TestPresetCommands:

    def test_list(self, runner):
        result = runner.invoke(main, ['presets', 'list'])
        assert result.exit_code == 0
        assert 'natgeo' in result.output
        assert 'Cinematic' in result.output

    def test_show(self, runner):
        result = runner.invoke(main, ['-q', 'presets', 'show', 'hdr'])
        assert result.exit_code == 0
        settings = json.loads(result.output)
        assert settings['shadows'] == 40
        assert settings['exposure'] == 0

    def test_show_unknown(self, runner):
        result = runner.invoke(main, ['presets', 'show', 'sepia'])
        assert result.exit_code == 2


class TestSuggestCommand:

    def test_suggest_json(self, runner, gray_png, tmp_path, monkeypatch):
        class CannedProvider:
            def generate(self, prompt, image_jpeg, timeout=None):
                return '```json\n{"exposure": 40, "vignette": 10}\n```'

        monkeypatch.setattr(
            SuggestionService, 'from_config',
            classmethod(lambda cls, config: cls(CannedProvider(), retry_delay=0)))

        output = tmp_path / 'suggested.png'
        result = runner.invoke(main, ['-q', 'suggest', str(gray_png), '--json',
                                      '--apply', str(output)])
        assert result.exit_code == 0, result.output
        assert '"exposure": 40' in result.output
        assert output.exists()

    def test_suggest_apply_bad_output(self, runner, gray_png, tmp_path, monkeypatch):
        class CannedProvider:
            def generate(self, prompt, image_jpeg, timeout=None):
                return '{"exposure": 10}'

        monkeypatch.setattr(
            SuggestionService, 'from_config',
            classmethod(lambda cls, config: cls(CannedProvider(), retry_delay=0)))

        result = runner.invoke(main, ['-q', 'suggest', str(gray_png),
                                      '--apply', str(tmp_path / 'out.xyz')])
        assert result.exit_code == 1
        assert 'Error rendering suggestion' in result.output
        assert not isinstance(result.exception, ValueError)

    def test_suggest_provider_unavailable(self, runner, gray_png, monkeypatch):
        def unavailable(cls, config):
            raise ImportError("google-generativeai not installed")

        monkeypatch.setattr(SuggestionService, 'from_config', classmethod(unavailable))
        result = runner.invoke(main, ['suggest', str(gray_png)])
        assert result.exit_code == 1
