"""Tests for raster file I/O, previews, configuration and the console."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import logging

import torch
import pytest
from seamedit import config
from seamedit.cli import main, run_session
from seamedit.editor import SeamEditor
from seamedit.io import PreviewWriter, load_image, save_image
from seamedit.logging_config import setup_logging
from seamedit.preview import highlight_seam

from conftest import make_random_raster


class TestImageFiles:
    @pytest.mark.parametrize("channels", [3, 4])
    def test_save_then_load(self, tmp_path, channels):
        raster = make_random_raster(6, 5, channels=channels, seed=4)
        path = tmp_path / 'nested' / 'out.png'
        save_image(raster, path)
        loaded = load_image(path)
        assert loaded.dtype == torch.uint8
        assert torch.equal(loaded, raster)

    def test_preview_writer_numbers_files(self, tmp_path):
        writer = PreviewWriter(tmp_path)
        raster = make_random_raster(2, 2, seed=0)
        first = writer.write(raster)
        second = writer.write(raster)
        assert first.name == 'previewIMG0.png'
        assert second.name == 'previewIMG1.png'
        assert writer.counter == 2


class TestHighlightSeam:
    def test_paints_one_pixel_per_row(self):
        raster = torch.zeros(3, 3, 4, dtype=torch.uint8)
        out = highlight_seam(raster, torch.tensor([0, 1, 3]), (255, 0, 0))
        assert out[0].tolist() == [
            [255, 0, 0, 0],
            [0, 255, 0, 0],
            [0, 0, 0, 255],
        ]
        assert out[1:].sum() == 0
        assert raster.sum() == 0

    def test_alpha_made_opaque(self):
        raster = torch.zeros(4, 2, 2, dtype=torch.uint8)
        out = highlight_seam(raster, torch.tensor([1, 0]), (0, 0, 255))
        assert out[:, 0, 1].tolist() == [0, 0, 255, 255]

    def test_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            highlight_seam(torch.zeros(3, 3, 3, dtype=torch.uint8), torch.tensor([0, 1]))


class TestConfig:
    def test_output_dir_precedence(self, monkeypatch):
        monkeypatch.delenv('SEAMEDIT_OUTPUT_DIR', raising=False)
        assert str(config.get_output_dir()) == config.DEFAULT_OUTPUT_DIR
        monkeypatch.setenv('SEAMEDIT_OUTPUT_DIR', 'from_env')
        assert str(config.get_output_dir()) == 'from_env'
        assert str(config.get_output_dir('explicit')) == 'explicit'

    def test_log_level(self, monkeypatch):
        monkeypatch.delenv('SEAMEDIT_LOG_LEVEL', raising=False)
        assert config.get_log_level() == logging.INFO
        assert config.get_log_level('debug') == logging.DEBUG
        with pytest.raises(ValueError):
            config.get_log_level('loud')

    def test_setup_logging_replaces_handlers(self, capsys):
        setup_logging(logging.WARNING)
        setup_logging(logging.INFO)
        logger = logging.getLogger('seamedit')
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO

        logging.getLogger('seamedit.editor').info("session ready")
        logging.getLogger('seamedit.editor').debug("hidden")
        out = capsys.readouterr().out
        assert 'seamedit.editor - INFO - session ready' in out
        assert 'hidden' not in out


def scripted(*answers):
    answers = iter(answers)

    def input_fn(prompt=''):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError
    return input_fn


class TestConsole:
    @pytest.fixture
    def image_path(self, tmp_path):
        path = tmp_path / 'input.png'
        save_image(make_random_raster(4, 5, seed=8), path)
        return path

    def test_session_writes_previews(self, tmp_path, image_path, capsys):
        out_dir = tmp_path / 'previews'
        code = main([str(image_path), '--output-dir', str(out_dir)],
                    input_fn=scripted('e', 'd', 'u', 'u', 'x', 'q'))
        assert code == 0
        # highlight, delete, first undo; the second undo has nothing to do
        assert sorted(p.name for p in out_dir.iterdir()) == [
            'previewIMG0.png', 'previewIMG1.png', 'previewIMG2.png']
        assert load_image(out_dir / 'previewIMG1.png').shape == (3, 4, 4)
        assert load_image(out_dir / 'previewIMG2.png').shape == (3, 4, 5)

        printed = capsys.readouterr().out
        assert 'Nothing left to undo.' in printed
        assert 'Invalid command. Please try again.' in printed
        assert 'Exiting...' in printed

    def test_prompts_until_file_exists(self, tmp_path, image_path, capsys):
        code = main(['--output-dir', str(tmp_path / 'out')],
                    input_fn=scripted(str(tmp_path / 'nope.png'), str(image_path), 'q'))
        assert code == 0
        assert 'The file does not exist' in capsys.readouterr().out

    def test_delete_without_highlight_writes_nothing(self, tmp_path, image_path):
        editor = SeamEditor.from_file(image_path)
        writer = PreviewWriter(tmp_path / 'out')
        run_session(editor, writer, scripted('d'))
        assert writer.counter == 0
        assert editor.width == 5

    def test_quitting_makes_edits_permanent(self, tmp_path, image_path):
        editor = SeamEditor.from_file(image_path)
        writer = PreviewWriter(tmp_path / 'out')
        run_session(editor, writer, scripted('e', 'd', 'q'))
        assert editor.width == 4
        assert not editor.can_undo
        assert editor.grid.check_links() == []
