"""
Interactive console for seam editing.

Usage:
    seamedit [image] [--output-dir DIR] [--log-level LEVEL]

Every highlight and every edit writes a numbered preview image to the
output directory.
"""

import argparse
import logging
from pathlib import Path
from typing import Callable, List, Optional

from .config import get_log_level, get_output_dir
from .editor import SeamEditor
from .io import PreviewWriter
from .logging_config import setup_logging
from .seam import Criterion

logger = logging.getLogger(__name__)

MENU = """
Please enter a command:
B - Highlight the bluest seam
E - Highlight the seam with the lowest energy
D - Delete the highlighted seam
U - Undo the last deletion
Q - Quit"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Content-aware image editing by seam removal")
    parser.add_argument('image', nargs='?', default=None, help="Path to the image to edit")
    parser.add_argument('--output-dir', default=None,
                        help="Directory for preview images (default: $SEAMEDIT_OUTPUT_DIR or target)")
    parser.add_argument('--log-level', default=None,
                        help="Logging level (default: $SEAMEDIT_LOG_LEVEL or INFO)")
    return parser


def prompt_for_image(path: Optional[str], input_fn: Callable[[str], str]) -> Path:
    """Ask until the path names an existing file."""
    while path is None or not Path(path).is_file():
        if path is not None:
            print("The file does not exist or is not accessible. Please try again.")
        path = input_fn("Please enter a valid image path: ").strip()
    return Path(path)


def run_session(editor: SeamEditor, writer: PreviewWriter,
                input_fn: Callable[[str], str] = input):
    """Menu loop; returns when the user quits or input runs out."""
    while True:
        print(MENU)
        try:
            choice = input_fn("Enter command: ").strip().lower()
        except EOFError:
            break

        if choice in ('b', 'e'):
            criterion = Criterion.MAX_BLUENESS if choice == 'b' else Criterion.MIN_ENERGY
            seam, preview = editor.highlight(criterion)
            if preview is not None:
                writer.write(preview)
        elif choice == 'd':
            if editor.remove() is not None:
                writer.write(editor.raster)
        elif choice == 'u':
            if editor.undo():
                writer.write(editor.raster)
            else:
                print("Nothing left to undo.")
        elif choice == 'q':
            break
        else:
            print("Invalid command. Please try again.")

    editor.close()
    print("Exiting...")


def main(argv: Optional[List[str]] = None, input_fn: Callable[[str], str] = input) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(get_log_level(args.log_level))

    path = prompt_for_image(args.image, input_fn)
    editor = SeamEditor.from_file(path)
    logger.info("Loaded %s (%dx%d)", path, editor.width, editor.height)

    writer = PreviewWriter(get_output_dir(args.output_dir))
    run_session(editor, writer, input_fn)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
